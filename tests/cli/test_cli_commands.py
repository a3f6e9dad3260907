import logging
import os

import pytest
import yaml

import rolefrost
from rolefrost.cli import cli
from rolefrost.grant_id import GrantIdentity
from rolefrost.grant_target import OnDatabase
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.observed_grant import ObservedGrant
from rolefrost.state import StateFile

SPEC = """
grant_privileges_to_database_role:
  - analyst_usage:
      role_name: ANALYST
      database_name: SALES
      privileges: [USAGE]
      on_database: true
"""

USAGE_ID = GrantIdentity("ANALYST", "SALES", OnDatabase(), ("USAGE",)).encode()


@pytest.fixture
def snowflake(mock_connector, mocker):
    """Every connection the commands open is the same mock connector."""

    def connect(dry=False):
        mock_connector.dry = dry
        return mock_connector

    mocker.patch("rolefrost.cli.grants.SnowflakeConnector", side_effect=connect)
    mocker.patch.object(mock_connector, "show_databases", return_value=["SALES"])
    mocker.patch.object(
        mock_connector, "show_database_roles", return_value=["ANALYST"]
    )
    mocker.patch.object(
        mock_connector,
        "show_grants",
        return_value=[
            ObservedGrant(
                privilege="USAGE",
                grantee_name='SALES."ANALYST"',
                granted_on="DATABASE",
                granted_by="SECURITYADMIN",
            )
        ],
    )
    return mock_connector


@pytest.fixture
def workdir(mkdtemp, pushd):
    path = mkdtemp()
    pushd(path)
    (path / "roles.yml").write_text(SPEC)
    return path


def test_version(cli_runner):
    cli_version = cli_runner.invoke(cli, ["--version"])
    assert cli_version.output == f"rolefrost, version {rolefrost.__version__}\n"


@pytest.mark.parametrize("command", ["run", "spec-test", "destroy", "import"])
def test_help(cli_runner, command):
    result = cli_runner.invoke(cli.commands[command], ["--help"])
    assert result.output.startswith("Usage")


def test_run(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(cli, ["run", "roles.yml"])

    assert result.exit_code == 0, result.output
    assert (
        '[SUCCESS] GRANT USAGE ON DATABASE "SALES" TO DATABASE ROLE "SALES"."ANALYST";'
        in result.output
    )
    assert StateFile.load("rolefrost.state.yml").get("analyst_usage") == {
        "type": "grant_privileges_to_database_role",
        "id": USAGE_ID,
    }


def test_run_dry(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(cli, ["run", "roles.yml", "--dry"])

    assert result.exit_code == 0, result.output
    assert "[PENDING] GRANT USAGE" in result.output
    assert not os.path.exists("rolefrost.state.yml")


def test_run_with_state_option(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(cli, ["run", "roles.yml", "--state", "grants.yml"])

    assert result.exit_code == 0, result.output
    assert StateFile.load("grants.yml").names() == ["analyst_usage"]


def test_run_up_to_date(cli_runner, snowflake, workdir):
    state = StateFile("rolefrost.state.yml")
    state.set("analyst_usage", "grant_privileges_to_database_role", USAGE_ID)
    state.save()

    result = cli_runner.invoke(cli, ["run", "roles.yml"])

    assert result.exit_code == 0, result.output
    assert "No changes required." in result.output


def test_run_prunes_resources_removed_from_the_spec(cli_runner, snowflake, workdir):
    state = StateFile("rolefrost.state.yml")
    state.set("analyst_usage", "grant_privileges_to_database_role", USAGE_ID)
    state.set("old_usage", "grant_privileges_to_database_role", USAGE_ID)
    state.save()

    result = cli_runner.invoke(cli, ["run", "roles.yml"])

    assert result.exit_code == 0, result.output
    assert "[SUCCESS] REVOKE USAGE ON DATABASE" in result.output
    assert StateFile.load("rolefrost.state.yml").names() == ["analyst_usage"]


def test_run_single_resource_does_not_prune(cli_runner, snowflake, workdir):
    state = StateFile("rolefrost.state.yml")
    state.set("other", "database_role_grants", "SALES|ANALYST||ALICE")
    state.save()

    result = cli_runner.invoke(
        cli, ["run", "roles.yml", "--resource", "analyst_usage"]
    )

    assert result.exit_code == 0, result.output
    assert "REVOKE" not in result.output
    assert StateFile.load("rolefrost.state.yml").names() == [
        "analyst_usage",
        "other",
    ]


def test_run_failure(cli_runner, snowflake, workdir, mocker):
    mocker.patch.object(
        snowflake,
        "run_query",
        side_effect=rolefrost.RemoteError("GRANT", Exception("insufficient privileges")),
    )

    result = cli_runner.invoke(cli, ["run", "roles.yml"])

    assert result.exit_code == 1
    assert "[ERROR] GRANT USAGE" in result.output
    assert "insufficient privileges" in result.output


def test_spec_test(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(cli, ["spec-test", "roles.yml"])

    assert result.exit_code == 0, result.output
    assert "Snowflake specs successfully loaded" in result.output


def test_spec_test_errors(cli_runner, snowflake, workdir):
    (workdir / "roles.yml").write_text(SPEC.replace("SALES", "FINANCE"))

    result = cli_runner.invoke(cli, ["spec-test", "roles.yml"])

    assert result.exit_code == 1
    assert "Missing Entity Error: Database FINANCE was not found" in result.output


def test_destroy(cli_runner, snowflake, workdir):
    state = StateFile("rolefrost.state.yml")
    state.set("analyst_usage", "grant_privileges_to_database_role", USAGE_ID)
    state.save()

    result = cli_runner.invoke(cli, ["destroy"])

    assert result.exit_code == 0, result.output
    assert (
        '[SUCCESS] REVOKE USAGE ON DATABASE "SALES" FROM DATABASE ROLE "SALES"."ANALYST";'
        in result.output
    )
    assert StateFile.load("rolefrost.state.yml").names() == []


def test_import(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(
        cli,
        ["import", "analyst_usage", "grant_privileges_to_database_role", USAGE_ID],
    )

    assert result.exit_code == 0, result.output
    imported = yaml.safe_load(result.output.split("Imported analyst_usage:\n")[1])
    assert imported["grant_privileges_to_database_role"][0]["analyst_usage"][
        "privileges"
    ] == ["USAGE"]
    assert StateFile.load("rolefrost.state.yml").names() == ["analyst_usage"]


def test_import_invalid_id(cli_runner, snowflake, workdir):
    result = cli_runner.invoke(
        cli, ["import", "analyst_usage", "grant_privileges_to_database_role", "A|B"]
    )

    assert result.exit_code == 1
    assert "expected 15" in result.output


def test_current_role(cli_runner, snowflake):
    result = cli_runner.invoke(cli, ["current-role"])

    assert result.exit_code == 0
    assert result.output == "SECURITYADMIN\n"


@pytest.mark.parametrize(
    "flags, level",
    [([], logging.WARNING), (["-v"], logging.INFO), (["-vvv"], logging.DEBUG)],
)
def test_verbosity(cli_runner, snowflake, flags, level):
    cli_runner.invoke(cli, flags + ["current-role"])

    assert logger.level == level
