import sys

import click
import yaml

from rolefrost import RemoteError, SpecLoadingError
from rolefrost.resource_runner import ResourceRunner
from rolefrost.resources import RESOURCE_TYPES, read_current_role
from rolefrost.snowflake_connector import SnowflakeConnector
from rolefrost.snowflake_spec_loader import SnowflakeSpecLoader
from rolefrost.state import DEFAULT_STATE_PATH, StateFile

from . import cli

state_option = click.option(
    "--state",
    envvar="ROLEFROST_STATE",
    default=DEFAULT_STATE_PATH,
    show_default=True,
    help="Path of the state file.",
)


def print_command(command, dry=False):
    """Prints the queries to the command line with prefixes"""
    if command.get("run_status"):
        foreground_color = "green"
        run_prefix = "[SUCCESS] "
    elif command.get("run_status") is None and dry:
        foreground_color = "cyan"
        run_prefix = "[PENDING] "
    elif command.get("run_status") is None:
        foreground_color = "cyan"
        run_prefix = "[SKIPPED] "
    else:
        foreground_color = "red"
        run_prefix = "[ERROR] "

    click.secho(f"{run_prefix}{command['sql']};", fg=foreground_color)


def print_history(conn):
    click.secho()
    if conn.history:
        click.secho("SQL Commands run for given spec file:")
    else:
        click.secho("No changes required.")
    click.secho()

    for command in conn.history:
        print_command(command, dry=conn.dry)


def load_specs(spec, conn, resources=None):
    """
    Load specs separately.
    """
    try:
        click.secho("Confirming spec loads successfully")
        spec_loader = SnowflakeSpecLoader(spec, conn=conn, resources=resources)
        click.secho("Snowflake specs successfully loaded", fg="green")
    except SpecLoadingError as exc:
        for line in str(exc).splitlines():
            click.secho(line, fg="red")
        sys.exit(1)

    return spec_loader


def load_state(state):
    try:
        return StateFile.load(state)
    except SpecLoadingError as exc:
        for line in str(exc).splitlines():
            click.secho(line, fg="red")
        sys.exit(1)


def converge(conn, callback):
    """Run `callback`, then print every statement it issued and how it went."""
    try:
        callback()
    except (RemoteError, SpecLoadingError) as exc:
        print_history(conn)
        click.secho(str(exc), fg="red")
        sys.exit(1)
    print_history(conn)


@cli.command()  # type: ignore
@click.argument("spec")
@state_option
@click.option("--dry", help="Do not actually run, just check.", is_flag=True)
@click.option(
    "--resource",
    multiple=True,
    default=[],
    help="Run grants for specific resources only. "
    "Usage: --resource analyst_usage --resource analyst_members.",
)
def run(spec, state, dry, resource):
    """
    Converge the grants described in the provided specification file onto Snowflake
    """
    conn = SnowflakeConnector(dry=dry)
    spec_loader = load_specs(spec, conn, resources=list(resource))
    runner = ResourceRunner(conn, load_state(state))

    def apply_all():
        for spec_resource in spec_loader.resources:
            runner.apply(
                spec_resource.name, spec_resource.resource_type, spec_resource.identity
            )
        # resources dropped from the spec are only revoked on full runs
        if not resource:
            runner.prune(spec_resource.name for spec_resource in spec_loader.resources)

    converge(conn, apply_all)


@cli.command(name="spec-test")  # type: ignore
@click.argument("spec")
def spec_test(spec):
    """
    Load the spec file provided and check it against Snowflake, without granting
    anything. CLI use only for confirming specifications are valid.
    """
    load_specs(spec, SnowflakeConnector(dry=True))


@cli.command()  # type: ignore
@click.argument("names", nargs=-1)
@state_option
@click.option("--dry", help="Do not actually run, just check.", is_flag=True)
def destroy(names, state, dry):
    """
    Revoke the grants of the resources in the state file, or only of the named ones
    """
    conn = SnowflakeConnector(dry=dry)
    runner = ResourceRunner(conn, load_state(state))

    def destroy_all():
        for name in names or runner.state.names():
            runner.destroy(name)

    converge(conn, destroy_all)


@cli.command(name="import")  # type: ignore
@click.argument("name")
@click.argument("resource_type", type=click.Choice(list(RESOURCE_TYPES)))
@click.argument("resource_id")
@state_option
def import_(name, resource_type, resource_id, state):
    """
    Add existing grants to the state file, given their identifier
    """
    conn = SnowflakeConnector()
    runner = ResourceRunner(conn, load_state(state))

    try:
        config = runner.import_resource(name, resource_type, resource_id)
    except (RemoteError, SpecLoadingError) as exc:
        click.secho(str(exc), fg="red")
        sys.exit(1)

    click.secho(f"Imported {name}:", fg="green")
    click.echo(
        yaml.safe_dump(
            {resource_type: [{name: config}]}, default_flow_style=False, sort_keys=False
        )
    )


@cli.command(name="current-role")  # type: ignore
def current_role():
    """
    Print the role used by the current Snowflake connection
    """
    role = read_current_role(SnowflakeConnector())
    if role is None:
        click.secho("Current role could not be determined", fg="red")
        sys.exit(1)
    click.echo(role)
