import pytest
import yaml

from rolefrost import SpecLoadingError
from rolefrost.state import StateFile


@pytest.fixture
def state_path(mkdtemp):
    return str(mkdtemp() / "rolefrost.state.yml")


def test_missing_state_file_is_empty(state_path):
    state = StateFile.load(state_path)

    assert state.names() == []
    assert state.get("analyst_usage") is None


def test_save_and_load(state_path):
    state = StateFile.load(state_path)
    state.set("analyst_members", "database_role_grants", "SALES|ANALYST|REPORTING|")
    state.set(
        "analyst_usage",
        "grant_privileges_to_database_role",
        "ANALYST|SALES|USAGE|false|false|true|false|false|false|false||||false|",
    )
    state.save()

    with open(state_path) as stream:
        saved = yaml.safe_load(stream)
    assert saved["version"] == "1"
    assert saved["resources"]["analyst_members"] == {
        "type": "database_role_grants",
        "id": "SALES|ANALYST|REPORTING|",
    }

    loaded = StateFile.load(state_path)
    assert loaded.names() == ["analyst_members", "analyst_usage"]
    assert loaded.get("analyst_usage")["type"] == "grant_privileges_to_database_role"


def test_remove(state_path):
    state = StateFile(state_path)
    state.set("analyst_members", "database_role_grants", "SALES|ANALYST|REPORTING|")

    state.remove("analyst_members")
    state.remove("never_stored")

    assert state.names() == []


def test_invalid_state_file(state_path):
    with open(state_path, "w") as stream:
        yaml.safe_dump({"resources": {"analyst": {"type": "warehouse"}}}, stream)

    with pytest.raises(SpecLoadingError) as exc:
        StateFile.load(state_path)

    assert "resources.analyst.id: required field" in str(exc.value)
    assert "resources.analyst.type: unallowed value warehouse" in str(exc.value)
