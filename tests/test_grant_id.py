import pytest

from rolefrost import ConfigurationError
from rolefrost.grant_id import DatabaseRoleGrantsIdentity, GrantIdentity
from rolefrost.grant_target import ObjectsIn, OnDatabase, OnSchema, OnSchemaObject


@pytest.fixture
def usage_on_database():
    return GrantIdentity(
        role_name="ANALYST",
        database_name="SALES",
        target=OnDatabase(),
        privileges=("USAGE", "MONITOR"),
    )


class TestGrantIdentity:
    def test_privileges_are_sorted_and_unique(self):
        identity = GrantIdentity(
            "ANALYST", "SALES", OnDatabase(), privileges=("USAGE", "MONITOR", "USAGE")
        )
        assert identity.privileges == ("MONITOR", "USAGE")

    def test_encode_on_database(self, usage_on_database):
        assert (
            usage_on_database.encode()
            == "ANALYST|SALES|MONITOR,USAGE|false|false|true|false|false|false|false||||false|"
        )

    def test_encode_on_schema(self):
        identity = GrantIdentity(
            "ANALYST", "SALES", OnSchema(schema_name="REPORTING"), privileges=("USAGE",)
        )
        assert (
            identity.encode()
            == "ANALYST|SALES|USAGE|false|false|false|true|false|false|false||||false|REPORTING"
        )

    def test_encode_future_objects_in_schema(self):
        identity = GrantIdentity(
            "ANALYST",
            "SALES",
            OnSchemaObject(future=ObjectsIn("TABLES", in_schema="REPORTING")),
            privileges=("SELECT",),
            with_grant_option=True,
        )
        assert (
            identity.encode()
            == "ANALYST|SALES|SELECT|false|true|false|false|true|false|true|||TABLES|true|REPORTING"
        )

    def test_decode_all_objects_in_database(self):
        identity = GrantIdentity.decode(
            "ANALYST|SALES|SELECT|false|false|false|false|true|true|false|||VIEWS|false|"
        )
        assert identity == GrantIdentity(
            "ANALYST",
            "SALES",
            OnSchemaObject(all=ObjectsIn("VIEWS")),
            privileges=("SELECT",),
        )

    def test_decode_all_privileges_on_object(self):
        identity = GrantIdentity.decode(
            "ANALYST|SALES||true|false|false|false|true|false|false|TABLE|REPORTING.ORDERS||false|"
        )
        assert identity.all_privileges
        assert identity.privileges == ()
        assert identity.target == OnSchemaObject(
            object_type="TABLE", object_name="REPORTING.ORDERS"
        )

    def test_decode_empty_privileges(self):
        identity = GrantIdentity.decode(
            "ANALYST|SALES||false|false|true|false|false|false|false||||false|"
        )
        assert identity.privileges == ()
        assert identity.target == OnDatabase()

    @pytest.mark.parametrize(
        "target",
        [
            OnDatabase(),
            OnSchema(schema_name="REPORTING"),
            OnSchema(all_schemas=True),
            OnSchema(future_schemas=True),
            OnSchemaObject(object_type="TABLE", object_name="REPORTING.ORDERS"),
            OnSchemaObject(all=ObjectsIn("TABLES")),
            OnSchemaObject(all=ObjectsIn("VIEWS", "REPORTING")),
            OnSchemaObject(future=ObjectsIn("TABLES")),
            OnSchemaObject(future=ObjectsIn("STAGES", "REPORTING")),
        ],
    )
    @pytest.mark.parametrize("privileges", [(), ("USAGE", "MONITOR")])
    @pytest.mark.parametrize("with_grant_option", [False, True])
    def test_decode_encoded_identity(self, target, privileges, with_grant_option):
        identity = GrantIdentity(
            "ANALYST",
            "SALES",
            target,
            privileges=privileges,
            with_grant_option=with_grant_option,
        )
        assert GrantIdentity.decode(identity.encode()) == identity

    @pytest.mark.parametrize(
        "resource_id",
        [
            "ANALYST|SALES|USAGE",
            "ANALYST|SALES|USAGE|false|false|true|false|false|false|false||||false||",
            # no target
            "ANALYST|SALES|USAGE|false|false|false|false|false|false|false||||false|",
        ],
    )
    def test_decode_invalid(self, resource_id):
        with pytest.raises(ConfigurationError):
            GrantIdentity.decode(resource_id)

    def test_to_config(self):
        identity = GrantIdentity.decode(
            "ANALYST|SALES|SELECT|false|false|false|false|true|false|true|||TABLES|false|"
        )
        assert identity.to_config() == {
            "role_name": "ANALYST",
            "database_name": "SALES",
            "privileges": ["SELECT"],
            "all_privileges": False,
            "with_grant_option": False,
            "on_schema_object": {
                "future": {"object_type_plural": "TABLES", "in_database": True}
            },
        }

    def test_from_config_rejects_privileges_with_all_privileges(self):
        with pytest.raises(ConfigurationError, match="all_privileges"):
            GrantIdentity.from_config(
                {
                    "role_name": "ANALYST",
                    "database_name": "SALES",
                    "privileges": ["USAGE"],
                    "all_privileges": True,
                    "on_schema": {"schema_name": "REPORTING"},
                }
            )

    def test_from_config_rejects_all_privileges_on_database(self):
        with pytest.raises(ConfigurationError, match="on_database"):
            GrantIdentity.from_config(
                {
                    "role_name": "ANALYST",
                    "database_name": "SALES",
                    "all_privileges": True,
                    "on_database": True,
                }
            )

    def test_from_config_requires_names(self):
        with pytest.raises(ConfigurationError, match="role_name"):
            GrantIdentity.from_config({"database_name": "SALES", "on_database": True})

    def test_names_can_not_contain_the_delimiter(self):
        with pytest.raises(ConfigurationError):
            GrantIdentity("ANA|LYST", "SALES", OnDatabase(), privileges=("USAGE",))
        with pytest.raises(ConfigurationError):
            GrantIdentity("ANALYST", "SALES", OnSchema(schema_name="RE|PORTING"))
        with pytest.raises(ConfigurationError):
            GrantIdentity("ANALYST", "SALES", OnDatabase(), privileges=("USAGE,MONITOR",))

    def test_requires_replacement(self, usage_on_database):
        assert not usage_on_database.requires_replacement(
            usage_on_database.with_privileges(["USAGE"])
        )
        assert usage_on_database.requires_replacement(
            GrantIdentity(
                "ANALYST", "SALES", OnDatabase(), ("USAGE",), with_grant_option=True
            )
        )
        assert usage_on_database.requires_replacement(
            GrantIdentity("ANALYST", "SALES", OnSchema(all_schemas=True), ("USAGE",))
        )
        assert usage_on_database.requires_replacement(
            GrantIdentity("ANALYST", "FINANCE", OnDatabase(), ("USAGE",))
        )


class TestDatabaseRoleGrantsIdentity:
    def test_encode(self):
        identity = DatabaseRoleGrantsIdentity(
            "SALES", "ANALYST", roles=("REPORTING", "LOADER"), users=("ALICE",)
        )
        assert identity.encode() == "SALES|ANALYST|LOADER,REPORTING|ALICE"

    def test_decode(self):
        identity = DatabaseRoleGrantsIdentity.decode("SALES|ANALYST||ALICE,BOB")
        assert identity == DatabaseRoleGrantsIdentity(
            "SALES", "ANALYST", users=("BOB", "ALICE")
        )
        assert identity.roles == ()
        assert identity.users == ("ALICE", "BOB")

    def test_decode_requires_four_fields(self):
        with pytest.raises(ConfigurationError, match="expected 4"):
            DatabaseRoleGrantsIdentity.decode("SALES|ANALYST|REPORTING")

    def test_to_config(self):
        identity = DatabaseRoleGrantsIdentity.decode("SALES|ANALYST|REPORTING|")
        assert identity.to_config() == {
            "database_name": "SALES",
            "role_name": "ANALYST",
            "roles": ["REPORTING"],
            "users": [],
        }

    def test_requires_replacement(self):
        identity = DatabaseRoleGrantsIdentity("SALES", "ANALYST", roles=("REPORTING",))
        assert not identity.requires_replacement(
            identity.with_grantees([], ["ALICE"])
        )
        assert identity.requires_replacement(
            DatabaseRoleGrantsIdentity("SALES", "LOADER", roles=("REPORTING",))
        )

    def test_grantees_can_not_contain_delimiters(self):
        with pytest.raises(ConfigurationError):
            DatabaseRoleGrantsIdentity("SALES", "ANALYST", users=("AL,ICE",))
