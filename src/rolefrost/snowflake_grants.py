from typing import Iterable, List, Optional, Set, Tuple

from rolefrost.error import ConfigurationError
from rolefrost.grant_id import GrantIdentity
from rolefrost.grant_target import OnDatabase, OnSchema, OnSchemaObject
from rolefrost.identifiers import fully_qualified_name
from rolefrost.observed_grant import ObservedGrant

GRANT_PRIVILEGES_TEMPLATE = (
    "GRANT {privileges} ON {grant_on} TO DATABASE ROLE {database_role}"
)

REVOKE_PRIVILEGES_TEMPLATE = (
    "REVOKE {privileges} ON {grant_on} FROM DATABASE ROLE {database_role}"
)

WITH_GRANT_OPTION = " WITH GRANT OPTION"

ALL_PRIVILEGES = "ALL PRIVILEGES"

GRANT_DATABASE_ROLE_TEMPLATE = (
    'GRANT DATABASE ROLE "{database_name}.{role_name}" TO {type} "{grantee_name}"'
)

REVOKE_DATABASE_ROLE_TEMPLATE = (
    'REVOKE DATABASE ROLE "{database_name}.{role_name}" FROM {type} "{grantee_name}"'
)

SHOW_GRANTS_ON_TEMPLATE = "SHOW GRANTS ON {object_type} {object_name}"

SHOW_FUTURE_GRANTS_IN_TEMPLATE = "SHOW FUTURE GRANTS IN {grouping_type} {grouping_name}"

SHOW_GRANTS_OF_DATABASE_ROLE_TEMPLATE = (
    'SHOW GRANTS OF DATABASE ROLE "{database_name}.{role_name}"'
)


def diff(old: Iterable[str], new: Iterable[str]) -> Tuple[Set[str], Set[str]]:
    """
    Compute what has to change to go from the `old` set to the `new` set.

    Returns a tuple (to_add, to_remove) where to_add = new - old and
    to_remove = old - new. The two sets never overlap.
    """
    old_set, new_set = set(old), set(new)
    return new_set - old_set, old_set - new_set


def generate_grant_database_role(
    database_name: str, role_name: str, grantee_type: str, grantee_name: str
) -> str:
    """grantee_type: "ROLE" or "USER" """
    return GRANT_DATABASE_ROLE_TEMPLATE.format(
        database_name=database_name,
        role_name=role_name,
        type=grantee_type,
        grantee_name=grantee_name,
    )


def generate_revoke_database_role(
    database_name: str, role_name: str, grantee_type: str, grantee_name: str
) -> str:
    return REVOKE_DATABASE_ROLE_TEMPLATE.format(
        database_name=database_name,
        role_name=role_name,
        type=grantee_type,
        grantee_name=grantee_name,
    )


def generate_show_grants_of_database_role(database_name: str, role_name: str) -> str:
    return SHOW_GRANTS_OF_DATABASE_ROLE_TEMPLATE.format(
        database_name=database_name, role_name=role_name
    )


class SnowflakeGrantsGenerator:
    def __init__(self, identity: GrantIdentity) -> None:
        """
        Initializes a grants generator, used to generate the SQL that grants,
        revokes and reads back the privileges of one GrantIdentity.

        identity: the database role, the target and the privileges, e.g.
            GrantIdentity(role_name="ANALYST", database_name="SALES",
                          target=OnDatabase(), privileges=("USAGE",))
        """
        self.identity = identity

    @property
    def database_role(self) -> str:
        return fully_qualified_name(
            self.identity.database_name, self.identity.role_name
        )

    @property
    def is_future(self) -> bool:
        target = self.identity.target
        if isinstance(target, OnSchema):
            return target.future_schemas
        if isinstance(target, OnSchemaObject):
            return target.future is not None
        return False

    @property
    def granted_on(self) -> str:
        """The object type grants on this target are reported with."""
        target = self.identity.target
        if isinstance(target, OnDatabase):
            return "DATABASE"
        if isinstance(target, OnSchema):
            return "SCHEMA"
        if target.objects_in is not None:
            return target.objects_in.object_type
        return target.object_type

    def _database(self) -> str:
        return fully_qualified_name(self.identity.database_name)

    def _in_database_object(self, name: str) -> str:
        return fully_qualified_name(self.identity.database_name, name)

    def generate_grant_on(self) -> str:
        """
        Render the target of the grant, i.e. everything between ON and TO/FROM.

        For example:
        OnSchema(all_schemas=True) -> 'ALL SCHEMAS IN DATABASE "SALES"'
        """
        target = self.identity.target

        if isinstance(target, OnDatabase):
            return f"DATABASE {self._database()}"

        if isinstance(target, OnSchema):
            if target.all_schemas:
                return f"ALL SCHEMAS IN DATABASE {self._database()}"
            if target.future_schemas:
                return f"FUTURE SCHEMAS IN DATABASE {self._database()}"
            return f"SCHEMA {self._in_database_object(target.schema_name)}"

        objects_in = target.objects_in
        if objects_in is None:
            return (
                f"{target.object_type} {self._in_database_object(target.object_name)}"
            )

        scope = "ALL" if target.all is not None else "FUTURE"
        if objects_in.in_database:
            grouping = f"DATABASE {self._database()}"
        else:
            grouping = f"SCHEMA {self._in_database_object(objects_in.in_schema)}"
        return f"{scope} {objects_in.object_type_plural} IN {grouping}"

    def _generate_privileges(self, privileges: Optional[Iterable[str]]) -> str:
        if privileges is None:
            if self.identity.all_privileges:
                return ALL_PRIVILEGES
            privileges = self.identity.privileges

        privileges = sorted(privileges)
        if not privileges:
            raise ConfigurationError(
                f"No privileges to grant to database role {self.database_role}"
            )
        return ", ".join(privileges)

    def generate_grant_privileges(
        self, privileges: Optional[Iterable[str]] = None
    ) -> str:
        """
        Generate the GRANT statement for the identity. `privileges` overrides
        the privileges of the identity, e.g. to grant only the ones added by an
        update.
        """
        statement = GRANT_PRIVILEGES_TEMPLATE.format(
            privileges=self._generate_privileges(privileges),
            grant_on=self.generate_grant_on(),
            database_role=self.database_role,
        )
        if self.identity.with_grant_option:
            statement += WITH_GRANT_OPTION
        return statement

    def generate_revoke_privileges(
        self, privileges: Optional[Iterable[str]] = None
    ) -> str:
        return REVOKE_PRIVILEGES_TEMPLATE.format(
            privileges=self._generate_privileges(privileges),
            grant_on=self.generate_grant_on(),
            database_role=self.database_role,
        )

    def generate_show_grants(self) -> Optional[str]:
        """
        Generate the statement that lists the grants on the target.

        Returns None for ALL SCHEMAS / ALL <objects> targets: Snowflake records
        those as grants on every single object and has no way to list them as
        one grant.
        """
        target = self.identity.target

        if isinstance(target, OnDatabase):
            return SHOW_GRANTS_ON_TEMPLATE.format(
                object_type="DATABASE", object_name=self._database()
            )

        if isinstance(target, OnSchema):
            if target.all_schemas:
                return None
            if target.future_schemas:
                return SHOW_FUTURE_GRANTS_IN_TEMPLATE.format(
                    grouping_type="DATABASE", grouping_name=self._database()
                )
            return SHOW_GRANTS_ON_TEMPLATE.format(
                object_type="SCHEMA",
                object_name=self._in_database_object(target.schema_name),
            )

        if target.all is not None:
            return None

        if target.future is not None:
            if target.future.in_database:
                return SHOW_FUTURE_GRANTS_IN_TEMPLATE.format(
                    grouping_type="DATABASE", grouping_name=self._database()
                )
            return SHOW_FUTURE_GRANTS_IN_TEMPLATE.format(
                grouping_type="SCHEMA",
                grouping_name=self._in_database_object(target.future.in_schema),
            )

        return SHOW_GRANTS_ON_TEMPLATE.format(
            object_type=target.object_type,
            object_name=self._in_database_object(target.object_name),
        )

    def reconcile_privileges(self, grants: Iterable[ObservedGrant]) -> List[str]:
        """
        Given the grants shown on the target, return the privileges of the
        identity that are still granted.

        A grant only counts when it is one of the privileges of the identity, it
        has the same grant option, it was given to this database role, it was
        issued by someone (future grants excepted) and it is on the object type
        of the target. Privileges the identity does not hold are never returned.
        """
        identity = self.identity
        privileges = set()

        for grant in grants:
            if grant.privilege not in identity.privileges:
                continue
            if grant.grant_option != identity.with_grant_option:
                continue
            if grant.grantee_role_name != identity.role_name:
                continue
            # future grants have no granted_by, current grants without one were
            # not created by a GRANT statement
            if not self.is_future and not grant.granted_by:
                continue
            if grant.is_on(self.granted_on):
                privileges.add(grant.privilege)

        return sorted(privileges)
