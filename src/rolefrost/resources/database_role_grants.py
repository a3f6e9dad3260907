from typing import Any, Dict, List, Optional

from rolefrost.error import ConfigurationError, NotFoundError, RecoverableRemoteError
from rolefrost.grant_id import DatabaseRoleGrantsIdentity
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.snowflake_connector import SnowflakeConnector
from rolefrost.snowflake_grants import (
    diff,
    generate_grant_database_role,
    generate_revoke_database_role,
    generate_show_grants_of_database_role,
)


class DatabaseRoleGrants:
    """The account roles and users a database role is granted to."""

    resource_type = "database_role_grants"
    identity_class = DatabaseRoleGrantsIdentity

    def __init__(self, conn: SnowflakeConnector) -> None:
        self.conn = conn

    def create(
        self, identity: DatabaseRoleGrantsIdentity
    ) -> Optional[DatabaseRoleGrantsIdentity]:
        if not identity.roles and not identity.users:
            raise ConfigurationError(
                "No users or roles specified for database role grants of "
                f"{identity.database_name}.{identity.role_name}"
            )

        for role in identity.roles:
            self._grant(identity, "ROLE", role)
        for user in identity.users:
            self._grant(identity, "USER", user)

        return self.read(identity)

    def read(
        self, identity: DatabaseRoleGrantsIdentity
    ) -> Optional[DatabaseRoleGrantsIdentity]:
        """
        Keep the roles and users of the identity the database role is still
        granted to. Grants to anyone else are ignored.
        """
        try:
            self.conn.get_database_role(identity.database_name, identity.role_name)
        except NotFoundError as exc:
            logger.debug(f"{exc}, it will be removed from state")
            return None

        roles: List[str] = []
        users: List[str] = []
        grants = self.conn.show_grants_of_database_role(
            generate_show_grants_of_database_role(
                identity.database_name, identity.role_name
            )
        )
        for grant in grants:
            grantee = grant["grantee_name"]
            if grant["granted_to"] == "ROLE":
                if grantee in identity.roles:
                    roles.append(grantee)
            elif grant["granted_to"] == "USER":
                if grantee in identity.users:
                    users.append(grantee)
            else:
                logger.warning(f"Ignoring unknown grant type {grant['granted_to']}")

        return identity.with_grantees(roles, users)

    def update(
        self, identity: DatabaseRoleGrantsIdentity, desired: DatabaseRoleGrantsIdentity
    ) -> Optional[DatabaseRoleGrantsIdentity]:
        if identity.requires_replacement(desired):
            raise ConfigurationError(
                "Only roles and users can be updated in place, "
                f"{identity.encode()} has to be replaced by {desired.encode()}"
            )

        for grantee_type, old, new in (
            ("USER", identity.users, desired.users),
            ("ROLE", identity.roles, desired.roles),
        ):
            to_add, to_remove = diff(old, new)
            for grantee in sorted(to_remove):
                self._revoke(identity, grantee_type, grantee)
            for grantee in sorted(to_add):
                self._grant(identity, grantee_type, grantee)

        return self.read(desired)

    def delete(self, identity: DatabaseRoleGrantsIdentity) -> None:
        for role in identity.roles:
            self._revoke(identity, "ROLE", role)
        for user in identity.users:
            self._revoke(identity, "USER", user)

    @staticmethod
    def import_state(resource_id: str) -> Dict[str, Any]:
        return DatabaseRoleGrantsIdentity.decode(resource_id).to_config()

    def _grant(
        self, identity: DatabaseRoleGrantsIdentity, grantee_type: str, grantee: str
    ) -> None:
        self.conn.execute(
            generate_grant_database_role(
                identity.database_name, identity.role_name, grantee_type, grantee
            )
        )

    def _revoke(
        self, identity: DatabaseRoleGrantsIdentity, grantee_type: str, grantee: str
    ) -> None:
        """
        Revoke the database role from a role or user. If Snowflake reports the
        grantee as missing and it really is gone, there is nothing to revoke.
        """
        try:
            self.conn.execute(
                generate_revoke_database_role(
                    identity.database_name, identity.role_name, grantee_type, grantee
                )
            )
        except RecoverableRemoteError:
            if self._grantee_exists(grantee_type, grantee):
                raise
            self.conn.skip_last()
            logger.warning(
                f"{grantee_type.title()} {grantee} does not exist. No need to revoke "
                f"database role {identity.database_name}.{identity.role_name}"
            )

    def _grantee_exists(self, grantee_type: str, grantee: str) -> bool:
        if grantee_type == "ROLE":
            return grantee in self.conn.show_roles(like=grantee)
        return grantee in self.conn.show_users(like=grantee)
