from typing import Any, Dict, Optional

from rolefrost.error import ConfigurationError, NotFoundError
from rolefrost.grant_id import GrantIdentity
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.snowflake_connector import SnowflakeConnector
from rolefrost.snowflake_grants import SnowflakeGrantsGenerator, diff


class GrantPrivilegesToDatabaseRole:
    """
    Privileges granted to a database role on its database, on schemas or on
    schema objects.

    Every operation works on the GrantIdentity it is given and returns the
    identity as it is observed on Snowflake afterwards, or None when the
    database role does not exist anymore.
    """

    resource_type = "grant_privileges_to_database_role"
    identity_class = GrantIdentity

    def __init__(self, conn: SnowflakeConnector) -> None:
        self.conn = conn

    def create(self, identity: GrantIdentity) -> Optional[GrantIdentity]:
        generator = SnowflakeGrantsGenerator(identity)
        logger.info(
            f"Granting privileges on {generator.generate_grant_on()} "
            f"to database role {generator.database_role}"
        )
        self.conn.execute(generator.generate_grant_privileges())
        return self.read(identity)

    def read(self, identity: GrantIdentity) -> Optional[GrantIdentity]:
        """
        Narrow the privileges of the identity down to the ones still granted.

        ALL PRIVILEGES and ALL <objects> grants can not be listed by Snowflake,
        for those the identity is returned unchanged.
        """
        try:
            self.conn.get_database_role(identity.database_name, identity.role_name)
        except NotFoundError as exc:
            logger.debug(f"{exc}, it will be removed from state")
            return None

        generator = SnowflakeGrantsGenerator(identity)
        if identity.all_privileges:
            logger.debug(
                "Cannot read ALL PRIVILEGES granted to database role "
                f"{generator.database_role}, Snowflake does not report them"
            )
            return identity

        query = generator.generate_show_grants()
        if query is None:
            logger.debug(
                f"Cannot read grants on {generator.generate_grant_on()} to database "
                f"role {generator.database_role}, Snowflake does not report them"
            )
            return identity

        grants = self.conn.show_grants(query)
        return identity.with_privileges(generator.reconcile_privileges(grants))

    def update(
        self, identity: GrantIdentity, desired: GrantIdentity
    ) -> Optional[GrantIdentity]:
        """
        Revoke the privileges that are no longer wanted, then grant the new ones.
        Anything but the privileges changing requires a new resource.
        """
        if identity.requires_replacement(desired):
            raise ConfigurationError(
                "Only privileges can be updated in place, "
                f"{identity.encode()} has to be replaced by {desired.encode()}"
            )

        to_add, to_remove = diff(identity.privileges, desired.privileges)
        generator = SnowflakeGrantsGenerator(desired)
        logger.info(
            f"Database role {generator.database_role}: {len(to_remove)} privileges "
            f"to revoke, {len(to_add)} to grant"
        )

        if to_remove:
            self.conn.execute(generator.generate_revoke_privileges(to_remove))
        if to_add:
            self.conn.execute(generator.generate_grant_privileges(to_add))

        return self.read(desired)

    def delete(self, identity: GrantIdentity) -> None:
        generator = SnowflakeGrantsGenerator(identity)
        if not identity.all_privileges and not identity.privileges:
            logger.debug(
                f"No privileges left on {generator.generate_grant_on()} for "
                f"database role {generator.database_role}, nothing to revoke"
            )
            return

        logger.info(
            f"Revoking privileges on {generator.generate_grant_on()} "
            f"from database role {generator.database_role}"
        )
        self.conn.execute(generator.generate_revoke_privileges())

    @staticmethod
    def import_state(resource_id: str) -> Dict[str, Any]:
        """The resource definition an identifier was created from."""
        return GrantIdentity.decode(resource_id).to_config()
