from typing import Dict, List, NamedTuple, Optional, Set, Tuple, Union

import click

from rolefrost.error import (
    ConfigurationError,
    RecoverableRemoteError,
    SpecLoadingError,
)
from rolefrost.grant_id import DatabaseRoleGrantsIdentity, GrantIdentity
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.resources import RESOURCE_TYPES
from rolefrost.snowflake_connector import SnowflakeConnector
from rolefrost.spec_file_loader import load_spec

Identity = Union[GrantIdentity, DatabaseRoleGrantsIdentity]


def _require_privileges(config) -> None:
    if not (config.get("privileges") or config.get("all_privileges")):
        raise ConfigurationError("one of privileges or all_privileges must be set")


def _require_grantees(config) -> None:
    if not (config.get("roles") or config.get("users")):
        raise ConfigurationError("one of roles or users must be set")


class SpecResource(NamedTuple):
    name: str
    resource_type: str
    identity: Identity


class SnowflakeSpecLoader:
    def __init__(
        self,
        spec_path: str,
        conn: SnowflakeConnector = None,
        resources: Optional[List[str]] = None,
    ) -> None:
        if conn is None:
            conn = SnowflakeConnector()

        # Load the specification file and check for (syntactical) errors
        click.secho("Loading spec file", fg="green")
        self.spec = load_spec(spec_path)

        # Turn every resource definition into the identity it describes, this
        #  catches ambiguous targets and conflicting privilege options
        click.secho("Checking spec file for errors", fg="green")
        self.resources = self.generate_resources(resources)

        click.secho("Checking current snowflake connection", fg="green")
        self.check_connection(conn)

        # Connect to Snowflake to make sure that all entities referenced in the
        # spec file are defined in Snowflake (no missing databases, etc)
        click.secho(
            "Checking that all entities in the spec file are defined in Snowflake",
            fg="green",
        )
        self.check_entities_on_snowflake_server(conn)

    def generate_resources(
        self, only: Optional[List[str]] = None
    ) -> List[SpecResource]:
        """
        Build the identity of every resource in the spec, in the order the
        resource types are applied. `only` limits the result to the given names.

        Raises a SpecLoadingError listing every resource that can not be built.
        """
        error_messages = []
        resources = []

        for resource_type, resource_class in RESOURCE_TYPES.items():
            for resource_dict in self.spec.get(resource_type) or []:
                for name, config in resource_dict.items():
                    try:
                        if resource_type == "grant_privileges_to_database_role":
                            _require_privileges(config)
                        elif resource_type == "database_role_grants":
                            _require_grantees(config)
                        identity = resource_class.identity_class.from_config(config)
                    except ConfigurationError as exc:
                        error_messages.append(
                            f'Spec error: {resource_type} "{name}": {exc}'
                        )
                        continue
                    resources.append(SpecResource(name, resource_type, identity))

        if only:
            known = {resource.name for resource in resources}
            for name in only:
                if name not in known:
                    error_messages.append(
                        f'Spec error: resource "{name}" is not defined in the spec'
                    )
            resources = [resource for resource in resources if resource.name in only]

        if error_messages:
            raise SpecLoadingError("\n".join(error_messages))

        return resources

    def check_connection(self, conn: SnowflakeConnector) -> None:
        click.secho(f"  Current user is: {conn.get_current_user()}.", fg="green")
        click.secho(f"  Current role is: {conn.get_current_role()}.", fg="green")

    def _referenced(self) -> Dict[str, Set]:
        entities: Dict[str, Set] = {
            "databases": set(),
            "database_roles": set(),
            "roles": set(),
            "users": set(),
        }
        for resource in self.resources:
            identity = resource.identity
            entities["databases"].add(identity.database_name)
            entities["database_roles"].add(
                (identity.database_name, identity.role_name)
            )
            if isinstance(identity, DatabaseRoleGrantsIdentity):
                entities["roles"].update(identity.roles)
                entities["users"].update(identity.users)
        return entities

    def check_database_entities(self, conn, databases: Set[str]) -> List[str]:
        error_messages = []
        if databases:
            existing = conn.show_databases()
            for database in sorted(databases):
                if database not in existing:
                    error_messages.append(
                        f"Missing Entity Error: Database {database} was not found on"
                        " Snowflake Server. Please create it before continuing."
                    )
        else:
            logger.debug("No databases referenced, skipping SHOW DATABASES call.")
        return error_messages

    def check_database_role_entities(
        self, conn, database_roles: Set[Tuple[str, str]]
    ) -> List[str]:
        error_messages = []
        roles_by_database: Dict[str, Optional[List[str]]] = {}
        for database, role in sorted(database_roles):
            if database not in roles_by_database:
                try:
                    roles_by_database[database] = conn.show_database_roles(database)
                except RecoverableRemoteError:
                    # reported as a missing database
                    roles_by_database[database] = None
            existing = roles_by_database[database]
            if existing is not None and role not in existing:
                error_messages.append(
                    f"Missing Entity Error: Database Role {database}.{role} was not"
                    " found on Snowflake Server. Please create it before continuing."
                )
        return error_messages

    def check_role_entities(self, conn, roles: Set[str]) -> List[str]:
        error_messages = []
        if roles:
            existing = conn.show_roles()
            for role in sorted(roles):
                if role not in existing:
                    error_messages.append(
                        f"Missing Entity Error: Role {role} was not found on"
                        " Snowflake Server. Please create it before continuing."
                    )
        else:
            logger.debug("No roles referenced, skipping SHOW ROLES call.")
        return error_messages

    def check_user_entities(self, conn, users: Set[str]) -> List[str]:
        error_messages = []
        if users:
            existing = conn.show_users()
            for user in sorted(users):
                if user not in existing:
                    error_messages.append(
                        f"Missing Entity Error: User {user} was not found on"
                        " Snowflake Server. Please create it before continuing."
                    )
        else:
            logger.debug("No users referenced, skipping SHOW USERS call.")
        return error_messages

    def check_entities_on_snowflake_server(self, conn: SnowflakeConnector) -> None:
        """
        Make sure that all the databases, database roles, roles and users
        referenced in the spec are defined in Snowflake.

        Raises a SpecLoadingError with all the errors found while checking
        Snowflake for missing entities.
        """
        entities = self._referenced()

        error_messages = self.check_database_entities(conn, entities["databases"])
        error_messages.extend(
            self.check_database_role_entities(conn, entities["database_roles"])
        )
        error_messages.extend(self.check_role_entities(conn, entities["roles"]))
        error_messages.extend(self.check_user_entities(conn, entities["users"]))

        if error_messages:
            raise SpecLoadingError("\n".join(error_messages))
