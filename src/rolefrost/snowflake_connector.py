import os
from typing import Any, Dict, List, Optional

import sqlalchemy
from cryptography.hazmat.primitives import serialization
from snowflake.sqlalchemy import URL

from rolefrost.error import (
    OBJECT_DOES_NOT_EXIST_ERRNO,
    NotFoundError,
    RecoverableRemoteError,
    RemoteError,
)
from rolefrost.identifiers import fully_qualified_name, unquote_identifier
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.observed_grant import ObservedGrant

ENV_PREFIX = "ROLEFROST_"
CONFIG_KEYS = [
    "user",
    "password",
    "account",
    "database",
    "role",
    "warehouse",
    "oauth_token",
    "key_path",
    "key_passphrase",
    "authenticator",
]


def _like(pattern: str) -> str:
    escaped = pattern.replace("'", "''")
    return f" LIKE '{escaped}'"


def _url(**parameters: Optional[str]) -> str:
    # snowflake.sqlalchemy.URL renders every given parameter, unset ones are left out
    return URL(
        **{key: value for key, value in parameters.items() if value is not None}
    )


class SnowflakeConnector:
    def __init__(self, config: Optional[Dict] = None, dry: bool = False) -> None:
        """
        Connect to Snowflake with the given config or, when no config is given,
        with the ROLEFROST_* environment variables.

        dry: when True, GRANT/REVOKE statements passed to `execute` are only
            recorded, SHOW queries still run.
        """
        if not config:
            config = {
                key: os.getenv(f"{ENV_PREFIX}{key.upper()}") for key in CONFIG_KEYS
            }

        if config.get("oauth_token") is not None:
            self.engine = sqlalchemy.create_engine(
                _url(
                    user=config.get("user"),
                    account=config.get("account"),
                    authenticator="oauth",
                    token=config["oauth_token"],
                    warehouse=config.get("warehouse"),
                )
            )
        elif config.get("key_path") is not None:
            private_key = self.generate_private_key(
                config["key_path"], config.get("key_passphrase")
            )
            self.engine = sqlalchemy.create_engine(
                _url(
                    user=config.get("user"),
                    account=config.get("account"),
                    database=config.get("database"),
                    role=config.get("role"),
                    warehouse=config.get("warehouse"),
                ),
                connect_args={"private_key": private_key},
            )
        elif config.get("authenticator") is not None:
            self.engine = sqlalchemy.create_engine(
                _url(
                    user=config.get("user"),
                    account=config.get("account"),
                    database=config.get("database"),
                    role=config.get("role"),
                    warehouse=config.get("warehouse"),
                    authenticator=config["authenticator"],
                )
            )
        else:
            self.engine = sqlalchemy.create_engine(
                _url(
                    user=config.get("user"),
                    password=config.get("password"),
                    account=config.get("account"),
                    database=config.get("database"),
                    role=config.get("role"),
                    warehouse=config.get("warehouse"),
                )
            )

        self.dry = dry
        # Every statement passed to `execute`, with its outcome
        self.history: List[Dict[str, Any]] = []

    @staticmethod
    def generate_private_key(key_path: str, key_passphrase: Optional[str]) -> bytes:
        with open(key_path, "rb") as key_file:
            private_key = serialization.load_pem_private_key(
                key_file.read(),
                password=key_passphrase.encode() if key_passphrase else None,
            )

        return private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def run_query(self, query: str) -> List[Dict[str, Any]]:
        """
        Run a query and return its rows as dicts keyed by lower case column name.

        Raises a RemoteError when Snowflake rejects the query, or a
        RecoverableRemoteError when the failure is that a referenced object does
        not exist (or is not visible to the current role).
        """
        try:
            with self.engine.connect() as connection:
                result = connection.exec_driver_sql(query)
                if not result.returns_rows:
                    return []
                return [
                    {
                        str(column).lower(): value
                        for column, value in row._mapping.items()
                    }
                    for row in result
                ]
        except sqlalchemy.exc.DBAPIError as exc:
            error = RemoteError(query, exc)
            if error.errno == OBJECT_DOES_NOT_EXIST_ERRNO:
                raise RecoverableRemoteError(query, exc) from exc
            raise error from exc

    def execute(self, statement: str) -> None:
        """
        Run a statement that changes grants. The statement and whether it
        succeeded are added to `history`; in dry mode it is recorded with no
        status and not run.
        """
        command: Dict[str, Any] = {"sql": statement, "run_status": None}
        self.history.append(command)

        if self.dry:
            logger.info(f"Dry run, skipping: {statement}")
            return

        logger.debug(f"Running: {statement}")
        try:
            self.run_query(statement)
        except RemoteError:
            command["run_status"] = False
            raise
        command["run_status"] = True

    def get_current_user(self) -> str:
        result = self.run_query("SELECT CURRENT_USER() AS USER")
        return result[0]["user"]

    def get_current_role(self) -> str:
        result = self.run_query("SELECT CURRENT_ROLE() AS ROLE")
        return result[0]["role"]

    def show_databases(self) -> List[str]:
        return [row["name"] for row in self.run_query("SHOW TERSE DATABASES")]

    def show_roles(self, like: Optional[str] = None) -> List[str]:
        query = "SHOW ROLES"
        if like:
            query += _like(like)
        return [row["name"] for row in self.run_query(query)]

    def show_users(self, like: Optional[str] = None) -> List[str]:
        query = "SHOW USERS"
        if like:
            query += _like(like)
        return [row["name"] for row in self.run_query(query)]

    def show_database_roles(self, database: str) -> List[str]:
        """
        Names of the database roles in `database`. Older Snowflake releases
        report them qualified, e.g. DB1.ROLE_1, the database is stripped.
        """
        prefix = f"{database}."
        roles = []
        for row in self.run_query(
            f"SHOW DATABASE ROLES IN DATABASE {fully_qualified_name(database)}"
        ):
            name = row["name"]
            roles.append(name[len(prefix) :] if name.startswith(prefix) else name)
        return roles

    def get_database_role(self, database: str, role: str) -> str:
        """Raises a NotFoundError if the database or the database role is missing."""
        try:
            roles = self.show_database_roles(database)
        except RecoverableRemoteError as exc:
            raise NotFoundError(f"Database {database} not found") from exc

        if role not in roles:
            raise NotFoundError(f"Database role {database}.{role} not found")
        return role

    def show_grants(self, query: str) -> List[ObservedGrant]:
        """Run a SHOW GRANTS / SHOW FUTURE GRANTS query."""
        return [ObservedGrant.from_row(row) for row in self.run_query(query)]

    def show_grants_of_database_role(self, query: str) -> List[Dict[str, str]]:
        """
        Run a SHOW GRANTS OF DATABASE ROLE query, returning for each grant the
        grantee type (ROLE, USER, ...) and the unquoted grantee name.
        """
        return [
            {
                "granted_to": row.get("granted_to") or "",
                "grantee_name": unquote_identifier(row.get("grantee_name") or ""),
            }
            for row in self.run_query(query)
        ]

    def skip_last(self) -> None:
        """Mark the last executed statement as skipped, e.g. after a tolerated error."""
        if self.history:
            self.history[-1]["run_status"] = None
