"""
Resource identities and their identifier strings.

The identifier is what gets persisted in the state file. It holds every
attribute of a resource so that the resource can be read, updated, deleted and
imported from the identifier alone:

    grant_privileges_to_database_role (15 fields)
        role|database|priv1,priv2|all_privileges|with_grant_option|on_database|
        on_schema|on_schema_object|all|future|object_type|object_name|
        object_type_plural|in_schema|schema_name

    database_role_grants (4 fields)
        database|role|role1,role2|user1,user2

Booleans are rendered as "true"/"false". Delimiters are not escaped, names
containing them are rejected instead.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from rolefrost.error import ConfigurationError
from rolefrost.grant_target import (
    GrantTarget,
    OnDatabase,
    OnSchema,
    OnSchemaObject,
    target_from_config,
    target_to_config,
)

ID_DELIMITER = "|"
LIST_DELIMITER = ","

GRANT_PRIVILEGES_ID_FIELDS = 15
DATABASE_ROLE_GRANTS_ID_FIELDS = 4


def _encode_bool(value: bool) -> str:
    return "true" if value else "false"


def _decode_bool(value: str) -> bool:
    return value == "true"


def _decode_list(value: str) -> List[str]:
    # An empty segment is an empty list, not a list with one empty string
    return [item for item in value.split(LIST_DELIMITER) if item]


def _normalize(items: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(items)))


def _split_id(resource_id: str, fields: int, kind: str) -> List[str]:
    parts = resource_id.split(ID_DELIMITER)
    if len(parts) != fields:
        raise ConfigurationError(
            f"Invalid {kind} identifier {resource_id!r}: expected {fields} "
            f"'{ID_DELIMITER}' separated fields, got {len(parts)}"
        )
    return parts


def _check_delimiters(names: Mapping[str, str], items: Mapping[str, Iterable[str]]):
    for field, name in names.items():
        if ID_DELIMITER in name:
            raise ConfigurationError(
                f"{field} {name!r} can not contain '{ID_DELIMITER}'"
            )
    for field, values in items.items():
        for value in values:
            if ID_DELIMITER in value or LIST_DELIMITER in value:
                raise ConfigurationError(
                    f"{field} entry {value!r} can not contain "
                    f"'{ID_DELIMITER}' or '{LIST_DELIMITER}'"
                )


def _required(config: Mapping[str, Any], option: str) -> str:
    value = config.get(option)
    if not value:
        raise ConfigurationError(f"{option} is required")
    return value


@dataclass(frozen=True)
class GrantIdentity:
    """
    Everything needed to grant, read back and revoke a set of privileges given
    to a database role on one target.
    """

    role_name: str
    database_name: str
    target: GrantTarget
    privileges: Tuple[str, ...] = ()
    all_privileges: bool = False
    with_grant_option: bool = False

    def __post_init__(self):
        object.__setattr__(self, "privileges", _normalize(self.privileges))

        names = {"role_name": self.role_name, "database_name": self.database_name}
        if isinstance(self.target, OnSchema):
            names["schema_name"] = self.target.schema_name
        elif isinstance(self.target, OnSchemaObject):
            names["object_name"] = self.target.object_name
            if self.target.objects_in is not None:
                names["in_schema"] = self.target.objects_in.in_schema
        _check_delimiters(names, {"privileges": self.privileges})

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "GrantIdentity":
        """
        Build the identity from a `grant_privileges_to_database_role` definition.

        Raises a ConfigurationError for conflicting privilege options or an
        ambiguous target. An empty privilege list is allowed here, it is what a
        resource looks like once every privilege it granted was revoked.
        """
        privileges = list(config.get("privileges") or [])
        all_privileges = bool(config.get("all_privileges"))
        target = target_from_config(config)

        if all_privileges and privileges:
            raise ConfigurationError(
                "privileges and all_privileges can not be set together"
            )
        if all_privileges and isinstance(target, OnDatabase):
            raise ConfigurationError(
                "all_privileges can not be granted together with on_database"
            )

        return cls(
            role_name=_required(config, "role_name"),
            database_name=_required(config, "database_name"),
            target=target,
            privileges=tuple(privileges),
            all_privileges=all_privileges,
            with_grant_option=bool(config.get("with_grant_option")),
        )

    def to_config(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "role_name": self.role_name,
            "database_name": self.database_name,
            "privileges": list(self.privileges),
            "all_privileges": self.all_privileges,
            "with_grant_option": self.with_grant_option,
        }
        config.update(target_to_config(self.target))
        return config

    def with_privileges(self, privileges: Iterable[str]) -> "GrantIdentity":
        return replace(self, privileges=tuple(privileges))

    def requires_replacement(self, desired: "GrantIdentity") -> bool:
        """Only the privileges can change in place, anything else needs a new grant."""
        return self.with_privileges(desired.privileges) != desired

    def encode(self) -> str:
        target = self.target
        on_schema = isinstance(target, OnSchema)
        on_schema_object = isinstance(target, OnSchemaObject)

        all_, future, in_schema = False, False, False
        object_type, object_name, object_type_plural, schema_name = "", "", "", ""
        if isinstance(target, OnSchema):
            all_, future = target.all_schemas, target.future_schemas
            schema_name = target.schema_name
        elif isinstance(target, OnSchemaObject):
            object_type, object_name = target.object_type, target.object_name
            objects_in = target.objects_in
            if objects_in is not None:
                all_, future = target.all is not None, target.future is not None
                object_type_plural = objects_in.object_type_plural
                in_schema = not objects_in.in_database
                schema_name = objects_in.in_schema

        return ID_DELIMITER.join(
            [
                self.role_name,
                self.database_name,
                LIST_DELIMITER.join(self.privileges),
                _encode_bool(self.all_privileges),
                _encode_bool(self.with_grant_option),
                _encode_bool(isinstance(target, OnDatabase)),
                _encode_bool(on_schema),
                _encode_bool(on_schema_object),
                _encode_bool(all_),
                _encode_bool(future),
                object_type,
                object_name,
                object_type_plural,
                _encode_bool(in_schema),
                schema_name,
            ]
        )

    @classmethod
    def decode(cls, resource_id: str) -> "GrantIdentity":
        (
            role_name,
            database_name,
            privileges,
            all_privileges,
            with_grant_option,
            on_database,
            on_schema,
            on_schema_object,
            all_,
            future,
            object_type,
            object_name,
            object_type_plural,
            in_schema,
            schema_name,
        ) = _split_id(
            resource_id,
            GRANT_PRIVILEGES_ID_FIELDS,
            "grant_privileges_to_database_role",
        )

        config: Dict[str, Any] = {
            "role_name": role_name,
            "database_name": database_name,
            "privileges": _decode_list(privileges),
            "all_privileges": _decode_bool(all_privileges),
            "with_grant_option": _decode_bool(with_grant_option),
            "on_database": _decode_bool(on_database),
        }
        if _decode_bool(on_schema):
            config["on_schema"] = {
                "schema_name": schema_name,
                "all_schemas": _decode_bool(all_),
                "future_schemas": _decode_bool(future),
            }
        if _decode_bool(on_schema_object):
            objects_in = {
                "object_type_plural": object_type_plural,
                "in_database": not _decode_bool(in_schema),
                "in_schema": schema_name if _decode_bool(in_schema) else "",
            }
            config["on_schema_object"] = {
                "object_type": object_type,
                "object_name": object_name,
                "all": objects_in if _decode_bool(all_) else None,
                "future": objects_in if _decode_bool(future) else None,
            }

        return cls.from_config(config)


@dataclass(frozen=True)
class DatabaseRoleGrantsIdentity:
    """The account roles and users a database role is granted to."""

    database_name: str
    role_name: str
    roles: Tuple[str, ...] = ()
    users: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "roles", _normalize(self.roles))
        object.__setattr__(self, "users", _normalize(self.users))
        _check_delimiters(
            {"database_name": self.database_name, "role_name": self.role_name},
            {"roles": self.roles, "users": self.users},
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DatabaseRoleGrantsIdentity":
        return cls(
            database_name=_required(config, "database_name"),
            role_name=_required(config, "role_name"),
            roles=tuple(config.get("roles") or []),
            users=tuple(config.get("users") or []),
        )

    def to_config(self) -> Dict[str, Any]:
        return {
            "database_name": self.database_name,
            "role_name": self.role_name,
            "roles": list(self.roles),
            "users": list(self.users),
        }

    def with_grantees(
        self, roles: Iterable[str], users: Iterable[str]
    ) -> "DatabaseRoleGrantsIdentity":
        return replace(self, roles=tuple(roles), users=tuple(users))

    def requires_replacement(self, desired: "DatabaseRoleGrantsIdentity") -> bool:
        return (self.database_name, self.role_name) != (
            desired.database_name,
            desired.role_name,
        )

    def encode(self) -> str:
        return ID_DELIMITER.join(
            [
                self.database_name,
                self.role_name,
                LIST_DELIMITER.join(self.roles),
                LIST_DELIMITER.join(self.users),
            ]
        )

    @classmethod
    def decode(cls, resource_id: str) -> "DatabaseRoleGrantsIdentity":
        database_name, role_name, roles, users = _split_id(
            resource_id, DATABASE_ROLE_GRANTS_ID_FIELDS, "database_role_grants"
        )
        return cls.from_config(
            {
                "database_name": database_name,
                "role_name": role_name,
                "roles": _decode_list(roles),
                "users": _decode_list(users),
            }
        )
