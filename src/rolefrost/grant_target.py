"""
The objects a database role can be granted privileges on.

A grant target is exactly one of:

    OnDatabase()                                  ON DATABASE <db>
    OnSchema(schema_name=...)                     ON SCHEMA <db>.<schema>
    OnSchema(all_schemas=True)                    ON ALL SCHEMAS IN DATABASE <db>
    OnSchema(future_schemas=True)                 ON FUTURE SCHEMAS IN DATABASE <db>
    OnSchemaObject(object_type=..., object_name=...)
    OnSchemaObject(all=ObjectsIn(...))            ON ALL <plural> IN ...
    OnSchemaObject(future=ObjectsIn(...))         ON FUTURE <plural> IN ...

The database itself is not part of the target, it always is the database the
role lives in.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from rolefrost.error import ConfigurationError

OBJECT_TYPES = {
    "ALERT": "ALERTS",
    "DYNAMIC TABLE": "DYNAMIC TABLES",
    "EVENT TABLE": "EVENT TABLES",
    "FILE FORMAT": "FILE FORMATS",
    "FUNCTION": "FUNCTIONS",
    "PROCEDURE": "PROCEDURES",
    "SECRET": "SECRETS",
    "SEQUENCE": "SEQUENCES",
    "PIPE": "PIPES",
    "MASKING POLICY": "MASKING POLICIES",
    "PASSWORD POLICY": "PASSWORD POLICIES",
    "ROW ACCESS POLICY": "ROW ACCESS POLICIES",
    "SESSION POLICY": "SESSION POLICIES",
    "TAG": "TAGS",
    "STAGE": "STAGES",
    "STREAM": "STREAMS",
    "TABLE": "TABLES",
    "EXTERNAL TABLE": "EXTERNAL TABLES",
    "TASK": "TASKS",
    "VIEW": "VIEWS",
    "MATERIALIZED VIEW": "MATERIALIZED VIEWS",
}

PLURAL_OBJECT_TYPES = {plural: singular for singular, plural in OBJECT_TYPES.items()}

TARGET_OPTIONS = ("on_database", "on_schema", "on_schema_object")
ON_SCHEMA_OPTIONS = ("schema_name", "all_schemas", "future_schemas")
OBJECTS_IN_OPTIONS = ("in_database", "in_schema")


@dataclass(frozen=True)
class OnDatabase:
    pass


@dataclass(frozen=True)
class OnSchema:
    schema_name: str = ""
    all_schemas: bool = False
    future_schemas: bool = False


@dataclass(frozen=True)
class ObjectsIn:
    """Every (or every future) object of a type, in the database or in one schema."""

    object_type_plural: str
    in_schema: str = ""

    @property
    def in_database(self) -> bool:
        return not self.in_schema

    @property
    def object_type(self) -> str:
        return PLURAL_OBJECT_TYPES[self.object_type_plural]


@dataclass(frozen=True)
class OnSchemaObject:
    object_type: str = ""
    object_name: str = ""
    all: Optional[ObjectsIn] = None
    future: Optional[ObjectsIn] = None

    @property
    def objects_in(self) -> Optional[ObjectsIn]:
        return self.all or self.future


GrantTarget = Union[OnDatabase, OnSchema, OnSchemaObject]


def _populated(config: Mapping[str, Any], options: Sequence[str]) -> List[str]:
    return [option for option in options if config.get(option)]


def _exactly_one(
    config: Mapping[str, Any], options: Sequence[str], where: str
) -> str:
    populated = _populated(config, options)
    if len(populated) != 1:
        found = ", ".join(populated) if populated else "none"
        raise ConfigurationError(
            f"{where}exactly one of {', '.join(options)} must be set, found: {found}"
        )
    return populated[0]


def _as_mapping(value: Any, option: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{option} must be a mapping, got {value!r}")
    return value


def _objects_in_from_config(config: Mapping[str, Any], option: str) -> ObjectsIn:
    where = f"on_schema_object.{option}: "
    plural = str(config.get("object_type_plural") or "").upper()
    if plural not in PLURAL_OBJECT_TYPES:
        raise ConfigurationError(
            f"{where}invalid object_type_plural {plural!r}, expected one of "
            f"{', '.join(PLURAL_OBJECT_TYPES)}"
        )
    _exactly_one(config, OBJECTS_IN_OPTIONS, where)
    return ObjectsIn(object_type_plural=plural, in_schema=config.get("in_schema") or "")


def _on_schema_from_config(config: Mapping[str, Any]) -> OnSchema:
    _exactly_one(config, ON_SCHEMA_OPTIONS, "on_schema: ")
    return OnSchema(
        schema_name=config.get("schema_name") or "",
        all_schemas=bool(config.get("all_schemas")),
        future_schemas=bool(config.get("future_schemas")),
    )


def _on_schema_object_from_config(config: Mapping[str, Any]) -> OnSchemaObject:
    object_type = str(config.get("object_type") or "").upper()
    object_name = config.get("object_name") or ""
    if bool(object_type) != bool(object_name):
        raise ConfigurationError(
            "on_schema_object: object_type and object_name must be set together"
        )

    shape = _exactly_one(
        config, ("object_type", "all", "future"), "on_schema_object: "
    )
    if shape == "object_type":
        if object_type not in OBJECT_TYPES:
            raise ConfigurationError(
                f"on_schema_object: invalid object_type {object_type!r}, expected "
                f"one of {', '.join(OBJECT_TYPES)}"
            )
        return OnSchemaObject(object_type=object_type, object_name=object_name)

    objects_in = _objects_in_from_config(
        _as_mapping(config[shape], f"on_schema_object.{shape}"), shape
    )
    return OnSchemaObject(**{shape: objects_in})


def target_from_config(config: Mapping[str, Any]) -> GrantTarget:
    """
    Build the grant target from the `on_*` options of a resource definition.

    Options that are false, empty or missing do not count as set. Raises a
    ConfigurationError unless exactly one target (and exactly one variant of
    that target) is described.
    """
    option = _exactly_one(config, TARGET_OPTIONS, "")

    if option == "on_database":
        return OnDatabase()
    if option == "on_schema":
        return _on_schema_from_config(_as_mapping(config[option], option))
    return _on_schema_object_from_config(_as_mapping(config[option], option))


def _objects_in_to_config(objects_in: ObjectsIn) -> Dict[str, Any]:
    config: Dict[str, Any] = {"object_type_plural": objects_in.object_type_plural}
    if objects_in.in_schema:
        config["in_schema"] = objects_in.in_schema
    else:
        config["in_database"] = True
    return config


def target_to_config(target: GrantTarget) -> Dict[str, Any]:
    """Inverse of `target_from_config`, only the populated options are returned."""
    if isinstance(target, OnDatabase):
        return {"on_database": True}

    if isinstance(target, OnSchema):
        on_schema = {
            option: value
            for option, value in (
                ("schema_name", target.schema_name),
                ("all_schemas", target.all_schemas),
                ("future_schemas", target.future_schemas),
            )
            if value
        }
        return {"on_schema": on_schema}

    if target.all is not None:
        on_schema_object: Dict[str, Any] = {"all": _objects_in_to_config(target.all)}
    elif target.future is not None:
        on_schema_object = {"future": _objects_in_to_config(target.future)}
    else:
        on_schema_object = {
            "object_type": target.object_type,
            "object_name": target.object_name,
        }
    return {"on_schema_object": on_schema_object}
