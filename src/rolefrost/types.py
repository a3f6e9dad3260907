from typing import Dict, List, TypedDict


class ObjectsInSchema(TypedDict, total=False):
    object_type_plural: str
    in_database: bool
    in_schema: str


class OnSchemaSchema(TypedDict, total=False):
    schema_name: str
    all_schemas: bool
    future_schemas: bool


class OnSchemaObjectSchema(TypedDict, total=False):
    object_type: str
    object_name: str
    all: ObjectsInSchema
    future: ObjectsInSchema


class GrantPrivilegesToDatabaseRoleSchemaBase(TypedDict):
    role_name: str
    database_name: str


class GrantPrivilegesToDatabaseRoleSchema(
    GrantPrivilegesToDatabaseRoleSchemaBase, total=False
):
    privileges: List[str]
    all_privileges: bool
    with_grant_option: bool
    on_database: bool
    on_schema: OnSchemaSchema
    on_schema_object: OnSchemaObjectSchema


class DatabaseRoleGrantsSchemaBase(TypedDict):
    database_name: str
    role_name: str


class DatabaseRoleGrantsSchema(DatabaseRoleGrantsSchemaBase, total=False):
    roles: List[str]
    users: List[str]


class RolefrostSpecSchema(TypedDict, total=False):
    version: str
    grant_privileges_to_database_role: List[
        Dict[str, GrantPrivilegesToDatabaseRoleSchema]
    ]
    database_role_grants: List[Dict[str, DatabaseRoleGrantsSchema]]


class StateEntrySchema(TypedDict):
    type: str
    id: str


class StateFileSchema(TypedDict, total=False):
    version: str
    resources: Dict[str, StateEntrySchema]
