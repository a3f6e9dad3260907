from rolefrost.resources.current_role import read_current_role
from rolefrost.resources.database_role_grants import DatabaseRoleGrants
from rolefrost.resources.grant_privileges_to_database_role import (
    GrantPrivilegesToDatabaseRole,
)

RESOURCE_TYPES = {
    resource.resource_type: resource
    for resource in (GrantPrivilegesToDatabaseRole, DatabaseRoleGrants)
}

__all__ = [
    "DatabaseRoleGrants",
    "GrantPrivilegesToDatabaseRole",
    "RESOURCE_TYPES",
    "read_current_role",
]
