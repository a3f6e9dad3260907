"""
This file describes the expected schema for a spec file and for a state file.
These schemas are used to both parse and validate those files.
"""

ROLEFROST_SPEC_SCHEMA = """
    version:
        type: string
        required: False

    grant_privileges_to_database_role:
        type: list
        schema:
            type: dict
            keysrules:
                type: string
            valuesrules:
                type: dict
    database_role_grants:
        type: list
        schema:
            type: dict
            keysrules:
                type: string
            valuesrules:
                type: dict
    """

ROLEFROST_SPEC_GRANT_PRIVILEGES_SCHEMA = """
    role_name:
        type: string
        required: True
        empty: False
    database_name:
        type: string
        required: True
        empty: False
    privileges:
        type: list
        schema:
            type: string
            empty: False
    all_privileges:
        type: boolean
        required: False
    with_grant_option:
        type: boolean
        required: False
    on_database:
        type: boolean
        required: False
    on_schema:
        type: dict
        schema:
            schema_name:
                type: string
            all_schemas:
                type: boolean
            future_schemas:
                type: boolean
    on_schema_object:
        type: dict
        schema:
            object_type:
                type: string
            object_name:
                type: string
            all: &objects_in
                type: dict
                schema:
                    object_type_plural:
                        type: string
                        required: True
                    in_database:
                        type: boolean
                    in_schema:
                        type: string
            future: *objects_in
    """

ROLEFROST_SPEC_DATABASE_ROLE_GRANTS_SCHEMA = """
    database_name:
        type: string
        required: True
        empty: False
    role_name:
        type: string
        required: True
        empty: False
    roles:
        type: list
        schema:
            type: string
            empty: False
    users:
        type: list
        schema:
            type: string
            empty: False
    """

ROLEFROST_STATE_SCHEMA = """
    version:
        type: string
        required: False
    resources:
        type: dict
        keysrules:
            type: string
        valuesrules:
            type: dict
            schema:
                type:
                    type: string
                    required: True
                    allowed:
                        - grant_privileges_to_database_role
                        - database_role_grants
                id:
                    type: string
                    required: True
    """
