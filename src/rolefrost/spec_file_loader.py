from typing import Any, Dict, List

import cerberus
import yaml

from rolefrost.error import SpecLoadingError
from rolefrost.spec_schemas.snowflake import (
    ROLEFROST_SPEC_DATABASE_ROLE_GRANTS_SCHEMA,
    ROLEFROST_SPEC_GRANT_PRIVILEGES_SCHEMA,
    ROLEFROST_SPEC_SCHEMA,
)
from rolefrost.types import RolefrostSpecSchema

VALIDATION_ERR_MSG = 'Spec error: {} "{}", field "{}": {}'

RESOURCE_SCHEMAS = {
    "grant_privileges_to_database_role": ROLEFROST_SPEC_GRANT_PRIVILEGES_SCHEMA,
    "database_role_grants": ROLEFROST_SPEC_DATABASE_ROLE_GRANTS_SCHEMA,
}


def flatten_errors(errors: Dict[Any, List[Any]], prefix: str = "") -> List[tuple]:
    """
    Cerberus reports errors of nested fields as a dict inside the error list,
    e.g. {"on_schema": [{"all_schemas": ["must be of boolean type"]}]}.

    Returns (field, message) tuples with dotted field names, e.g.
    ("on_schema.all_schemas", "must be of boolean type").
    """
    flattened = []
    for field, messages in errors.items():
        field_name = f"{prefix}{field}"
        for message in messages:
            if isinstance(message, dict):
                flattened.extend(flatten_errors(message, f"{field_name}."))
            else:
                flattened.append((field_name, message))
    return flattened


def ensure_valid_schema(spec: Dict) -> List[str]:
    """
    Ensure that the provided spec has no schema errors.

    Returns a list with all the errors found.
    """
    error_messages = []

    validator = cerberus.Validator(yaml.safe_load(ROLEFROST_SPEC_SCHEMA))
    validator.validate(spec)
    for field, err_msg in flatten_errors(validator.errors):
        error_messages.append(f"Spec error: {field}: {err_msg}")

    if error_messages:
        return error_messages

    validators = {
        resource_type: cerberus.Validator(yaml.safe_load(schema))
        for resource_type, schema in RESOURCE_SCHEMAS.items()
    }

    seen_names = set()
    for resource_type, validator in validators.items():
        for resource_dict in spec.get(resource_type) or []:
            for resource_name, config in resource_dict.items():
                if resource_name in seen_names:
                    error_messages.append(
                        f'Spec error: {resource_type} "{resource_name}": '
                        "resource names must be unique"
                    )
                seen_names.add(resource_name)

                validator.validate(config)
                for field, err_msg in flatten_errors(validator.errors):
                    error_messages.append(
                        VALIDATION_ERR_MSG.format(
                            resource_type, resource_name, field, err_msg
                        )
                    )

    return error_messages


def load_spec(spec_path: str) -> RolefrostSpecSchema:
    """
    Load a grants specification from a file.

    Raises a SpecLoadingError with all the errors found in the spec if the
    file can not be found or at least an error is found during validation.

    Returns the spec as a dictionary if everything is OK
    """
    try:
        with open(spec_path, "r") as stream:
            spec = yaml.safe_load(stream)
    except FileNotFoundError:
        raise SpecLoadingError(f"Spec File {spec_path} not found")
    except yaml.YAMLError as exc:
        raise SpecLoadingError(f"Spec File {spec_path} is not valid YAML: {exc}")

    if not isinstance(spec, dict):
        raise SpecLoadingError(f"Spec File {spec_path} does not define any resources")

    error_messages = ensure_valid_schema(spec)
    if error_messages:
        raise SpecLoadingError("\n".join(error_messages))

    return spec
