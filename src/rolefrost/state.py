import os
from typing import Dict, List, Optional

import cerberus
import yaml

from rolefrost.error import SpecLoadingError
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.spec_file_loader import flatten_errors
from rolefrost.spec_schemas.snowflake import ROLEFROST_STATE_SCHEMA
from rolefrost.types import StateEntrySchema, StateFileSchema

STATE_VERSION = "1"
DEFAULT_STATE_PATH = "rolefrost.state.yml"


class StateFile:
    """
    The resources rolefrost manages, by name, with the type and identifier of
    each of them as last observed on Snowflake.
    """

    def __init__(
        self, path: str, resources: Optional[Dict[str, StateEntrySchema]] = None
    ) -> None:
        self.path = path
        self.resources: Dict[str, StateEntrySchema] = dict(resources or {})

    @classmethod
    def load(cls, path: str) -> "StateFile":
        """
        Load the state file at `path`. A missing file is an empty state.

        Raises a SpecLoadingError if the file is not a valid state file.
        """
        if not os.path.exists(path):
            logger.debug(f"State file {path} not found, starting from scratch")
            return cls(path)

        try:
            with open(path, "r") as stream:
                state = yaml.safe_load(stream) or {}
        except yaml.YAMLError as exc:
            raise SpecLoadingError(f"State File {path} is not valid YAML: {exc}")

        validator = cerberus.Validator(yaml.safe_load(ROLEFROST_STATE_SCHEMA))
        if not validator.validate(state):
            raise SpecLoadingError(
                "\n".join(
                    f"State error: {path}, field {field}: {err_msg}"
                    for field, err_msg in flatten_errors(validator.errors)
                )
            )

        return cls(path, state.get("resources"))

    def get(self, name: str) -> Optional[StateEntrySchema]:
        return self.resources.get(name)

    def set(self, name: str, resource_type: str, resource_id: str) -> None:
        self.resources[name] = {"type": resource_type, "id": resource_id}

    def remove(self, name: str) -> None:
        self.resources.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self.resources)

    def save(self) -> None:
        state: StateFileSchema = {"version": STATE_VERSION, "resources": self.resources}
        with open(self.path, "w") as stream:
            yaml.safe_dump(state, stream, default_flow_style=False)
