"""
Converge the resources of a spec onto Snowflake, keeping the state file in
step with what was observed after every resource.
"""
from typing import Any, Iterable, Optional

from rolefrost.error import ConfigurationError
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.resources import RESOURCE_TYPES
from rolefrost.snowflake_connector import SnowflakeConnector
from rolefrost.state import StateFile


def _resource_class(resource_type: str):
    try:
        return RESOURCE_TYPES[resource_type]
    except KeyError:
        raise ConfigurationError(
            f"Unknown resource type {resource_type}, expected one of "
            f"{', '.join(RESOURCE_TYPES)}"
        )


class ResourceRunner:
    def __init__(self, conn: SnowflakeConnector, state: StateFile) -> None:
        self.conn = conn
        self.state = state

    @property
    def dry(self) -> bool:
        return self.conn.dry

    def _save(self) -> None:
        if self.dry:
            logger.debug("Dry run, not writing the state file")
            return
        self.state.save()

    def _store(self, name: str, resource_type: str, current: Optional[Any]) -> None:
        if current is None:
            self.state.remove(name)
        else:
            self.state.set(name, resource_type, current.encode())
        self._save()

    def _current(self, name: str) -> Optional[Any]:
        """The resource stored under `name`, as it is on Snowflake right now."""
        entry = self.state.get(name)
        if entry is None:
            return None

        resource = _resource_class(entry["type"])(self.conn)
        return resource.read(resource.identity_class.decode(entry["id"]))

    def apply(self, name: str, resource_type: str, desired: Any) -> Optional[Any]:
        """
        Make the resource `name` look like `desired`.

        A resource without a state entry, or whose database role is gone, is
        created. One that changed beyond its privileges or grantees is
        replaced. Otherwise only the difference is granted and revoked.
        """
        resource = _resource_class(resource_type)(self.conn)
        entry = self.state.get(name)

        if entry is not None and entry["type"] != resource_type:
            logger.info(f"{name} changed type from {entry['type']}, replacing it")
            self.destroy(name)
            entry = None

        current = self._current(name) if entry is not None else None

        if current is None:
            if entry is not None:
                logger.info(f"{name} no longer exists on Snowflake, creating it")
            else:
                logger.info(f"Creating {name}")
            current = resource.create(desired)
        elif current.requires_replacement(desired):
            logger.info(f"Replacing {name}")
            resource.delete(current)
            current = resource.create(desired)
        elif current != desired:
            logger.info(f"Updating {name}")
            current = resource.update(current, desired)
        else:
            logger.info(f"{name} is up to date")

        self._store(name, resource_type, current)
        return current

    def destroy(self, name: str) -> None:
        """Revoke everything the resource `name` granted and forget it."""
        entry = self.state.get(name)
        if entry is None:
            logger.warning(f"{name} not found in state, nothing to destroy")
            return

        resource = _resource_class(entry["type"])(self.conn)
        current = self._current(name)
        if current is None:
            logger.info(f"{name} no longer exists on Snowflake")
        else:
            logger.info(f"Destroying {name}")
            resource.delete(current)

        self._store(name, entry["type"], None)

    def prune(self, keep: Iterable[str]) -> None:
        """Destroy every resource in state that is not in `keep`."""
        keep = set(keep)
        for name in self.state.names():
            if name not in keep:
                self.destroy(name)

    def import_resource(self, name: str, resource_type: str, resource_id: str):
        """
        Read the resource an identifier describes and store it as `name`.

        Returns the configuration the identifier decodes to.
        """
        resource_class = _resource_class(resource_type)
        resource = resource_class(self.conn)

        current = resource.read(resource_class.identity_class.decode(resource_id))
        if current is None:
            raise ConfigurationError(
                f"Cannot import {name}: the database role of {resource_id} "
                "does not exist"
            )

        self._store(name, resource_type, current)
        return resource_class.import_state(resource_id)
