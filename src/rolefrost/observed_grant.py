from dataclasses import dataclass
from typing import Any, Mapping

from rolefrost.identifiers import split_identifier, unquote_identifier


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _object_type_key(object_type: str) -> str:
    # SHOW GRANTS reports e.g. MATERIALIZED_VIEW where GRANT takes MATERIALIZED VIEW
    return object_type.replace("_", " ").strip().upper()


@dataclass
class ObservedGrant:
    """
    A data class that represents one row returned by `SHOW GRANTS ON ...` or
    `SHOW FUTURE GRANTS IN ...`.

    Grants on existing objects report the object type in `granted_on` and the
    role that issued the grant in `granted_by`. Future grants report the
    object type in `grant_on` and have no `granted_by`.
    """

    privilege: str
    grantee_name: str
    grant_option: bool = False
    granted_on: str = ""
    grant_on: str = ""
    granted_to: str = ""
    granted_by: str = ""
    name: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ObservedGrant":
        columns = {str(key).lower(): value for key, value in row.items()}
        return cls(
            privilege=columns.get("privilege") or "",
            grantee_name=columns.get("grantee_name") or "",
            grant_option=_as_bool(columns.get("grant_option")),
            granted_on=columns.get("granted_on") or "",
            grant_on=columns.get("grant_on") or "",
            granted_to=columns.get("granted_to") or columns.get("grant_to") or "",
            granted_by=columns.get("granted_by") or "",
            name=columns.get("name") or "",
        )

    @property
    def grantee_role_name(self) -> str:
        """
        The unqualified grantee name. Database roles are reported qualified with
        their database, e.g. DB1."ROLE_1".
        """
        parts = split_identifier(self.grantee_name)
        return unquote_identifier(parts[-1]) if parts else ""

    def is_on(self, object_type: str) -> bool:
        """
        Returns `True` if the grant is on objects of the given type, either as a
        current (`granted_on`) or as a future (`grant_on`) grant.
        """
        wanted = _object_type_key(object_type)
        return bool(wanted) and wanted in (
            _object_type_key(self.granted_on),
            _object_type_key(self.grant_on),
        )
