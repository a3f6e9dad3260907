import re
from typing import List

# A part is either a double quoted identifier (quotes escaped by doubling them)
# or a run of anything but dots
IDENTIFIER_PART = re.compile(r'"(?:[^"]|"")*"|[^.]+')


def is_quoted(part: str) -> bool:
    return len(part) >= 2 and part.startswith('"') and part.endswith('"')


def split_identifier(name: str) -> List[str]:
    """
    Split a (possibly) fully qualified name on the dots that separate its parts.

    Dots inside double quoted parts are kept:
    split_identifier('DB.SCHEMA."TABLE.1"') -> ['DB', 'SCHEMA', '"TABLE.1"']
    """
    return IDENTIFIER_PART.findall(name)


def unquote_identifier(part: str) -> str:
    if is_quoted(part):
        return part[1:-1].replace('""', '"')
    return part


def quote_identifier(part: str) -> str:
    """Parts that are already quoted are returned untouched."""
    if is_quoted(part):
        return part
    escaped = part.replace('"', '""')
    return f'"{escaped}"'


def fully_qualified_name(*names: str) -> str:
    """
    Join and quote names into a single fully qualified name, each name can
    itself be qualified:

    fully_qualified_name("DB", "SCHEMA.TABLE") -> '"DB"."SCHEMA"."TABLE"'
    """
    return ".".join(
        quote_identifier(part) for name in names for part in split_identifier(name)
    )
