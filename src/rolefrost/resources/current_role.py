from typing import Optional

from rolefrost.error import RemoteError
from rolefrost.logger import GLOBAL_LOGGER as logger
from rolefrost.snowflake_connector import SnowflakeConnector


def read_current_role(conn: SnowflakeConnector) -> Optional[str]:
    """
    The primary role in use for the current session, or None if it can not be
    determined.
    """
    try:
        return conn.get_current_role()
    except (RemoteError, IndexError, KeyError) as exc:
        logger.debug(f"current_role failed to decode: {exc}")
        return None
