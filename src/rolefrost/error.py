from typing import Optional

# 002003 (02000): SQL compilation error: ... does not exist or not authorized.
OBJECT_DOES_NOT_EXIST_ERRNO = 2003


class SpecLoadingError(Exception):
    """
    Raised when a spec file can not be loaded, is not valid or references
    entities that do not exist on the Snowflake server.
    """


class ConfigurationError(SpecLoadingError):
    """
    Raised when a resource definition (or a resource identifier) describes an
    ambiguous, incomplete or contradictory grant. Always raised before any
    statement is sent to Snowflake.
    """


class RemoteError(Exception):
    """A statement failed on the Snowflake server."""

    def __init__(self, statement: str, cause: Exception) -> None:
        self.statement = statement
        self.cause = cause
        super().__init__(f"Error running `{statement}`: {cause}")

    @property
    def errno(self) -> Optional[int]:
        # sqlalchemy wraps the driver error in `orig`
        driver_error = getattr(self.cause, "orig", self.cause)
        return getattr(driver_error, "errno", None)


class RecoverableRemoteError(RemoteError):
    """
    The statement failed because the object it references does not exist or is
    not visible to the current role. Callers decide whether that is fatal.
    """


class NotFoundError(Exception):
    """The database role a resource belongs to does not exist anymore."""
