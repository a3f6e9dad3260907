from rolefrost.error import (
    ConfigurationError,
    NotFoundError,
    RecoverableRemoteError,
    RemoteError,
    SpecLoadingError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "NotFoundError",
    "RecoverableRemoteError",
    "RemoteError",
    "SpecLoadingError",
    "__version__",
]
