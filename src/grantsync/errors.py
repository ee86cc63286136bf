class GrantError(Exception):
    """Base class for every error raised by grantsync."""


class EncodingError(GrantError, ValueError):
    """A grant identifier field cannot be encoded."""


class DecodingError(GrantError, ValueError):
    """A persisted grant identifier is malformed."""


class ConfigError(GrantError, ValueError):
    """Configuration or state data failed validation."""


class ExternalOperationError(GrantError):
    """The access-control system rejected a query, grant or revoke."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql
