"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
the whole family with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails."""

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation requires a record that does not exist.

    Optional lookups return None instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (unique skill per user, duplicate token hash, ...)."""

    pass


class SchemaNotReadyError(PersistenceError):
    """Raised when a table the operation needs has not been provisioned yet.

    Notification paths treat this as "no data yet" rather than a failure.
    """

    pass
