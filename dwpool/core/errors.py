"""
Exceptions and the error-masking policy shared by all warehouse adapters.

Configuration and key-material errors are raised internally and turned into a
``False`` return by ``create_pool``. Connect and query errors reach the caller.
"""

from typing import NoReturn

GENERIC_ERROR = "An error occurred communicating with the database."


class WarehouseError(Exception):
    """Base class for errors raised by dwpool."""


class DataSourceConfigError(WarehouseError, ValueError):
    """Raised when a datasource record is missing, incomplete or ambiguous."""


class KeyMaterialError(WarehouseError, ValueError):
    """Raised when a Snowflake private key cannot be resolved or loaded."""


class ConnectError(WarehouseError):
    """Raised when a pool cannot be obtained for a datasource. Never masked."""


class QueryError(WarehouseError):
    """Raised when a query fails. Message is masked when HIDE_DB_ERRORS is set."""


def describe_error(err: BaseException) -> str:
    """Message for *err*; falls back to the class name so it is never empty."""
    message = str(err).strip()
    return message or type(err).__name__


class ErrorPolicy:
    """Decide whether the raw driver error or GENERIC_ERROR reaches the caller."""

    def __init__(self, hide_errors: bool = False) -> None:
        self.hide_errors = bool(hide_errors)

    def wrap(self, err: BaseException) -> QueryError:
        if self.hide_errors:
            return QueryError(GENERIC_ERROR)
        return QueryError(describe_error(err))

    def raise_from(self, err: BaseException) -> NoReturn:
        """
        Raise the QueryError for *err*.

        When hiding, the driver error is not chained so it cannot leak through
        ``__cause__`` to callers that serialise exceptions.
        """
        if self.hide_errors:
            raise self.wrap(err) from None
        raise self.wrap(err) from err
