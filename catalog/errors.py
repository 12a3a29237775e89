"""Exceptions and result types for the resource catalog."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class CatalogError(Exception):
    """Base class for all catalog errors."""


class ResourceValidationError(CatalogError, ValueError):
    """A resource or its source message failed validation."""


class MalformedEmbedError(ResourceValidationError):
    """An embed is missing one of title, description or url."""

    def __init__(self, index: int, missing: list[str]):
        self.index = index
        self.missing = missing
        super().__init__(
            f"Embed #{index} is missing required field(s): {', '.join(missing)}"
        )


class StoreError(CatalogError):
    """The backing store could not complete an operation."""


class ConnectivityError(StoreError):
    """The backing store is unreachable or the connection dropped."""


class QueryError(StoreError):
    """The backing store rejected or failed to execute a query."""


class StoreErrorKind(str, Enum):
    """Why an insert did not go through."""

    VALIDATION = "validation"
    CONNECTIVITY = "connectivity"
    QUERY_FAILURE = "query_failure"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of ResourceStore.insert.

    Truthy exactly when the row was written, so callers that only care
    about success can keep treating it as a bool.
    """

    ok: bool
    error: Optional[StoreErrorKind] = None
    detail: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "InsertResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: StoreErrorKind, detail: str) -> "InsertResult":
        return cls(ok=False, error=error, detail=detail)


_CONNECTIVITY_ERRORS = (
    OSError,
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
)


def is_connectivity_error(exc: BaseException) -> bool:
    """Return True if exc means the backend could not be reached."""
    return isinstance(exc, _CONNECTIVITY_ERRORS)


def translate_backend_error(exc: BaseException) -> StoreError:
    """Map a driver/SQLAlchemy exception onto the catalog's store errors."""
    if is_connectivity_error(exc):
        return ConnectivityError(str(exc))
    if isinstance(exc, SQLAlchemyError):
        return QueryError(str(exc))
    return QueryError(repr(exc))
