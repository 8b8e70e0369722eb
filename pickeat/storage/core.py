"""Errors and transaction handling shared by the storage functions."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from typing import Any

__all__ = [
    "StorageError",
    "UnreachableError",
    "DatabaseError",
    "OtherStorageError",
    "IsolationLevel",
    "to_storage_error",
    "transaction",
]

_REPEATABLE_READ = "SET TRANSACTION ISOLATION LEVEL REPEATABLE READ;"

# Driver exceptions whose name tells that the server could not be talked to.
_UNREACHABLE_NAMES = frozenset(
    {"OperationalError", "InterfaceError", "PoolTimeout", "PoolClosed"}
)


class StorageError(Exception):
    """Base class of the errors raised by the storage layer."""

    def is_retryable(self) -> bool:
        """Tell whether running the same operation again may succeed."""
        return False


class UnreachableError(StorageError):
    """The database could not be reached."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"database can't be reached ({reason})")
        self.reason = reason

    def is_retryable(self) -> bool:
        return True


class DatabaseError(StorageError):
    """The database server rejected a statement."""

    def __init__(
        self,
        message: str,
        detail: str = "",
        code: str = "",
        constraint: str | None = None,
    ) -> None:
        super().__init__(f"[{code}] {message} ({detail})")
        self.message = message
        self.detail = detail
        self.code = code
        self.constraint = constraint


class OtherStorageError(StorageError):
    """Any other failure while talking to the database."""


class IsolationLevel(enum.Enum):
    """Isolation level a transaction runs with."""

    REPEATABLE_READ = enum.auto()
    DEFAULT = enum.auto()


def to_storage_error(exc: BaseException) -> StorageError:
    """Turn an exception raised by a database driver into a ``StorageError``."""
    if isinstance(exc, StorageError):
        return exc
    diag = getattr(exc, "diag", None)
    code = getattr(diag, "sqlstate", None) if diag is not None else None
    if code:
        return DatabaseError(
            message=getattr(diag, "message_primary", None) or str(exc),
            detail=getattr(diag, "message_detail", None) or "",
            code=code,
            constraint=getattr(diag, "constraint_name", None),
        )
    if isinstance(exc, OSError) or any(
        cls.__name__ in _UNREACHABLE_NAMES for cls in type(exc).__mro__
    ):
        return UnreachableError(str(exc))
    return OtherStorageError(str(exc))


@contextmanager
def transaction(
    conn: Any, isolation_level: IsolationLevel = IsolationLevel.DEFAULT
) -> Iterator[Any]:
    """Run the block in a transaction and yield a cursor of ``conn``.

    The transaction is committed when the block ends normally and rolled back
    otherwise; driver errors come out as ``StorageError``.
    """
    try:
        cursor = conn.cursor()
    except Exception as exc:
        raise to_storage_error(exc) from exc
    try:
        if isolation_level is IsolationLevel.REPEATABLE_READ:
            cursor.execute(_REPEATABLE_READ)
        yield cursor
        conn.commit()
    except Exception as exc:
        with suppress(Exception):
            conn.rollback()
        if isinstance(exc, StorageError):
            raise
        raise to_storage_error(exc) from exc
    finally:
        with suppress(Exception):
            cursor.close()