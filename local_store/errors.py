"""Error taxonomy and the result value returned by mutating store operations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class StoreError(Exception):
    """Base class for every failure the store reports."""


class EncodeError(StoreError):
    """An entity could not be serialized to JSON."""


class DecodeError(StoreError):
    """Bytes could not be decoded with any of the configured profiles."""

    def __init__(self, message: str, failures: dict[str, Exception] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or {}


class FileSystemError(StoreError):
    """A create/read/write/copy/remove/list call failed."""

    def __init__(self, operation: str, path: Path | str, cause: Exception | None = None) -> None:
        detail = f": {cause}" if cause else ""
        super().__init__(f"Could not {operation} {path}{detail}")
        self.operation = operation
        self.path = Path(path)
        self.cause = cause


class AmbiguousStateError(StoreError):
    """Exactly one file was expected but zero or several were found."""

    def __init__(self, path: Path | str, count: int) -> None:
        super().__init__(f"Expected exactly one file in {path}, found {count}")
        self.path = Path(path)
        self.count = count


class NotFoundError(StoreError):
    """The file or directory an operation targets does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"{path} does not exist")
        self.path = Path(path)


@dataclass
class StoreResult:
    """Outcome of a mutating operation.

    Truthy when the operation succeeded.  Failures carry the ``StoreError``
    that was logged, so callers can inspect it or re-raise it via ``unwrap``.
    """

    ok: bool
    value: Any = None
    error: StoreError | None = None
    path: Path | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None, path: Path | None = None) -> "StoreResult":
        return cls(ok=True, value=value, path=path)

    @classmethod
    def failure(cls, error: StoreError, path: Path | None = None) -> "StoreResult":
        return cls(ok=False, error=error, path=path)

    def unwrap(self) -> Any:
        """Return ``value`` or raise the carried error."""
        if not self.ok:
            raise self.error or StoreError("operation failed")
        return self.value
