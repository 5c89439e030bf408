"""Custom exception hierarchy for lncli.

All application exceptions inherit from :class:`LncliError`, which carries
an optional ``source`` naming the URL, selector path, or file that caused
the failure, so the command line (or any other front end) can print one
short, specific line instead of a traceback.

The hierarchy is organized by engine component:

    LncliError  (base -- catch-all for any lncli error)
    +-- NetworkError        (transport failure or non-success HTTP status)
    +-- ParseError          (expected markup structure or pattern not found)
    +-- ValidationError     (malformed or out-of-range user input / URL)
    +-- BoundaryError       (navigation past the first or last chapter)
    +-- StoreNotFoundError  (no library file yet -- recoverable)
    +-- StoreCorruptError   (library file unreadable -- backup preserved)
    +-- ConfigurationError  (startup / invalid settings)

Callers handle errors at exactly the level they care about -- e.g. the
reader re-prompts on ValidationError, shows a notice on BoundaryError, and
asks before regenerating on StoreCorruptError.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class LncliError(Exception):
    """Base exception for all lncli errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``source``.  The ``__str__`` method prefixes the source in brackets,
    e.g. ``[https://novelfull.com/x.html] HTTP 404``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        source: str | None = None,
    ) -> None:
        self._message = message
        self._source = source
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def source(self) -> str | None:
        return self._source

    def __str__(self) -> str:
        if self._source:
            return f"[{self._source}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Acquisition errors
# ---------------------------------------------------------------------------

class NetworkError(LncliError):
    """Raised on a transport failure or a non-success HTTP status.

    ``status_code`` is ``None`` when no response was received at all
    (DNS failure, timeout, connection reset).
    """

    def __init__(
        self,
        message: str = "Network request failed",
        source: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, source=source)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class ParseError(LncliError):
    """Raised when the expected markup structure or URL pattern is missing.

    ``selector`` names the CSS selector (or pattern) that failed to match.
    """

    def __init__(
        self,
        message: str = "Page markup could not be parsed",
        source: str | None = None,
        selector: str | None = None,
    ) -> None:
        super().__init__(message=message, source=source)
        self._selector = selector

    @property
    def selector(self) -> str | None:
        return self._selector


# ---------------------------------------------------------------------------
# Navigation / input errors
# ---------------------------------------------------------------------------

class ValidationKind(str, Enum):
    """Which input constraint a :class:`ValidationError` reports."""

    EMPTY = "empty"
    NOT_NUMERIC = "not_numeric"
    OUT_OF_RANGE = "out_of_range"
    MALFORMED_URL = "malformed_url"


class ValidationError(LncliError):
    """Raised for malformed or out-of-range user input, or a malformed URL."""

    def __init__(
        self,
        message: str = "Invalid input",
        source: str | None = None,
        kind: ValidationKind = ValidationKind.OUT_OF_RANGE,
    ) -> None:
        super().__init__(message=message, source=source)
        self._kind = kind

    @property
    def kind(self) -> ValidationKind:
        return self._kind


class BoundaryError(LncliError):
    """Raised when navigating before chapter 1 or past the last chapter."""

    def __init__(
        self,
        message: str = "No chapter in that direction",
        source: str | None = None,
        chapter: int | None = None,
        max_chapters: int | None = None,
    ) -> None:
        super().__init__(message=message, source=source)
        self._chapter = chapter
        self._max_chapters = max_chapters

    @property
    def chapter(self) -> int | None:
        return self._chapter

    @property
    def max_chapters(self) -> int | None:
        return self._max_chapters


# ---------------------------------------------------------------------------
# Library store errors
# ---------------------------------------------------------------------------

class StoreNotFoundError(LncliError):
    """Raised when no library file exists yet.  Recover with an empty store."""

    def __init__(self, path: Path, message: str = "Library file does not exist") -> None:
        super().__init__(message=message, source=str(path))
        self._path = path

    @property
    def path(self) -> Path:
        return self._path


class StoreCorruptError(LncliError):
    """Raised when the library file exists but cannot be parsed.

    The unreadable file is left in place and a copy is written to
    ``backup_path`` before this is raised.
    """

    def __init__(
        self,
        path: Path,
        backup_path: Path | None,
        message: str = "Library file is corrupt",
    ) -> None:
        super().__init__(message=message, source=str(path))
        self._path = path
        self._backup_path = backup_path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path | None:
        return self._backup_path


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(LncliError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        source: str | None = None,
    ) -> None:
        super().__init__(message=message, source=source)
