"""Persistent library: the "tracked" and "recently read" collections.

The store is the only long-lived state in lncli.  It is owned by a single
session, mutated in place, and written back to a JSON document after each
mutation by the caller (see ``ReaderService``).

Collections
-----------
``tracked``
    Ordered list, unique by ``name``.  Adding an existing name is a no-op.
``recent``
    Explicit ordered map ``name -> entry`` (an ``OrderedDict``), most
    recently touched first, capped at ``recent_limit`` (default 10).
    Folding an entry in is a three-step algorithm:

    1. **replace-if-greater** -- an existing entry is replaced only when
       the incoming ``last_chapter`` is strictly greater, so recorded
       progress never regresses;
    2. **move-to-front** -- the touched name becomes the most recent;
    3. **cap** -- names beyond the limit are dropped for good.

Durability
----------
``load()`` tells a missing file (:class:`StoreNotFoundError`, start empty)
apart from an unreadable one (:class:`StoreCorruptError`).  A corrupt
file is copied to ``<file>.corrupt-<UTC timestamp>`` and left where it
is; only an explicit :meth:`LibraryStore.regenerate` replaces it.  A file
that already has a byte-identical backup is not copied again.
``save()`` re-applies the dedup and cap rules and replaces the file
atomically (temp file + ``os.replace``).
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from lncli.models.library import RECENT_LIMIT, LibraryDocument, LibraryEntry
from lncli.services.extractor import series_key
from lncli.utils.errors import LncliError, StoreCorruptError, StoreNotFoundError
from lncli.utils.logging import get_logger

DEFAULT_RECENT_LIMIT = RECENT_LIMIT


def _unique_by_name(entries: list[LibraryEntry]) -> list[LibraryEntry]:
    """Keep the first entry for each name, preserving order."""
    seen: set[str] = set()
    unique: list[LibraryEntry] = []
    for entry in entries:
        if entry.name not in seen:
            seen.add(entry.name)
            unique.append(entry)
    return unique


class LibraryStore:
    """In-memory library backed by a JSON file.

    Parameters
    ----------
    path:
        Location of the library file.  Its directory is created on save.
    recent_limit:
        Maximum number of entries kept in the recency list, clamped to
        ``[1, RECENT_LIMIT]``.
    """

    def __init__(self, path: str | Path, recent_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self._path = Path(path)
        self._recent_limit = min(RECENT_LIMIT, max(1, recent_limit))
        self._tracked: list[LibraryEntry] = []
        self._recent: OrderedDict[str, LibraryEntry] = OrderedDict()
        self._backup_path: Path | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @classmethod
    def open(cls, path: str | Path, recent_limit: int = DEFAULT_RECENT_LIMIT) -> LibraryStore:
        """Load the library at *path*, starting empty if there is no file yet.

        :class:`StoreCorruptError` propagates: the caller must decide
        whether to :meth:`regenerate`.
        """
        store = cls(path, recent_limit=recent_limit)
        try:
            store.load()
        except StoreNotFoundError:
            store._logger.info("library_initialized_empty", path=str(store.path))
        return store

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path | None:
        """Where the last corrupt library file was copied, if any."""
        return self._backup_path

    @property
    def tracked(self) -> tuple[LibraryEntry, ...]:
        return tuple(self._tracked)

    @property
    def recent(self) -> tuple[LibraryEntry, ...]:
        """Recently read titles, most recent first."""
        return tuple(self._recent.values())

    def get_tracked(self, name: str) -> LibraryEntry | None:
        for entry in self._tracked:
            if entry.name == name:
                return entry
        return None

    def is_tracked(self, name: str) -> bool:
        return self.get_tracked(name) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_tracked(self, entry: LibraryEntry) -> bool:
        """Append *entry* unless its name is already tracked.  Returns ``True`` if added."""
        if self.is_tracked(entry.name):
            return False
        self._tracked.append(entry)
        self._logger.info("title_tracked", name=entry.name)
        return True

    def remove_tracked(self, name: str) -> bool:
        """Drop the tracked entry called *name*.  Returns ``True`` if one was removed."""
        before = len(self._tracked)
        self._tracked = [entry for entry in self._tracked if entry.name != name]
        removed = len(self._tracked) != before
        if removed:
            self._logger.info("title_untracked", name=name)
        return removed

    def record_recent(self, entry: LibraryEntry) -> LibraryEntry:
        """Fold *entry* into the recency list and return the stored entry."""
        existing = self._recent.get(entry.name)
        if existing is None or entry.last_chapter > existing.last_chapter:
            self._recent[entry.name] = entry
        self._recent.move_to_end(entry.name, last=False)
        self._truncate_recent()
        return self._recent[entry.name]

    def record_chapter_progress(self, url: str, chapter: int) -> list[LibraryEntry]:
        """Advance tracked entries of the series that *url* belongs to.

        Entries are matched on :func:`series_key`, not on a raw prefix, and
        ``last_chapter`` only ever moves forward.  Returns the entries that
        changed.
        """
        key = series_key(url)
        changed: list[LibraryEntry] = []
        for index, entry in enumerate(self._tracked):
            if series_key(entry.url) != key or chapter <= entry.last_chapter:
                continue
            updated = entry.model_copy(update={"last_chapter": chapter, "url": url})
            self._tracked[index] = updated
            changed.append(updated)
            self._logger.debug(
                "tracked_progress_advanced",
                name=entry.name,
                previous=entry.last_chapter,
                chapter=chapter,
            )
        return changed

    def _truncate_recent(self) -> None:
        while len(self._recent) > self._recent_limit:
            name, _ = self._recent.popitem(last=True)
            self._logger.debug("recent_evicted", name=name)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory collections with the file's contents.

        Raises
        ------
        StoreNotFoundError
            If the library file does not exist.
        StoreCorruptError
            If the file exists but is not a valid library document.  A
            backup copy is made first; the original is left untouched.
        LncliError
            If the file exists but cannot be read at all.
        """
        if not self._path.exists():
            raise StoreNotFoundError(self._path)

        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            raise LncliError(
                message=f"Cannot read library file: {exc.strerror or exc}",
                source=str(self._path),
            ) from exc

        try:
            document = LibraryDocument.model_validate_json(raw)
        except (PydanticValidationError, ValueError) as exc:
            backup = self._backup_corrupt_file()
            self._logger.error(
                "store_corrupt",
                path=str(self._path),
                backup=str(backup) if backup else None,
                error=str(exc).splitlines()[0],
            )
            raise StoreCorruptError(self._path, backup) from exc

        self._tracked = _unique_by_name(document.tracked_novels)
        self._recent = OrderedDict(
            (entry.name, entry) for entry in _unique_by_name(document.recent_novels)
        )
        self._truncate_recent()
        self._logger.debug(
            "library_loaded",
            path=str(self._path),
            tracked=len(self._tracked),
            recent=len(self._recent),
        )

    def save(self) -> None:
        """Write the normalized library to disk, replacing the file atomically."""
        self._tracked = _unique_by_name(self._tracked)
        self._truncate_recent()
        document = LibraryDocument(
            tracked_novels=list(self._tracked),
            recent_novels=list(self._recent.values()),
        )
        payload = document.model_dump_json(indent=2)

        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise LncliError(
                message=f"Cannot write library file: {exc.strerror or exc}",
                source=str(self._path),
            ) from exc

        self._logger.debug("library_saved", path=str(self._path))

    def regenerate(self) -> None:
        """Reset to an empty library and persist it, preserving any unreadable file.

        Only call this after the user has acknowledged a
        :class:`StoreCorruptError`.  If the current file has not been
        backed up yet, a backup is made before it is overwritten.
        """
        if self._path.exists() and self._backup_path is None:
            if self._backup_corrupt_file() is None:
                raise LncliError(
                    message="Refusing to overwrite library file: backup failed",
                    source=str(self._path),
                )
        self._tracked = []
        self._recent = OrderedDict()
        self.save()
        self._logger.warning(
            "library_regenerated",
            path=str(self._path),
            backup=str(self._backup_path) if self._backup_path else None,
        )

    def _existing_backup(self) -> Path | None:
        """An earlier ``.corrupt-*`` copy with the same bytes as the current file."""
        try:
            current = self._path.read_bytes()
        except OSError:
            return None
        for candidate in sorted(self._path.parent.glob(f"{self._path.name}.corrupt-*")):
            try:
                if candidate.read_bytes() == current:
                    return candidate
            except OSError:
                continue
        return None

    def _backup_corrupt_file(self) -> Path | None:
        existing = self._existing_backup()
        if existing is not None:
            self._backup_path = existing
            self._logger.info("store_corrupt_backup_exists", path=str(self._path), backup=str(existing))
            return existing

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        candidate = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        counter = 1
        while candidate.exists():
            candidate = self._path.with_name(f"{self._path.name}.corrupt-{stamp}-{counter}")
            counter += 1

        try:
            shutil.copy2(self._path, candidate)
        except OSError as exc:
            self._logger.error("store_backup_failed", path=str(self._path), error=str(exc))
            return None

        self._backup_path = candidate
        self._logger.warning("store_corrupt_backed_up", path=str(self._path), backup=str(candidate))
        return candidate
