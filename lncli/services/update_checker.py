"""Batched "new chapters?" check over tracked titles.

For every entry the checker re-derives the series index page, reads the
newest chapter number, and compares it with the stored ``last_chapter``.

Entries are independent units of work:

- they run concurrently, at most ``concurrency`` at a time, so a large
  library does not hammer the single source host;
- each has its own timeout, so one hung request cannot stall the batch;
- a failure is recorded against its entry and the rest carry on; every
  failure is reported, not just the last one.

The report preserves input order within each bucket.  Cancelling the task
awaiting :meth:`UpdateChecker.check_updates` cancels all in-flight
requests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from lncli.models.library import LibraryEntry
from lncli.models.reader import UpdateFailure, UpdateNotice, UpdateReport
from lncli.services.extractor import ChapterExtractor
from lncli.utils.concurrency import throttled_gather
from lncli.utils.errors import LncliError, NetworkError
from lncli.utils.logging import get_logger

_DEFAULT_CONCURRENCY = 4
_DEFAULT_TIMEOUT = 20.0


class UpdateChecker:
    """Compares stored progress against live chapter counts.

    Parameters
    ----------
    extractor:
        Supplies :meth:`ChapterExtractor.fetch_latest_chapter`.
    concurrency:
        Maximum number of entries checked at the same time.
    timeout:
        Per-entry timeout in seconds.
    """

    def __init__(
        self,
        extractor: ChapterExtractor,
        concurrency: int = _DEFAULT_CONCURRENCY,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._extractor = extractor
        self._concurrency = max(1, concurrency)
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def check_updates(self, entries: Iterable[LibraryEntry]) -> UpdateReport:
        """Check every entry and split the outcome into updated / up to date / failed."""
        entries = list(entries)
        if not entries:
            return UpdateReport()

        semaphore = asyncio.Semaphore(self._concurrency)
        results = await throttled_gather(
            [self._extractor.fetch_latest_chapter(entry.url) for entry in entries],
            semaphore=semaphore,
            timeout=self._timeout,
            return_exceptions=True,
        )

        updated: list[UpdateNotice] = []
        up_to_date: list[LibraryEntry] = []
        failed: list[UpdateFailure] = []

        for entry, result in zip(entries, results):
            if isinstance(result, BaseException):
                error = self._as_error(entry, result)
                self._logger.warning(
                    "update_check_failed",
                    name=entry.name,
                    url=entry.url,
                    error=str(error),
                )
                failed.append(UpdateFailure(entry=entry, error=error))
            elif result > entry.last_chapter:
                updated.append(UpdateNotice(entry=entry, latest_chapter=result))
            else:
                up_to_date.append(entry)

        self._logger.info(
            "update_check_complete",
            checked=len(entries),
            updated=len(updated),
            failed=len(failed),
        )
        return UpdateReport(updated=updated, up_to_date=up_to_date, failed=failed)

    def _as_error(self, entry: LibraryEntry, exc: BaseException) -> LncliError:
        """Normalize whatever a single entry raised into an :class:`LncliError`."""
        if isinstance(exc, LncliError):
            return exc
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
            return NetworkError(
                message=f"Timed out after {self._timeout:g}s",
                source=entry.url,
            )
        if isinstance(exc, asyncio.CancelledError):
            return LncliError(message="Check was cancelled", source=entry.url)
        if not isinstance(exc, Exception):
            # KeyboardInterrupt / SystemExit must still stop the process.
            raise exc
        self._logger.error(
            "update_check_unexpected_error",
            name=entry.name,
            url=entry.url,
            exc_info=exc,
        )
        return LncliError(message=f"Unexpected error: {exc}", source=entry.url)
