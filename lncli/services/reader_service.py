"""Acquisition facade: the one entry point a front end talks to.

Orchestrates fetch -> extract -> navigation checks -> library update and
hands back plain values (:class:`PageState`, :class:`SearchResult`,
:class:`UpdateReport`).  The service holds no "current page": callers
keep the ``PageState`` they were given and pass it back for the next
navigation step.

Every failure surfaces as a typed :class:`~lncli.utils.errors.LncliError`
subclass; nothing in here prints or exits.
"""

from __future__ import annotations

import structlog

from lncli.interfaces.fetcher import IFetcher
from lncli.models.library import LibraryEntry
from lncli.models.reader import PageState, SearchHit, SearchResult, UpdateReport
from lncli.services import navigator
from lncli.services.extractor import (
    ChapterExtractor,
    build_search_url,
    first_chapter_url,
    is_chapter_url,
    parse_search_results,
)
from lncli.services.library_store import LibraryStore
from lncli.services.update_checker import UpdateChecker
from lncli.utils.errors import ValidationError, ValidationKind
from lncli.utils.logging import get_logger


class ReaderService:
    """Reads chapters, searches the site, and maintains the library.

    Parameters
    ----------
    fetcher:
        Network capability used for every page, index and search request.
    store:
        The session's library.  Saved after every mutation.
    base_url:
        Root of the source site, used for search.
    update_checker:
        Optional pre-configured checker; one with default limits is built
        from *fetcher* otherwise.
    """

    def __init__(
        self,
        fetcher: IFetcher,
        store: LibraryStore,
        base_url: str,
        update_checker: UpdateChecker | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._base_url = base_url.rstrip("/")
        self._extractor = ChapterExtractor(fetcher)
        self._update_checker = update_checker or UpdateChecker(self._extractor)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def store(self) -> LibraryStore:
        return self._store

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def load(self, url: str) -> PageState:
        """Fetch and extract the chapter at *url*, then record it in the library."""
        url = url.strip()
        if not url:
            raise ValidationError(message="Please enter a URL", kind=ValidationKind.EMPTY)
        if not is_chapter_url(url):
            # Series pages open at chapter 1.
            url = first_chapter_url(url)

        html = await self._fetcher.fetch_text(url)
        state = await self._extractor.parse_chapter_page(html, url)

        self._store.record_recent(state.to_entry())
        self._store.record_chapter_progress(state.url, state.chapter)
        self._store.save()

        self._logger.info(
            "chapter_loaded",
            name=state.name,
            chapter=state.chapter,
            max_chapters=state.max_chapters,
        )
        return state

    async def next_chapter(self, state: PageState) -> PageState:
        """Load the chapter after *state*.  :class:`BoundaryError` on the last one."""
        return await self.load(navigator.next_chapter_url(state))

    async def previous_chapter(self, state: PageState) -> PageState:
        """Load the chapter before *state*.  :class:`BoundaryError` on chapter 1."""
        return await self.load(navigator.previous_chapter_url(state))

    async def select_chapter(self, state: PageState, raw: str | None) -> PageState:
        """Load a typed chapter number, validated against ``[1, max_chapters]``."""
        return await self.load(navigator.select_chapter_url(state, raw))

    async def open_hit(self, hit: SearchHit) -> PageState:
        """Start reading a search hit from its first chapter."""
        return await self.load(first_chapter_url(hit.url))

    async def resume(self, entry: LibraryEntry) -> PageState:
        """Reopen a library entry where it was left."""
        return await self.load(entry.url)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str) -> SearchResult:
        """Search the source site by title."""
        query = (query or "").strip()
        if not query:
            raise ValidationError(
                message="Please enter a search term",
                kind=ValidationKind.EMPTY,
            )

        html = await self._fetcher.fetch_text(build_search_url(self._base_url, query))
        result = parse_search_results(html, query, self._base_url)
        self._logger.info("search_complete", query=query, hits=len(result.hits), skipped=result.skipped)
        return result

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    def track(self, state: PageState) -> LibraryEntry:
        """Track the series of *state*, or return the existing tracked entry."""
        entry = state.to_entry()
        if self._store.add_tracked(entry):
            self._store.save()
            return entry
        self._store.record_chapter_progress(state.url, state.chapter)
        self._store.save()
        return self._store.get_tracked(state.name) or entry

    def untrack(self, name: str) -> bool:
        """Stop tracking *name*.  Returns ``False`` if it was not tracked."""
        removed = self._store.remove_tracked(name)
        if removed:
            self._store.save()
        return removed

    async def check_updates(self) -> UpdateReport:
        """Report which tracked titles have chapters past ``last_chapter``."""
        return await self._update_checker.check_updates(self._store.tracked)
