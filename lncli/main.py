"""Composition root: wires settings, fetcher, library store and services.

Front ends (the command line in ``lncli/cli``, or an interactive reader)
call :func:`build_reader_service` once per session and then talk only to
the returned :class:`ReaderService`.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from lncli.config.settings import Settings, load_settings
from lncli.interfaces.fetcher import IFetcher
from lncli.providers.fetch.httpx_fetcher import HttpxFetcher
from lncli.services.extractor import ChapterExtractor
from lncli.services.library_store import LibraryStore
from lncli.services.reader_service import ReaderService
from lncli.services.update_checker import UpdateChecker


def build_fetcher(app_settings: Settings, http_client: httpx.AsyncClient | None = None) -> HttpxFetcher:
    """Create the httpx-backed fetcher configured from *app_settings*."""
    return HttpxFetcher(
        http_client=http_client,
        timeout=app_settings.http_timeout,
        user_agent=app_settings.user_agent,
    )


def open_store(app_settings: Settings, path: str | Path | None = None) -> LibraryStore:
    """Open the library file, empty if it does not exist yet.

    :class:`~lncli.utils.errors.StoreCorruptError` propagates to the caller.
    """
    return LibraryStore.open(
        path or app_settings.data_path,
        recent_limit=app_settings.recent_limit,
    )


def build_reader_service(
    app_settings: Settings | None = None,
    fetcher: IFetcher | None = None,
    store: LibraryStore | None = None,
) -> ReaderService:
    """Assemble a :class:`ReaderService` from settings.

    Any collaborator can be passed in pre-built (tests inject fakes);
    the rest are constructed from *app_settings*.
    """
    app_settings = app_settings or load_settings()
    fetcher = fetcher or build_fetcher(app_settings)
    store = store if store is not None else open_store(app_settings)

    update_checker = UpdateChecker(
        ChapterExtractor(fetcher),
        concurrency=app_settings.update_concurrency,
        timeout=app_settings.update_timeout,
    )
    return ReaderService(
        fetcher=fetcher,
        store=store,
        base_url=app_settings.base_url,
        update_checker=update_checker,
    )
