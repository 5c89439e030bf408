"""Shared pytest fixtures for the lncli test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from lncli.interfaces.fetcher import FetchResponse, IFetcher
from lncli.models.library import LibraryEntry
from lncli.models.reader import PageState
from lncli.services.library_store import LibraryStore
from lncli.utils.logging import configure_logging

BASE_URL = "https://novelfull.com"
SLUG = "martial-peak"
SERIES_NAME = "Martial Peak"
INDEX_URL = f"{BASE_URL}/{SLUG}.html"


def chapter_url(chapter: int, slug: str = SLUG) -> str:
    return f"{BASE_URL}/{slug}/chapter-{chapter}.html"


# ---------------------------------------------------------------------------
# Markup builders
# ---------------------------------------------------------------------------


def chapter_html(
    name: str = SERIES_NAME,
    heading: str = "Chapter 3 - The Return",
    paragraphs: tuple[str, ...] = ("Yang Kai opened his eyes.", "The hall was silent."),
    slug: str = SLUG,
) -> str:
    """A chapter page shaped like the source site's markup.

    Includes a whitespace-only paragraph and a nested advert paragraph,
    neither of which belongs in the extracted body.
    """
    body = "\n".join(f"<p>{text}</p>" for text in paragraphs)
    return f"""
    <html><body>
      <div id="chapter">
        <a class="truyen-title" href="/{slug}.html" title="{name}">{name}</a>
        <h2>
          <a class="chapter-title" href="/{slug}/chapter-3.html" title="{heading}">
            <span class="chapter-text">{heading}</span>
          </a>
        </h2>
        <div id="chapter-content">
          <p>   </p>
          {body}
          <div class="ads"><p>Advertisement</p></div>
        </div>
      </div>
    </body></html>
    """


def index_html(latest: int, slug: str = SLUG) -> str:
    """A series index page whose latest-chapters listing starts at *latest*."""
    return f"""
    <html><body>
      <h3 class="title">{SERIES_NAME}</h3>
      <div class="l-chapter">
        <ul class="l-chapters">
          <li><span class="chapter-text"><a href="/{slug}/chapter-{latest}.html">Chapter {latest}</a></span></li>
          <li><span class="chapter-text"><a href="/{slug}/chapter-{max(latest - 1, 1)}.html">Older</a></span></li>
        </ul>
      </div>
    </body></html>
    """


def search_html(rows: list[tuple[str | None, str]]) -> str:
    """Search results page; a ``None`` href renders a row with no link."""
    rendered = []
    for href, label in rows:
        if href is None:
            title = f'<h3 class="truyen-title">{label}</h3>'
        else:
            title = f'<h3 class="truyen-title"><a href="{href}" title="{label}">{label}</a></h3>'
        rendered.append(f'<div class="row"><div class="col-xs-7">{title}</div></div>')
    return f"""
    <html><body>
      <div class="list list-truyen col-xs-12">
        {''.join(rendered)}
      </div>
    </body></html>
    """


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeFetcher(IFetcher):
    """In-memory :class:`IFetcher`.

    ``pages`` maps URL to a body (served as 200), a ``(status, body)``
    tuple, or an exception to raise.  Unknown URLs return 404.
    """

    def __init__(self, pages: dict[str, object] | None = None) -> None:
        self.pages: dict[str, object] = dict(pages or {})
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            return FetchResponse(status_code=404, text="Not Found", url=url)
        if isinstance(page, BaseException):
            raise page
        if isinstance(page, tuple):
            status, text = page
            return FetchResponse(status_code=status, text=text, url=url)
        return FetchResponse(status_code=200, text=str(page), url=url)

    def get_provider_name(self) -> str:
        return "fake"

    async def aclose(self) -> None:
        self.closed = True


def make_state(chapter: int = 3, max_chapters: int = 87, slug: str = SLUG) -> PageState:
    return PageState(
        url=chapter_url(chapter, slug),
        name=SERIES_NAME,
        title="The Return",
        chapter=chapter,
        max_chapters=max_chapters,
        content="Yang Kai opened his eyes.",
    )


def make_entry(name: str = SERIES_NAME, chapter: int = 3, slug: str = SLUG) -> LibraryEntry:
    return LibraryEntry(name=name, url=chapter_url(chapter, slug), last_chapter=chapter)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _session_logging() -> None:
    """Bind log output to the session stream before any capsys swap."""
    configure_logging("WARNING")


@pytest.fixture
def library_path(tmp_path: Path) -> Path:
    """Library file location inside a not-yet-existing config directory."""
    return tmp_path / "config" / "lncli" / "data.json"


@pytest.fixture
def store(library_path: Path) -> LibraryStore:
    return LibraryStore(library_path)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """A fetcher serving chapters 1-4 of Martial Peak with 87 chapters listed."""
    pages: dict[str, object] = {INDEX_URL: index_html(87)}
    for number in range(1, 5):
        pages[chapter_url(number)] = chapter_html(heading=f"Chapter {number} - Part {number}")
    return FakeFetcher(pages)
