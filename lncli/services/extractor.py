"""HTML extraction and chapter-numbering logic for the source site.

Turns raw NovelFull-style markup into structured data:

- chapter pages   -> :class:`~lncli.models.reader.PageState`
- series index    -> the latest chapter ordinal (``max_chapters``)
- search results  -> :class:`~lncli.models.reader.SearchResult`

URL layout assumed throughout::

    <base>/<slug>.html                 series index page
    <base>/<slug>/chapter-<N>.html     chapter N

Everything here is a pure function of its input except
:meth:`ChapterExtractor.parse_chapter_page`, which needs the injected
fetcher to read the series index.  Structural surprises raise
:class:`~lncli.utils.errors.ParseError` carrying the selector that failed,
never a bare ``AttributeError`` from a ``None`` lookup.
"""

from __future__ import annotations

import re
from urllib.parse import quote_plus, urljoin, urlsplit

import structlog
from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError as PydanticValidationError

from lncli.interfaces.fetcher import IFetcher
from lncli.models.reader import PageState, SearchHit, SearchResult
from lncli.utils.errors import ParseError, ValidationError, ValidationKind

logger = structlog.get_logger(logger_name=__name__)

# ─── URL patterns ───
_CHAPTER_URL_RE = re.compile(r"^(?P<root>.+?)/chapter-(?P<chapter>\d+)\.html$")
_CHAPTER_PATH_RE = re.compile(r"/chapter-\d+\.html$")
_CHAPTER_LINK_RE = re.compile(r"chapter-(\d+)\.html")
_INDEX_SUFFIX = ".html"

# ─── Selectors ───
LATEST_CHAPTERS_SELECTOR = "ul.l-chapters li a"
SERIES_TITLE_SELECTOR = "a.truyen-title"
CHAPTER_TEXT_SELECTOR = ".chapter-text"
CHAPTER_TITLE_SELECTOR = "a.chapter-title"
CONTENT_SELECTOR = "#chapter-content"
SEARCH_ROW_SELECTOR = "div.list-truyen div.row"
SEARCH_LINK_SELECTOR = "h3.truyen-title a"

# "12 - The Return" or "Chapter 12 - The Return" -> "The Return"
_SUBTITLE_PREFIX_RE = re.compile(
    r"^\s*(?:chapter\s+)?\d+\s*-\s*(?P<title>\S.*)$", re.IGNORECASE | re.DOTALL
)


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def parse_chapter_ordinal(url: str) -> int:
    """Return the chapter number encoded at the end of a chapter *url*.

    Raises
    ------
    ValidationError
        If *url* does not end in ``chapter-<digits>.html``, or encodes 0.
    """
    match = _CHAPTER_URL_RE.match(url.strip())
    if match is None:
        raise ValidationError(
            message="URL does not end in 'chapter-<number>.html'",
            source=url,
            kind=ValidationKind.MALFORMED_URL,
        )
    chapter = int(match.group("chapter"))
    if chapter < 1:
        raise ValidationError(
            message="Chapter numbers start at 1",
            source=url,
            kind=ValidationKind.MALFORMED_URL,
        )
    return chapter


def is_chapter_url(url: str) -> bool:
    return _CHAPTER_URL_RE.match(url.strip()) is not None


def series_index_url(url: str) -> str:
    """Derive the series index page from a chapter URL.

    ``.../slug/chapter-7.html`` becomes ``.../slug.html``.  A URL that is
    already a series page is returned unchanged.
    """
    url = url.strip()
    match = _CHAPTER_URL_RE.match(url)
    if match is not None:
        return match.group("root") + _INDEX_SUFFIX
    if url.endswith(_INDEX_SUFFIX) and "/chapter-" not in url:
        return url
    raise ValidationError(
        message="Not a chapter or series page URL",
        source=url,
        kind=ValidationKind.MALFORMED_URL,
    )


def first_chapter_url(series_url: str) -> str:
    """Map a series page (``.../slug.html``) to its first chapter."""
    index_url = series_index_url(series_url)
    return index_url[: -len(_INDEX_SUFFIX)] + "/chapter-1.html"


def series_key(url: str) -> str:
    """Normalized identity of the series a URL belongs to.

    Host is lower-cased without ``www.``; the path loses its chapter
    suffix, ``.html`` extension and trailing slash.  Chapter URLs and the
    index URL of one series therefore share a key, whatever scheme or
    host alias was used to reach them.
    """
    parts = urlsplit(url.strip())
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    path = _CHAPTER_PATH_RE.sub("", parts.path)
    if path.endswith(_INDEX_SUFFIX):
        path = path[: -len(_INDEX_SUFFIX)]
    return f"{host}{path.rstrip('/').lower()}"


def build_search_url(base_url: str, query: str) -> str:
    return f"{base_url.rstrip('/')}/search?keyword={quote_plus(query.strip())}"


# ---------------------------------------------------------------------------
# Markup parsing
# ---------------------------------------------------------------------------

def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def parse_latest_chapter(index_html: str, source: str | None = None) -> int:
    """Read the newest chapter number from a series index page.

    Takes the *first* link of the "latest chapters" listing and parses
    ``chapter-<digits>.html`` out of its ``href``.

    Raises
    ------
    ParseError
        If the listing is missing or its first link carries no ordinal.
    """
    link = _soup(index_html).select_one(LATEST_CHAPTERS_SELECTOR)
    if link is None:
        raise ParseError(
            message="Series page has no latest-chapters listing",
            source=source,
            selector=LATEST_CHAPTERS_SELECTOR,
        )

    href = str(link.get("href") or "")
    match = _CHAPTER_LINK_RE.search(href)
    if match is None or int(match.group(1)) < 1:
        raise ParseError(
            message=f"Latest chapter link {href!r} has no chapter number",
            source=source,
            selector=_CHAPTER_LINK_RE.pattern,
        )
    return int(match.group(1))


def _series_title(soup: BeautifulSoup, source: str) -> str:
    node = soup.select_one(SERIES_TITLE_SELECTOR)
    if node is None:
        raise ParseError(
            message="Series title not found",
            source=source,
            selector=SERIES_TITLE_SELECTOR,
        )
    title = node.get_text(strip=True) or str(node.get("title") or "").strip()
    if not title:
        raise ParseError(
            message="Series title is empty",
            source=source,
            selector=SERIES_TITLE_SELECTOR,
        )
    return title


def clean_chapter_subtitle(raw: str) -> str:
    """Strip an optional ``"<number> - "`` prefix from a chapter heading."""
    raw = raw.strip()
    match = _SUBTITLE_PREFIX_RE.match(raw)
    if match is not None:
        return match.group("title").strip()
    return raw


def _chapter_subtitle(soup: BeautifulSoup, source: str) -> str:
    node = soup.select_one(CHAPTER_TEXT_SELECTOR) or soup.select_one(CHAPTER_TITLE_SELECTOR)
    if node is None:
        raise ParseError(
            message="Chapter heading not found",
            source=source,
            selector=f"{CHAPTER_TEXT_SELECTOR}, {CHAPTER_TITLE_SELECTOR}",
        )
    raw = node.get_text(" ", strip=True) or str(node.get("title") or "")
    return clean_chapter_subtitle(raw)


def _chapter_body(soup: BeautifulSoup, source: str) -> str:
    container = soup.select_one(CONTENT_SELECTOR)
    if not isinstance(container, Tag):
        raise ParseError(
            message="Chapter content container not found",
            source=source,
            selector=CONTENT_SELECTOR,
        )

    paragraphs: list[str] = []
    for p in container.find_all("p", recursive=False):
        text = p.get_text().strip()
        if text:
            paragraphs.append(text)

    if not paragraphs:
        raise ParseError(
            message="Chapter content has no readable paragraphs",
            source=source,
            selector=f"{CONTENT_SELECTOR} > p",
        )
    return "\n\n".join(paragraphs)


def parse_search_results(html: str, query: str, base_url: str) -> SearchResult:
    """Collect ``(url, label)`` hits from a search results page.

    A row without a usable link is skipped and counted in
    ``SearchResult.skipped``; the remaining rows are still returned.
    Relative links are resolved against *base_url*.
    """
    soup = _soup(html)
    hits: list[SearchHit] = []
    skipped = 0

    for row in soup.select(SEARCH_ROW_SELECTOR):
        link = row.select_one(SEARCH_LINK_SELECTOR)
        href = str(link.get("href") or "").strip() if link is not None else ""
        if not href:
            skipped += 1
            logger.warning(
                "search_row_skipped",
                query=query,
                selector=SEARCH_LINK_SELECTOR,
            )
            continue

        label = link.get_text(strip=True) or str(link.get("title") or "").strip()
        hits.append(
            SearchHit(
                url=urljoin(base_url.rstrip("/") + "/", href),
                label=label or href,
            )
        )

    logger.debug("search_parsed", query=query, hits=len(hits), skipped=skipped)
    return SearchResult(query=query, hits=hits, skipped=skipped)


# ---------------------------------------------------------------------------
# Chapter page extraction (needs the series index)
# ---------------------------------------------------------------------------

class ChapterExtractor:
    """Builds :class:`PageState` values from chapter page markup.

    The chapter page itself does not say how many chapters exist, so the
    extractor fetches the series index through the injected
    :class:`~lncli.interfaces.fetcher.IFetcher` to read ``max_chapters``.
    """

    def __init__(self, fetcher: IFetcher) -> None:
        self._fetcher = fetcher

    async def fetch_latest_chapter(self, url: str) -> int:
        """Fetch the series index for *url* and return its newest chapter."""
        index_url = series_index_url(url)
        index_html = await self._fetcher.fetch_text(index_url)
        return parse_latest_chapter(index_html, source=index_url)

    async def parse_chapter_page(self, html: str, requested_url: str) -> PageState:
        """Extract a chapter page fetched from *requested_url*.

        Raises
        ------
        ValidationError
            If *requested_url* is not a chapter URL.
        ParseError
            If the page or the series index lacks the expected structure.
        NetworkError
            If the series index cannot be fetched.
        """
        requested_url = requested_url.strip()
        chapter = parse_chapter_ordinal(requested_url)

        soup = _soup(html)
        name = _series_title(soup, requested_url)
        title = _chapter_subtitle(soup, requested_url)
        content = _chapter_body(soup, requested_url)

        max_chapters = await self.fetch_latest_chapter(requested_url)
        if max_chapters < chapter:
            # The index listing lags behind freshly posted chapters.
            logger.warning(
                "index_behind_chapter",
                url=requested_url,
                chapter=chapter,
                index_latest=max_chapters,
            )
            max_chapters = chapter

        try:
            return PageState(
                url=requested_url,
                name=name,
                title=title,
                chapter=chapter,
                max_chapters=max_chapters,
                content=content,
            )
        except PydanticValidationError as exc:
            # e.g. the series slug itself contains "chapter-<n>"
            raise ValidationError(
                message=f"URL cannot be navigated: {exc.errors()[0]['msg']}",
                source=requested_url,
                kind=ValidationKind.MALFORMED_URL,
            ) from exc
