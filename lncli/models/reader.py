"""Value models produced by the acquisition engine.

``PageState`` is what the presentation layer holds for the chapter on
screen; it is threaded explicitly back into every navigation call rather
than stashed in shared session state.  ``SearchResult`` and
``UpdateReport`` are one-shot results owned by whoever asked for them.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lncli.models.library import LibraryEntry
from lncli.utils.errors import LncliError


def chapter_token_pattern(chapter: int) -> re.Pattern[str]:
    """Regex matching the ``chapter-<n>`` token with non-digit boundaries."""
    return re.compile(rf"(?<!\d)chapter-{chapter}(?!\d)")


# ---------------------------------------------------------------------------
# PageState -- one loaded chapter
# ---------------------------------------------------------------------------
class PageState(BaseModel):
    """A successfully loaded chapter page.

    ``name`` is the series title (the library key); ``title`` is the
    chapter subtitle shown above the body text.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    name: str
    title: str
    chapter: int = Field(ge=1)
    max_chapters: int = Field(ge=1)
    content: str

    @model_validator(mode="after")
    def _check_invariants(self) -> PageState:
        if self.max_chapters < self.chapter:
            raise ValueError(
                f"max_chapters ({self.max_chapters}) is below chapter ({self.chapter})"
            )
        hits = len(chapter_token_pattern(self.chapter).findall(self.url))
        if hits != 1:
            raise ValueError(
                f"url must contain 'chapter-{self.chapter}' exactly once, found {hits}"
            )
        return self

    @property
    def is_first(self) -> bool:
        return self.chapter <= 1

    @property
    def is_last(self) -> bool:
        return self.chapter >= self.max_chapters

    def to_entry(self) -> LibraryEntry:
        """Library entry recording this page as the furthest point reached."""
        return LibraryEntry(name=self.name, url=self.url, last_chapter=self.chapter)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
class SearchHit(BaseModel):
    """One search result row: the series page URL and its display label."""

    model_config = ConfigDict(frozen=True)

    url: str
    label: str


class SearchResult(BaseModel):
    """Results for one query, in page order.  ``hits`` may be empty.

    ``skipped`` counts result rows that were malformed (no link) and were
    left out instead of failing the whole search.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    hits: list[SearchHit] = Field(default_factory=list)
    skipped: int = 0


# ---------------------------------------------------------------------------
# Update check
# ---------------------------------------------------------------------------
class UpdateNotice(BaseModel):
    """A tracked title whose live chapter count exceeds the stored one."""

    model_config = ConfigDict(frozen=True)

    entry: LibraryEntry
    latest_chapter: int

    @property
    def new_chapters(self) -> int:
        return self.latest_chapter - self.entry.last_chapter


class UpdateFailure(BaseModel):
    """A tracked title whose update check failed, with the reason."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entry: LibraryEntry
    error: LncliError


class UpdateReport(BaseModel):
    """Outcome of one batched update check, in input order.

    ``up_to_date`` lists the entries that were checked successfully and
    have nothing new.
    """

    model_config = ConfigDict(frozen=True)

    updated: list[UpdateNotice] = Field(default_factory=list)
    up_to_date: list[LibraryEntry] = Field(default_factory=list)
    failed: list[UpdateFailure] = Field(default_factory=list)

    @property
    def checked(self) -> int:
        return len(self.updated) + len(self.up_to_date) + len(self.failed)
