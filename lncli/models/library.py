"""Library models: entries in the tracked / recently-read collections.

``LibraryDocument`` mirrors the on-disk JSON exactly::

    {
      "tracked_novels": [{"name": ..., "url": ..., "last_chapter": 12}],
      "recent_novels":  [{"name": ..., "url": ..., "last_chapter": 3}]
    }

All models are frozen; progress changes go through
``entry.model_copy(update={"last_chapter": n})``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Upper bound on the "recently read" collection, persisted or in memory.
RECENT_LIMIT = 10


class LibraryEntry(BaseModel):
    """A tracked or recently-read title.

    ``name`` is the identity key for deduplication: case-sensitive and
    exactly as scraped from the series page.  ``url`` is the page the
    reader last reached (a chapter URL) or the series page itself.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    last_chapter: int = Field(ge=1)


class LibraryDocument(BaseModel):
    """Serialized form of the whole library file."""

    model_config = ConfigDict(frozen=True)

    tracked_novels: list[LibraryEntry] = Field(default_factory=list)
    recent_novels: list[LibraryEntry] = Field(default_factory=list)
