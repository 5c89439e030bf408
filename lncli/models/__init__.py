"""Pydantic v2 data models for lncli.

All models are frozen -- state changes use ``model_copy(update={...})``.
"""

from lncli.models.library import RECENT_LIMIT, LibraryDocument, LibraryEntry
from lncli.models.reader import (
    PageState,
    SearchHit,
    SearchResult,
    UpdateFailure,
    UpdateNotice,
    UpdateReport,
    chapter_token_pattern,
)

__all__ = [
    "RECENT_LIMIT",
    "LibraryDocument",
    "LibraryEntry",
    "PageState",
    "SearchHit",
    "SearchResult",
    "UpdateFailure",
    "UpdateNotice",
    "UpdateReport",
    "chapter_token_pattern",
]
