"""Chapter-URL arithmetic and navigation boundaries.

Every function here is pure: it takes the current :class:`PageState`
(owned by the caller) and returns the URL to load next, or raises before
anything is fetched or recorded.

The chapter token is replaced as a whole number: ``chapter-1`` never
matches inside ``chapter-10`` or ``chapter-12``.
"""

from __future__ import annotations

import re

from lncli.models.reader import PageState, chapter_token_pattern
from lncli.utils.errors import BoundaryError, ValidationError, ValidationKind

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


def derive_chapter_url(current_url: str, current_chapter: int, target_chapter: int) -> str:
    """Return *current_url* with chapter *current_chapter* swapped for *target_chapter*.

    Raises
    ------
    ValidationError
        If ``chapter-<current_chapter>`` does not occur exactly once in
        *current_url*, or *target_chapter* is below 1.
    """
    if target_chapter < 1:
        raise ValidationError(
            message=f"Chapter numbers start at 1, got {target_chapter}",
            source=current_url,
            kind=ValidationKind.OUT_OF_RANGE,
        )

    pattern = chapter_token_pattern(current_chapter)
    new_url, count = pattern.subn(f"chapter-{target_chapter}", current_url)
    if count != 1:
        raise ValidationError(
            message=f"Expected 'chapter-{current_chapter}' once in URL, found {count}",
            source=current_url,
            kind=ValidationKind.MALFORMED_URL,
        )
    return new_url


def next_chapter_url(state: PageState) -> str:
    """URL of the chapter after *state*; :class:`BoundaryError` on the last one."""
    if state.chapter >= state.max_chapters:
        raise BoundaryError(
            message=f"Already at the last chapter ({state.max_chapters})",
            source=state.url,
            chapter=state.chapter,
            max_chapters=state.max_chapters,
        )
    return derive_chapter_url(state.url, state.chapter, state.chapter + 1)


def previous_chapter_url(state: PageState) -> str:
    """URL of the chapter before *state*; :class:`BoundaryError` on chapter 1."""
    if state.chapter <= 1:
        raise BoundaryError(
            message="Already at the first chapter",
            source=state.url,
            chapter=state.chapter,
            max_chapters=state.max_chapters,
        )
    return derive_chapter_url(state.url, state.chapter, state.chapter - 1)


def parse_chapter_input(raw: str | None, max_chapters: int) -> int:
    """Validate a typed chapter number against ``[1, max_chapters]``.

    The three failure modes carry distinct :class:`ValidationKind` values
    so a front end can word them differently.
    """
    text = (raw or "").strip()
    if not text:
        raise ValidationError(
            message="Please enter a chapter number",
            kind=ValidationKind.EMPTY,
        )

    if _INTEGER_RE.match(text) is None:
        raise ValidationError(
            message=f"Please enter a valid number, not {text!r}",
            kind=ValidationKind.NOT_NUMERIC,
        )

    chapter = int(text)
    if not 1 <= chapter <= max_chapters:
        raise ValidationError(
            message=f"Please enter a number between 1 and {max_chapters}",
            kind=ValidationKind.OUT_OF_RANGE,
        )
    return chapter


def select_chapter_url(state: PageState, raw: str | None) -> str:
    """URL for a typed chapter number, validated before any URL is built."""
    target = parse_chapter_input(raw, state.max_chapters)
    return derive_chapter_url(state.url, state.chapter, target)
