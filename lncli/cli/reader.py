# =============================================================================
# lncli/cli/reader.py -- Command-line front end for the reading engine
# =============================================================================
#
# A thin, non-interactive consumer of ReaderService.  Every subcommand maps
# to one facade call (plus, for navigation, the load that produces the
# PageState it needs) and renders the result as plain text on stdout.
#
# Errors from the engine are typed (lncli.utils.errors); they are printed
# as one "Error: ..." line on stderr with a non-zero exit code.  A corrupt
# library file exits with code 2 and names the backup; re-running with
# --regenerate starts a new, empty library.
#
# Subcommands:
#   read      - load a chapter (optionally step --next / --prev / --chapter N)
#   resume    - reopen a recently read or tracked title by name
#   search    - search the site by title (optionally --open a hit)
#   track     - load a chapter and start tracking its series
#   untrack   - stop tracking a title
#   updates   - check tracked titles for new chapters
#   library   - list tracked and recently read titles
# =============================================================================

"""Command-line reader for serialized web fiction.

Usage::

    python -m lncli.cli read https://novelfull.com/some-novel/chapter-3.html
    python -m lncli.cli read https://novelfull.com/some-novel/chapter-3.html --next
    python -m lncli.cli search "martial peak" --open 1
    python -m lncli.cli track https://novelfull.com/some-novel/chapter-40.html
    python -m lncli.cli updates
    python -m lncli.cli library
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from lncli.config.settings import Settings, load_settings
from lncli.main import build_fetcher, build_reader_service
from lncli.models.library import LibraryEntry
from lncli.models.reader import PageState
from lncli.services.library_store import LibraryStore
from lncli.services.reader_service import ReaderService
from lncli.utils.errors import (
    ConfigurationError,
    LncliError,
    StoreCorruptError,
    StoreNotFoundError,
)
from lncli.utils.logging import configure_logging

_EXIT_OK = 0
_EXIT_ERROR = 1
_EXIT_CORRUPT_STORE = 2


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _render_page(state: PageState) -> str:
    header = f"{state.name} - Chapter {state.chapter}/{state.max_chapters}"
    return f"{header}\n{state.title}\n\n{state.content}\n"


def _render_entry(entry: LibraryEntry) -> str:
    return f"  {entry.name} (chapter {entry.last_chapter})  {entry.url}"


# ---------------------------------------------------------------------------
# Subcommand handlers (network)
# ---------------------------------------------------------------------------

async def _handle_read(args: argparse.Namespace, service: ReaderService) -> int:
    """Load a chapter, then apply at most one navigation step."""
    state = await service.load(args.url)
    if args.next:
        state = await service.next_chapter(state)
    elif args.prev:
        state = await service.previous_chapter(state)
    elif args.chapter is not None:
        state = await service.select_chapter(state, args.chapter)

    print(_render_page(state))
    return _EXIT_OK


async def _handle_resume(args: argparse.Namespace, service: ReaderService) -> int:
    """Reopen a title from the recency list (or, failing that, the tracked list)."""
    store = service.store
    entry = next((e for e in store.recent if e.name == args.name), None) or store.get_tracked(args.name)
    if entry is None:
        print(f"Error: '{args.name}' is not in your library", file=sys.stderr)
        return _EXIT_ERROR

    state = await service.resume(entry)
    print(_render_page(state))
    return _EXIT_OK


async def _handle_search(args: argparse.Namespace, service: ReaderService) -> int:
    """Print numbered search hits; ``--open N`` starts reading hit N."""
    result = await service.search(" ".join(args.query))

    if not result.hits:
        print("No results found. Try a shorter query.")
        return _EXIT_OK

    if args.open is None:
        print(f"Results for '{result.query}':")
        for number, hit in enumerate(result.hits, start=1):
            print(f"  {number:>2}. {hit.label}  {hit.url}")
        if result.skipped:
            print(f"  ({result.skipped} malformed result(s) skipped)")
        return _EXIT_OK

    if not 1 <= args.open <= len(result.hits):
        print(
            f"Error: --open must be between 1 and {len(result.hits)}",
            file=sys.stderr,
        )
        return _EXIT_ERROR

    state = await service.open_hit(result.hits[args.open - 1])
    print(_render_page(state))
    return _EXIT_OK


async def _handle_track(args: argparse.Namespace, service: ReaderService) -> int:
    state = await service.load(args.url)
    entry = service.track(state)
    print(f"Tracking {entry.name} (chapter {entry.last_chapter})")
    return _EXIT_OK


async def _handle_updates(args: argparse.Namespace, service: ReaderService) -> int:
    """Check all tracked titles; exit non-zero if any check failed."""
    if not service.store.tracked:
        print("No tracked titles. Use 'track' to add one.")
        return _EXIT_OK

    report = await service.check_updates()

    for notice in report.updated:
        print(
            f"  NEW  {notice.entry.name}: {notice.new_chapters} new "
            f"(chapter {notice.entry.last_chapter} -> {notice.latest_chapter})"
        )
    for entry in report.up_to_date:
        print(f"       {entry.name}: up to date (chapter {entry.last_chapter})")
    for failure in report.failed:
        print(f"  FAIL {failure.entry.name}: {failure.error}", file=sys.stderr)

    print(f"{len(report.updated)} of {report.checked} tracked title(s) have new chapters.")
    return _EXIT_ERROR if report.failed else _EXIT_OK


# ---------------------------------------------------------------------------
# Subcommand handlers (local only)
# ---------------------------------------------------------------------------

def _handle_untrack(args: argparse.Namespace, store: LibraryStore) -> int:
    if not store.remove_tracked(args.name):
        print(f"Error: '{args.name}' is not tracked", file=sys.stderr)
        return _EXIT_ERROR
    store.save()
    print(f"Stopped tracking {args.name}")
    return _EXIT_OK


def _handle_library(args: argparse.Namespace, store: LibraryStore) -> int:
    print("Tracked:")
    for entry in store.tracked:
        print(_render_entry(entry))
    if not store.tracked:
        print("  (none)")

    print("Recently read:")
    for entry in store.recent:
        print(_render_entry(entry))
    if not store.recent:
        print("  (none)")
    return _EXIT_OK


_NETWORK_HANDLERS = {
    "read": _handle_read,
    "resume": _handle_resume,
    "search": _handle_search,
    "track": _handle_track,
    "updates": _handle_updates,
}

_LOCAL_HANDLERS = {
    "untrack": _handle_untrack,
    "library": _handle_library,
}


# ---------------------------------------------------------------------------
# Plumbing
# ---------------------------------------------------------------------------

def _load_store(app_settings: Settings, regenerate: bool) -> LibraryStore | None:
    """Open the library; ``None`` means a corrupt file the user has not reset."""
    store = LibraryStore(app_settings.data_path, recent_limit=app_settings.recent_limit)
    try:
        store.load()
    except StoreNotFoundError:
        pass
    except StoreCorruptError as exc:
        if not regenerate:
            backup = f" A backup was saved to {exc.backup_path}." if exc.backup_path else ""
            print(
                f"Error: library file {exc.path} is corrupt.{backup}\n"
                "Re-run with --regenerate to start a new, empty library.",
                file=sys.stderr,
            )
            return None
        store.regenerate()
        print(f"Started a new library; the old file is kept at {store.backup_path}", file=sys.stderr)
    return store


async def _run_network(args: argparse.Namespace, app_settings: Settings, store: LibraryStore) -> int:
    fetcher = build_fetcher(app_settings)
    try:
        service = build_reader_service(app_settings, fetcher=fetcher, store=store)
        return await _NETWORK_HANDLERS[args.command](args, service)
    except LncliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return _EXIT_ERROR
    finally:
        await fetcher.aclose()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the reader CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m lncli.cli",
        description="Read serialized web fiction and track new chapters.",
    )
    parser.add_argument("--data-path", type=Path, help="Library file (default: per-user config dir)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument(
        "--regenerate",
        action="store_true",
        help="Replace a corrupt library file with an empty one (a backup is kept)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Reader commands")

    # -- read --
    read_parser = subparsers.add_parser("read", help="Read a chapter by URL")
    read_parser.add_argument("url", help="Chapter URL (a series URL opens chapter 1)")
    step = read_parser.add_mutually_exclusive_group()
    step.add_argument("--next", action="store_true", help="Read the following chapter")
    step.add_argument("--prev", action="store_true", help="Read the preceding chapter")
    step.add_argument("--chapter", help="Jump to this chapter number")

    # -- resume --
    resume_parser = subparsers.add_parser("resume", help="Reopen a title from your library")
    resume_parser.add_argument("name", help="Title exactly as listed by 'library'")

    # -- search --
    search_parser = subparsers.add_parser("search", help="Search titles on the site")
    search_parser.add_argument("query", nargs="+", help="Search terms")
    search_parser.add_argument("--open", type=int, metavar="N", help="Start reading hit N")

    # -- track / untrack --
    track_parser = subparsers.add_parser("track", help="Track the series of a chapter URL")
    track_parser.add_argument("url", help="Chapter URL you have reached")
    untrack_parser = subparsers.add_parser("untrack", help="Stop tracking a title")
    untrack_parser.add_argument("name", help="Title exactly as listed by 'library'")

    # -- updates / library --
    subparsers.add_parser("updates", help="Check tracked titles for new chapters")
    subparsers.add_parser("library", help="List tracked and recently read titles")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Local commands (untrack, library) never touch the network; all
    others build a ReaderService around an httpx fetcher for the run.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(_EXIT_ERROR)

    overrides = {}
    if args.data_path is not None:
        overrides["data_path"] = args.data_path
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        app_settings = load_settings(**overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(_EXIT_ERROR)
    configure_logging(
        app_settings.log_level,
        json_output=args.json_logs or app_settings.app_env == "production",
    )

    try:
        store = _load_store(app_settings, args.regenerate)
        if store is None:
            exit_code = _EXIT_CORRUPT_STORE
        elif args.command in _LOCAL_HANDLERS:
            exit_code = _LOCAL_HANDLERS[args.command](args, store)
        else:
            exit_code = asyncio.run(_run_network(args, app_settings, store))
    except LncliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = _EXIT_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
