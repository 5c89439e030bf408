"""Unit tests for the persistent library store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lncli.services.library_store import LibraryStore
from lncli.utils.errors import StoreCorruptError, StoreNotFoundError
from tests.conftest import chapter_url, make_entry


def _backups(path: Path) -> list[Path]:
    return sorted(path.parent.glob(f"{path.name}.corrupt-*"))


# ======================================================================
# Tracked
# ======================================================================


class TestTracked:
    def test_add_is_idempotent_by_name(self, store: LibraryStore) -> None:
        assert store.add_tracked(make_entry(chapter=3)) is True
        assert store.add_tracked(make_entry(chapter=9)) is False

        assert len(store.tracked) == 1
        assert store.tracked[0].last_chapter == 3

    def test_preserves_insertion_order(self, store: LibraryStore) -> None:
        store.add_tracked(make_entry("B", slug="b"))
        store.add_tracked(make_entry("A", slug="a"))
        assert [e.name for e in store.tracked] == ["B", "A"]

    def test_remove(self, store: LibraryStore) -> None:
        store.add_tracked(make_entry())
        assert store.remove_tracked("Martial Peak") is True
        assert store.remove_tracked("Martial Peak") is False
        assert store.tracked == ()

    def test_progress_advances_matching_series(self, store: LibraryStore) -> None:
        store.add_tracked(make_entry(chapter=3))
        store.add_tracked(make_entry("Martial Peak 2", chapter=3, slug="martial-peak-2"))

        changed = store.record_chapter_progress(chapter_url(8), 8)

        assert [e.name for e in changed] == ["Martial Peak"]
        assert store.get_tracked("Martial Peak").last_chapter == 8
        assert store.get_tracked("Martial Peak").url == chapter_url(8)
        assert store.get_tracked("Martial Peak 2").last_chapter == 3

    def test_progress_never_regresses(self, store: LibraryStore) -> None:
        store.add_tracked(make_entry(chapter=20))
        assert store.record_chapter_progress(chapter_url(5), 5) == []
        assert store.get_tracked("Martial Peak").last_chapter == 20


# ======================================================================
# Recent
# ======================================================================


class TestRecent:
    def test_lower_chapter_does_not_replace(self, store: LibraryStore) -> None:
        store.record_recent(make_entry(chapter=5))
        stored = store.record_recent(make_entry(chapter=3))

        assert stored.last_chapter == 5
        assert [e.last_chapter for e in store.recent] == [5]

    def test_higher_chapter_replaces(self, store: LibraryStore) -> None:
        store.record_recent(make_entry(chapter=5))
        store.record_recent(make_entry(chapter=6))
        assert store.recent[0].last_chapter == 6

    def test_touch_moves_to_front(self, store: LibraryStore) -> None:
        store.record_recent(make_entry("A", slug="a"))
        store.record_recent(make_entry("B", slug="b"))
        store.record_recent(make_entry("A", chapter=1, slug="a"))
        assert [e.name for e in store.recent] == ["A", "B"]

    def test_capped_at_ten_newest_first(self, store: LibraryStore) -> None:
        for i in range(11):
            store.record_recent(make_entry(f"Novel {i}", slug=f"novel-{i}"))

        names = [e.name for e in store.recent]
        assert len(names) == 10
        assert names[0] == "Novel 10"
        assert "Novel 0" not in names

    def test_custom_limit(self, library_path: Path) -> None:
        store = LibraryStore(library_path, recent_limit=2)
        for name in ("A", "B", "C"):
            store.record_recent(make_entry(name, slug=name.lower()))
        assert [e.name for e in store.recent] == ["C", "B"]

    def test_limit_above_ten_is_clamped(self, library_path: Path) -> None:
        store = LibraryStore(library_path, recent_limit=50)
        for i in range(12):
            store.record_recent(make_entry(f"Novel {i}", slug=f"novel-{i}"))
        assert len(store.recent) == 10
        assert store.recent[0].name == "Novel 11"


# ======================================================================
# Persistence
# ======================================================================


class TestPersistence:
    def test_missing_file(self, store: LibraryStore) -> None:
        with pytest.raises(StoreNotFoundError):
            store.load()

    def test_open_missing_file_is_empty(self, library_path: Path) -> None:
        store = LibraryStore.open(library_path)
        assert store.tracked == ()
        assert store.recent == ()
        assert not library_path.exists()

    def test_round_trip(self, store: LibraryStore, library_path: Path) -> None:
        store.add_tracked(make_entry(chapter=12))
        store.record_recent(make_entry("Other", chapter=2, slug="other"))
        store.record_recent(make_entry(chapter=12))
        store.save()

        reloaded = LibraryStore.open(library_path)
        assert reloaded.tracked == store.tracked
        assert reloaded.recent == store.recent

    def test_file_format(self, store: LibraryStore, library_path: Path) -> None:
        store.add_tracked(make_entry(chapter=12))
        store.save()

        data = json.loads(library_path.read_text(encoding="utf-8"))
        assert data == {
            "tracked_novels": [
                {"name": "Martial Peak", "url": chapter_url(12), "last_chapter": 12}
            ],
            "recent_novels": [],
        }

    def test_save_leaves_no_temp_files(self, store: LibraryStore, library_path: Path) -> None:
        store.save()
        store.save()
        assert [p.name for p in library_path.parent.iterdir()] == ["data.json"]

    def test_load_normalizes_duplicates_and_cap(self, library_path: Path) -> None:
        recent = [
            {"name": f"N{i}", "url": chapter_url(1, f"n{i}"), "last_chapter": 1} for i in range(12)
        ]
        tracked = [
            {"name": "A", "url": chapter_url(1, "a"), "last_chapter": 1},
            {"name": "A", "url": chapter_url(9, "a"), "last_chapter": 9},
        ]
        library_path.parent.mkdir(parents=True)
        library_path.write_text(
            json.dumps({"tracked_novels": tracked, "recent_novels": recent}), encoding="utf-8"
        )

        store = LibraryStore.open(library_path)
        assert len(store.tracked) == 1
        assert store.tracked[0].last_chapter == 1
        assert len(store.recent) == 10
        assert store.recent[0].name == "N0"

    def test_save_normalizes_direct_edits(self, store: LibraryStore, library_path: Path) -> None:
        store._tracked = [
            make_entry("A", chapter=1, slug="a"),
            make_entry("B", chapter=2, slug="b"),
            make_entry("A", chapter=9, slug="a"),
        ]
        for i in range(12):
            entry = make_entry(f"N{i}", chapter=1, slug=f"n{i}")
            store._recent[entry.name] = entry

        store.save()

        data = json.loads(library_path.read_text(encoding="utf-8"))
        assert [e["name"] for e in data["tracked_novels"]] == ["A", "B"]
        assert data["tracked_novels"][0]["last_chapter"] == 1
        assert [e["name"] for e in data["recent_novels"]] == [f"N{i}" for i in range(10)]

    def test_corrupt_file_backed_up_and_kept(self, store: LibraryStore, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreCorruptError) as exc_info:
            store.load()

        assert library_path.read_text(encoding="utf-8") == "{not json"
        backups = _backups(library_path)
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{not json"
        assert exc_info.value.backup_path == backups[0]
        assert exc_info.value.path == library_path

    def test_repeated_corrupt_loads_share_one_backup(self, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text("{not json", encoding="utf-8")

        for _ in range(3):
            store = LibraryStore(library_path)
            with pytest.raises(StoreCorruptError) as exc_info:
                store.load()

        backups = _backups(library_path)
        assert len(backups) == 1
        assert exc_info.value.backup_path == backups[0]
        assert store.backup_path == backups[0]

    def test_changed_corrupt_file_gets_new_backup(self, store: LibraryStore, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreCorruptError):
            store.load()

        library_path.write_text("still [not json", encoding="utf-8")
        with pytest.raises(StoreCorruptError):
            LibraryStore(library_path).load()

        contents = sorted(p.read_text(encoding="utf-8") for p in _backups(library_path))
        assert contents == ["still [not json", "{not json"]

    def test_wrong_shape_is_corrupt(self, store: LibraryStore, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text(
            json.dumps({"tracked_novels": [{"name": "", "url": "x", "last_chapter": 0}]}),
            encoding="utf-8",
        )
        with pytest.raises(StoreCorruptError):
            store.load()

    def test_regenerate_after_corrupt(self, store: LibraryStore, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text("garbage", encoding="utf-8")
        with pytest.raises(StoreCorruptError):
            store.load()

        store.regenerate()

        assert json.loads(library_path.read_text(encoding="utf-8")) == {
            "tracked_novels": [],
            "recent_novels": [],
        }
        assert len(_backups(library_path)) == 1
        assert store.backup_path.read_text(encoding="utf-8") == "garbage"

    def test_regenerate_backs_up_when_not_loaded(self, library_path: Path) -> None:
        library_path.parent.mkdir(parents=True)
        library_path.write_text("garbage", encoding="utf-8")

        store = LibraryStore(library_path)
        store.regenerate()

        assert store.backup_path is not None
        assert store.backup_path.read_text(encoding="utf-8") == "garbage"

