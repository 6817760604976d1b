"""
Tests for the SQLite content cache, the disabled fallback and cache keys.
"""
import random
import sqlite3
from datetime import timedelta

from arcdupe.cache.keys import group_hash, scan_fingerprint
from arcdupe.cache.store import DisabledCache, SqliteContentCache, open_cache
from arcdupe.core.models import SimilarityGroup
from builders import BASE_TIME


class TestKeys:
    def test_fingerprint_ignores_input_order(self, make_entry):
        entries = [make_entry(f"/scan/{i}.zip") for i in range(20)]
        shuffled = list(entries)
        random.Random(1).shuffle(shuffled)
        assert scan_fingerprint(entries) == scan_fingerprint(shuffled)

    def test_fingerprint_changes_with_modification_time(self, make_entry):
        before = [make_entry("/a.zip"), make_entry("/b.zip")]
        after = [make_entry("/a.zip"), make_entry("/b.zip", modified_at=BASE_TIME + timedelta(seconds=1))]
        assert scan_fingerprint(before) != scan_fingerprint(after)

    def test_group_hash_ignores_order_and_duplicates(self):
        assert group_hash(["/b.zip", "/a.zip"]) == group_hash(["/a.zip", "/b.zip", "/a.zip"])
        assert group_hash(["/a.zip", "/b.zip"]) != group_hash(["/a.zip", "/c.zip"])

    def test_group_hash_separates_path_boundaries(self):
        assert group_hash(["/ab", "/c"]) != group_hash(["/a", "b/c"])


class TestSqliteContentCache:
    def test_creates_parent_directory(self, tmp_path):
        cache = SqliteContentCache(str(tmp_path / "deep" / "dir" / "cache.db"))
        try:
            assert (tmp_path / "deep" / "dir" / "cache.db").exists()
            assert cache.enabled
        finally:
            cache.close()

    def test_results_round_trip(self, sqlite_cache, make_entry):
        group = SimilarityGroup("dragon", [make_entry("/a/dragon.zip", size=10), make_entry("/b/dragon.rar", size=20)])
        sqlite_cache.put_results("fp", [group])

        (loaded,) = sqlite_cache.get_results("fp")
        assert loaded.base_name == "dragon"
        assert loaded.member_paths() == ["/a/dragon.zip", "/b/dragon.rar"]
        assert [m.size for m in loaded.members] == [10, 20]
        assert loaded.members[0].modified_at == BASE_TIME
        assert sqlite_cache.get_results("other") is None

    def test_unreadable_results_row_is_a_miss(self, sqlite_cache):
        with sqlite_cache.conn:
            sqlite_cache.conn.execute("INSERT INTO scan_cache VALUES('fp', '[{\"oops\": 1}]')")
        assert sqlite_cache.get_results("fp") is None

    def test_preview_path_invalidated_by_modification_tag(self, sqlite_cache):
        sqlite_cache.put_preview_path("/a.zip", "t1", "cover.png")
        assert sqlite_cache.get_preview_path("/a.zip", "t1") == "cover.png"
        assert sqlite_cache.get_preview_path("/a.zip", "t2") is None

    def test_visual_hash_round_trip_full_width(self, sqlite_cache):
        sqlite_cache.put_visual_hash("/a.zip", "t1", 2 ** 64 - 1)
        sqlite_cache.put_visual_hash("/b.zip", "t1", 0)
        assert sqlite_cache.get_visual_hash("/a.zip", "t1") == 2 ** 64 - 1
        assert sqlite_cache.get_visual_hash("/b.zip", "t1") == 0
        assert sqlite_cache.get_visual_hash("/a.zip", "t2") is None

    def test_visual_hash_overwrite(self, sqlite_cache):
        sqlite_cache.put_visual_hash("/a.zip", "t1", 1)
        sqlite_cache.put_visual_hash("/a.zip", "t2", 2)
        assert sqlite_cache.get_visual_hash("/a.zip", "t2") == 2

    def test_ignored_groups(self, sqlite_cache):
        key = sqlite_cache.add_ignored_group(["/b.zip", "/a.zip"])
        assert key == group_hash(["/a.zip", "/b.zip"])
        assert sqlite_cache.is_group_ignored(["/a.zip", "/b.zip"])
        assert not sqlite_cache.is_group_ignored(["/a.zip"])
        # idempotent
        assert sqlite_cache.add_ignored_group(["/a.zip", "/b.zip"]) == key

    def test_persists_across_connections(self, tmp_path):
        db_path = str(tmp_path / "cache.db")
        first = SqliteContentCache(db_path)
        first.put_visual_hash("/a.zip", "t1", 42)
        first.add_ignored_group(["/a.zip", "/b.zip"])
        first.close()

        second = SqliteContentCache(db_path)
        try:
            assert second.get_visual_hash("/a.zip", "t1") == 42
            assert second.is_group_ignored(["/b.zip", "/a.zip"])
        finally:
            second.close()

    def test_reset(self, sqlite_cache, make_entry):
        sqlite_cache.put_results("fp", [SimilarityGroup("x", [make_entry("/1.zip"), make_entry("/2.zip")])])
        sqlite_cache.put_preview_path("/a.zip", "t", "cover.png")
        sqlite_cache.put_visual_hash("/a.zip", "t", 5)
        sqlite_cache.add_ignored_group(["/a.zip", "/b.zip"])

        sqlite_cache.reset()

        assert sqlite_cache.get_results("fp") is None
        assert sqlite_cache.get_preview_path("/a.zip", "t") is None
        assert sqlite_cache.get_visual_hash("/a.zip", "t") is None
        assert not sqlite_cache.is_group_ignored(["/a.zip", "/b.zip"])


class TestOpenCache:
    def test_disabled_without_path(self):
        assert isinstance(open_cache(None), DisabledCache)

    def test_unopenable_path_degrades(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file")
        cache = open_cache(str(blocker / "cache.db"))
        assert isinstance(cache, DisabledCache)
        assert not cache.enabled

    def test_opens_sqlite(self, tmp_path):
        cache = open_cache(str(tmp_path / "cache.db"))
        try:
            assert isinstance(cache, SqliteContentCache)
        finally:
            cache.close()


class TestDisabledCache:
    def test_every_lookup_misses(self, make_entry):
        cache = DisabledCache()
        cache.put_results("fp", [SimilarityGroup("x", [make_entry("/1.zip"), make_entry("/2.zip")])])
        cache.put_preview_path("/a.zip", "t", "cover.png")
        cache.put_visual_hash("/a.zip", "t", 5)

        assert cache.get_results("fp") is None
        assert cache.get_preview_path("/a.zip", "t") is None
        assert cache.get_visual_hash("/a.zip", "t") is None

    def test_ignore_returns_key_but_is_not_persisted(self):
        cache = DisabledCache()
        assert cache.add_ignored_group(["/a.zip", "/b.zip"]) == group_hash(["/a.zip", "/b.zip"])
        assert not cache.is_group_ignored(["/a.zip", "/b.zip"])


class TestRuntimeFailure:
    """A store that breaks after opening degrades instead of raising."""

    def test_locked_store_degrades_to_misses(self, tmp_path):
        db_path = str(tmp_path / "cache.db")
        cache = SqliteContentCache(db_path, timeout=0.05)
        cache.put_visual_hash("/kept.zip", "t1", 7)

        other = sqlite3.connect(db_path, timeout=0.05)
        other.execute("BEGIN EXCLUSIVE")
        try:
            cache.put_visual_hash("/a.zip", "t1", 42)
            cache.add_ignored_group(["/a.zip", "/b.zip"])
            cache.reset()

            assert not cache.enabled
            assert cache.get_visual_hash("/a.zip", "t1") is None
            assert cache.get_visual_hash("/kept.zip", "t1") is None
        finally:
            other.rollback()
            other.close()
            cache.close()

        reopened = SqliteContentCache(db_path)
        try:
            assert reopened.get_visual_hash("/kept.zip", "t1") == 7
            assert reopened.get_visual_hash("/a.zip", "t1") is None
        finally:
            reopened.close()

    def test_closed_connection_degrades(self, tmp_path):
        cache = SqliteContentCache(str(tmp_path / "cache.db"))
        cache.conn.close()

        assert cache.get_results("fp") is None
        assert cache.get_preview_path("/a.zip", "t") is None
        cache.put_preview_path("/a.zip", "t", "cover.png")
        assert not cache.enabled
