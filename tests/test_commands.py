"""
End-to-end tests for AnalysisCommand over real ZIP archives.
"""
import sqlite3

import pytest

from arcdupe import config

from arcdupe.cache.store import DisabledCache, SqliteContentCache
from arcdupe.commands import STAGE_NAMES, STAGE_VISUAL, AnalysisCommand
from arcdupe.config import AnalysisMode, AnalysisParams
from arcdupe.core.models import ArchiveEntry
from arcdupe.orchestrator.report import AnalysisStatus
from builders import binary_stl, noise_image, unit_triangles


@pytest.fixture
def library(tmp_path, zip_archive):
    """Two copies of one model, an unrelated model, a mesh-only archive and a broken file."""
    dragon_cover = noise_image(11)
    entries = [
        zip_archive("Dragon.zip", {"dragon/cover.png": dragon_cover, "dragon/body.stl": b"solid"}),
        zip_archive("Dragon (1).zip", {"dragon/cover.png": dragon_cover, "dragon/body.stl": b"solid"}),
        zip_archive("Orc Warrior.zip", {"cover.png": noise_image(22)}),
        zip_archive("Spaceship.zip", {"hull.stl": binary_stl(unit_triangles(3))}),
    ]
    broken = tmp_path / "Broken.zip"
    broken.write_bytes(b"garbage")
    entries.append(ArchiveEntry.from_path(str(broken)))
    return entries


def dragon_paths(entries):
    return sorted(e.path for e in entries[:2])


class TestAnalysisCommand:
    def test_full_run(self, library, sqlite_cache):
        calls = []
        params = AnalysisParams(threshold=70, workers=2, max_extractions=1, progress_interval=1)
        command = AnalysisCommand(cache=sqlite_cache, params=params)

        report = command.execute(library, progress_callback=lambda stage, pct: calls.append((stage, pct)))
        snapshot = report.snapshot()

        assert snapshot.status == AnalysisStatus.DONE
        assert any(sorted(g.member_paths()) == dragon_paths(library) for g in snapshot.size_groups)
        assert [(g.base_name, sorted(g.member_paths())) for g in snapshot.name_groups] == [
            ("dragon", dragon_paths(library))
        ]
        assert [g.base_name for g in snapshot.visual_groups] == ["Visual Match: Dragon.zip"]
        assert sorted(snapshot.visual_groups[0].member_paths()) == dragon_paths(library)

        assert [path for path, _ in snapshot.errors] == [library[4].path]
        assert snapshot.progress[STAGE_VISUAL] == 100.0
        visual_progress = [pct for stage, pct in calls if stage == STAGE_VISUAL]
        assert visual_progress == sorted(visual_progress)

    def test_hashes_and_clusters_are_cached(self, library, sqlite_cache):
        AnalysisCommand(cache=sqlite_cache).execute(library)

        dragon = library[0]
        spaceship = library[3]
        assert sqlite_cache.get_visual_hash(dragon.path, dragon.mod_time_tag) is not None
        assert sqlite_cache.get_preview_path(spaceship.path, spaceship.mod_time_tag) == "hull.stl"
        assert sqlite_cache.get_visual_hash(spaceship.path, spaceship.mod_time_tag) is None

        second = AnalysisCommand(cache=sqlite_cache).execute(library).snapshot()
        assert [g.base_name for g in second.name_groups] == ["dragon"]
        assert len(second.visual_groups) == 1

    def test_disabled_cache_gives_same_groups(self, library, sqlite_cache):
        cached = AnalysisCommand(cache=sqlite_cache).execute(library).snapshot()
        uncached = AnalysisCommand(cache=DisabledCache()).execute(library).snapshot()

        def shape(snapshot):
            return (
                [(g.base_name, g.member_paths()) for g in snapshot.name_groups],
                [(g.base_name, g.member_paths()) for g in snapshot.visual_groups],
                [(p.a.path, p.b.path, p.score) for p in snapshot.similar_pairs],
            )

        assert shape(cached) == shape(uncached)

    def test_ignore_mid_scan(self, library):
        """Marking the dragon pair during the name pass also hides its later visual group."""
        command = AnalysisCommand(cache=DisabledCache())
        paths = [e.path for e in library[:2]]

        def on_progress(stage, percent):
            if stage == STAGE_NAMES:
                command.report.mark_ignored(paths)

        snapshot = command.execute(library, progress_callback=on_progress).snapshot()

        assert snapshot.name_groups == []
        assert snapshot.visual_groups == []

    def test_name_mode_skips_visual(self, library):
        params = AnalysisParams(mode=AnalysisMode.NAME)
        snapshot = AnalysisCommand(cache=DisabledCache(), params=params).execute(library).snapshot()

        assert snapshot.size_groups == []
        assert snapshot.visual_groups == []
        assert snapshot.errors == []
        assert len(snapshot.name_groups) == 1

    def test_cache_path_param_opens_cache(self, tmp_path, library):
        params = AnalysisParams(cache_path=str(tmp_path / "cfg" / "cache.db"))
        command = AnalysisCommand(params=params)
        try:
            assert command.cache.enabled
            command.execute(library)
        finally:
            command.cache.close()

    def test_default_params_use_per_user_store(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config.sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        command = AnalysisCommand()
        try:
            assert isinstance(command.cache, SqliteContentCache)
            assert command.cache.db_path == str(tmp_path / "arcdupe" / "cache.db")
        finally:
            command.cache.close()

    def test_no_cache_path_disables_store(self):
        command = AnalysisCommand(params=AnalysisParams(cache_path=None))
        assert isinstance(command.cache, DisabledCache)


class TestStoreFailureDuringAnalysis:
    """A store locked by another process never aborts the run."""

    def test_locked_store_still_produces_every_group(self, tmp_path, library):
        db_path = str(tmp_path / "locked.db")
        cache = SqliteContentCache(db_path, timeout=0.05)
        other = sqlite3.connect(db_path, timeout=0.05)
        other.execute("BEGIN EXCLUSIVE")
        try:
            snapshot = AnalysisCommand(cache=cache).execute(library).snapshot()
        finally:
            other.rollback()
            other.close()
            cache.close()

        assert snapshot.status == AnalysisStatus.DONE
        assert [g.base_name for g in snapshot.name_groups] == ["dragon"]
        assert [g.base_name for g in snapshot.visual_groups] == ["Visual Match: Dragon.zip"]
        assert [path for path, _ in snapshot.errors] == [library[4].path]

    def test_locked_store_name_mode(self, tmp_path, library):
        db_path = str(tmp_path / "locked.db")
        cache = SqliteContentCache(db_path, timeout=0.05)
        other = sqlite3.connect(db_path, timeout=0.05)
        other.execute("BEGIN EXCLUSIVE")
        try:
            params = AnalysisParams(mode=AnalysisMode.NAME, cache_path=None)
            snapshot = AnalysisCommand(cache=cache, params=params).execute(library).snapshot()
        finally:
            other.rollback()
            other.close()
            cache.close()

        assert len(snapshot.name_groups) == 1
        assert not cache.enabled
