"""
Shared fixtures for arcdupe tests.
Creates entries, real ZIP/7Z archives and a corrupt RAR in isolated tmp_path directories.
"""
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pytest

# Add src/ and tests/ to sys.path so 'arcdupe' and 'builders' are importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from arcdupe.core.models import ArchiveEntry  # noqa: E402
from builders import BASE_TIME, write_zip  # noqa: E402


@pytest.fixture
def make_entry():
    """Factory for in-memory ArchiveEntry objects (nothing is written to disk)."""
    def _make(path: str, size: int = 100, modified_at: Optional[datetime] = None, name: Optional[str] = None):
        return ArchiveEntry(path=path, size=size, modified_at=modified_at or BASE_TIME, name=name)
    return _make


@pytest.fixture
def zip_archive(tmp_path):
    """Factory writing a real ZIP archive and returning its ArchiveEntry."""
    def _make(filename: str, members: Dict[str, bytes]) -> ArchiveEntry:
        path = write_zip(tmp_path / filename, members)
        return ArchiveEntry.from_path(str(path))
    return _make


@pytest.fixture
def seven_zip_archive(tmp_path):
    """Factory writing a real 7Z archive (via py7zr) and returning its path."""
    import py7zr

    def _make(filename: str, members: Dict[str, bytes]) -> str:
        staging = tmp_path / f"{filename}.staging"
        archive_path = tmp_path / filename
        with py7zr.SevenZipFile(archive_path, "w") as szf:
            for name, data in members.items():
                source = staging / name
                source.parent.mkdir(parents=True, exist_ok=True)
                source.write_bytes(data)
                szf.write(source, arcname=name)
        return str(archive_path)
    return _make


@pytest.fixture
def corrupt_rar(tmp_path) -> str:
    """A .rar file with a RAR signature followed by garbage."""
    path = tmp_path / "broken.rar"
    path.write_bytes(b"Rar!\x1a\x07\x00" + b"\xde\xad\xbe\xef" * 64)
    return str(path)


class FakeHashCache:
    """In-memory stand-in exposing the visual-hash part of the cache interface."""

    def __init__(self):
        self.hashes = {}

    def put_visual_hash(self, path, mod_time_tag, phash):
        self.hashes[path] = (mod_time_tag, phash)

    def get_visual_hash(self, path, mod_time_tag):
        stored = self.hashes.get(path)
        if stored is None or stored[0] != mod_time_tag:
            return None
        return stored[1]


@pytest.fixture
def hash_cache():
    return FakeHashCache()


@pytest.fixture
def sqlite_cache(tmp_path):
    from arcdupe.cache.store import SqliteContentCache
    cache = SqliteContentCache(str(tmp_path / "cfg" / "cache.db"))
    yield cache
    cache.close()
