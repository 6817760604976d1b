"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/readers.py
Read-only access to ZIP, RAR and 7Z containers.

Every reader opens the archive per call and closes it before returning, so a
reader instance holds no handles and can be shared between worker threads.
Library-specific failures are translated to CorruptArchiveError; a missing
member is EntryNotFoundError.
"""

import os
import tempfile
import zipfile
import zlib
from typing import Dict, List

import py7zr
from py7zr.exceptions import ArchiveError, PasswordRequired
import rarfile

from arcdupe.core.models import PreviewCandidate
from arcdupe.errors import CorruptArchiveError, EntryNotFoundError, UnsupportedFormatError


class ZipArchiveReader:
    """ZIP reader backed by the standard library zipfile module."""

    _ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError, NotImplementedError, RuntimeError)

    def list_files(self, archive_path: str) -> List[PreviewCandidate]:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                return [
                    PreviewCandidate(info.filename, info.file_size)
                    for info in zf.infolist()
                    if not info.is_dir()
                ]
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to open ZIP: {e}") from e

    def read(self, archive_path: str, internal_path: str) -> bytes:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                try:
                    info = zf.getinfo(internal_path)
                except KeyError:
                    raise EntryNotFoundError(archive_path, f"File not found in ZIP: {internal_path}")
                return zf.read(info)
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to read {internal_path}: {e}") from e

    def read_all(self, archive_path: str) -> Dict[str, bytes]:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                return {
                    info.filename: zf.read(info)
                    for info in zf.infolist()
                    if not info.is_dir()
                }
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to extract ZIP: {e}") from e


class RarArchiveReader:
    """
    RAR reader backed by rarfile.
    Listing works on its own; reading member data needs an unrar backend on PATH.
    Without that backend reads raise UnsupportedFormatError rather than
    reporting the archive as corrupt.
    """

    _ERRORS = (rarfile.Error, EOFError, OSError)

    def list_files(self, archive_path: str) -> List[PreviewCandidate]:
        try:
            with rarfile.RarFile(archive_path) as rf:
                return [
                    PreviewCandidate(info.filename, info.file_size)
                    for info in rf.infolist()
                    if not info.is_dir()
                ]
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to open RAR: {e}") from e

    def read(self, archive_path: str, internal_path: str) -> bytes:
        try:
            with rarfile.RarFile(archive_path) as rf:
                try:
                    info = rf.getinfo(internal_path)
                except rarfile.NoRarEntry:
                    raise EntryNotFoundError(archive_path, f"File not found in RAR: {internal_path}")
                return rf.read(info)
        except rarfile.RarCannotExec as e:
            raise UnsupportedFormatError(f"No RAR extraction tool available for {archive_path}: {e}") from e
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to read {internal_path}: {e}") from e

    def read_all(self, archive_path: str) -> Dict[str, bytes]:
        try:
            with rarfile.RarFile(archive_path) as rf:
                return {
                    info.filename: rf.read(info)
                    for info in rf.infolist()
                    if not info.is_dir()
                }
        except rarfile.RarCannotExec as e:
            raise UnsupportedFormatError(f"No RAR extraction tool available for {archive_path}: {e}") from e
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to extract RAR: {e}") from e


class SevenZipArchiveReader:
    """
    7Z reader backed by py7zr.
    Member data is extracted into a temporary directory and read back from disk.
    """

    _ERRORS = (ArchiveError, PasswordRequired, EOFError, OSError, ValueError)

    def list_files(self, archive_path: str) -> List[PreviewCandidate]:
        try:
            with py7zr.SevenZipFile(archive_path, mode="r") as szf:
                return [
                    PreviewCandidate(info.filename, info.uncompressed or 0)
                    for info in szf.list()
                    if not info.is_directory
                ]
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to open 7Z: {e}") from e

    def read(self, archive_path: str, internal_path: str) -> bytes:
        try:
            with py7zr.SevenZipFile(archive_path, mode="r") as szf:
                if internal_path not in szf.getnames():
                    raise EntryNotFoundError(archive_path, f"File not found in 7Z: {internal_path}")
                with tempfile.TemporaryDirectory(prefix="arcdupe-") as tmp_dir:
                    szf.extract(path=tmp_dir, targets=[internal_path])
                    return self._read_extracted(tmp_dir, internal_path)
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to read {internal_path}: {e}") from e

    def read_all(self, archive_path: str) -> Dict[str, bytes]:
        try:
            with py7zr.SevenZipFile(archive_path, mode="r") as szf:
                names = [info.filename for info in szf.list() if not info.is_directory]
                with tempfile.TemporaryDirectory(prefix="arcdupe-") as tmp_dir:
                    szf.extractall(path=tmp_dir)
                    return {name: self._read_extracted(tmp_dir, name) for name in names}
        except self._ERRORS as e:
            raise CorruptArchiveError(archive_path, f"Failed to extract 7Z: {e}") from e

    @staticmethod
    def _read_extracted(tmp_dir: str, internal_path: str) -> bytes:
        with open(os.path.join(tmp_dir, *internal_path.split("/")), "rb") as f:
            return f.read()
