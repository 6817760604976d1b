"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

errors.py
Error taxonomy shared by every arcdupe component.

Component-internal failures (parsing, extraction, hashing) are raised to the
immediate caller and turned into values at the worker-pool boundary.
Cache unavailability never raises past `open_cache()`: it becomes the
disabled-cache degraded mode instead.
"""


class ArcdupeError(Exception):
    """Base class for all errors raised by arcdupe."""


class UnsupportedFormatError(ArcdupeError):
    """Unknown archive or mesh extension. Skip the item and continue."""


class ExtractionError(ArcdupeError):
    """Base class for failures while reading an archive."""

    def __init__(self, archive_path: str, message: str):
        super().__init__(f"{archive_path}: {message}")
        self.archive_path = archive_path


class CorruptArchiveError(ExtractionError):
    """Archive could not be opened or read (bad header, truncated stream, reader fault)."""


class EntryNotFoundError(ExtractionError):
    """Requested internal path does not exist inside the archive."""


class NoPreviewError(ExtractionError):
    """Archive is readable but contains nothing eligible as a preview."""


class MeshParseError(ArcdupeError):
    """Mesh payload is unparsable (e.g. declared vs. actual binary length mismatch)."""


class HashError(ArcdupeError):
    """Image payload could not be decoded for perceptual hashing."""


class CacheUnavailableError(ArcdupeError):
    """Persistent store could not be opened."""
