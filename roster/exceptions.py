"""Sync and ingestion exception types.

Convention:
- ``SyncError`` subclasses carry a human-readable message naming the stage
  that failed (manifest, chunk, decode). They are raised only for
  user-initiated operations; background pulls log and swallow them.
- ``BlobStoreError`` is raised by the store client for any transport-level
  failure and is translated into a ``SyncError`` by the coordinator.
- ``RosterFormatError`` is a ``ValueError`` for spreadsheet input that cannot
  be turned into a roster. The API returns it as a 422 detail.
"""

from __future__ import annotations


class BlobStoreError(Exception):
    """Raised when a GET/PUT against the remote bucket fails."""

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"{key}: {detail}")
        self.key = key
        self.detail = detail


class SyncError(Exception):
    """Base class for push/pull failures surfaced to the user."""


class PullError(SyncError):
    """A manual pull could not be completed. Local state is unchanged."""


class ManifestFetchError(PullError):
    """The manifest could not be fetched."""


class ChunkFetchError(PullError):
    """At least one chunk named by the manifest could not be fetched."""


class PayloadDecodeError(PullError):
    """The reassembled payload could not be decompressed or decoded."""


class PushError(SyncError):
    """A push could not be completed. The remote manifest was not replaced."""


class ChunkUploadError(PushError):
    """Uploading one of the chunks failed."""

    def __init__(self, index: int, detail: str) -> None:
        super().__init__(f"Chunk {index} upload failed: {detail}")
        self.index = index


class ManifestPublishError(PushError):
    """All chunks landed but publishing the manifest failed."""


class RosterFormatError(ValueError):
    """Raised when an uploaded file cannot be parsed into a roster."""
