"""Sync coordinator: push/pull of the roster through the shared bucket.

Push: encode -> compress -> split -> sequential chunk PUTs -> manifest PUT.
Pull: manifest GET -> concurrent chunk GETs -> join -> decompress -> decode.

The remote side is last-writer-wins with no multi-key atomicity. The manifest
is written last on push and read first on pull, so it is the publish point.
A roster loaded locally and not yet pushed always wins over remote data.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from roster.exceptions import (
    BlobStoreError,
    ChunkFetchError,
    ChunkUploadError,
    ManifestFetchError,
    ManifestPublishError,
    PayloadDecodeError,
    SyncError,
)
from roster.schemas.sync import Manifest, SubmissionInfo
from roster.services.blob_store import BlobStoreClient
from roster.services.chunking import join, split
from roster.services.codec import decode_payload, encode, serialize_package
from roster.services.compression import compress, decompress
from roster.services.datetime_service import format_time, format_timestamp
from roster.services.local_cache import LocalCache
from roster.services.lookup_service import LookupResult, lookup

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    import httpx

    from roster.config import Settings
    from roster.schemas.employee import EmployeeRecord

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 55_000
DEFAULT_SYNC_INTERVAL = 20.0


class SyncStatus(StrEnum):
    """What the coordinator is currently doing."""

    IDLE = "idle"
    PULLING = "pulling"
    PUSHING = "pushing"
    ERROR = "error"


class SyncCoordinator:
    """Owns the in-memory roster and reconciles it with the bucket and the cache.

    Thread-safety: safe under asyncio's single-threaded cooperative model.
    Push and pull are serialized by one lock. State is replaced as a whole,
    with no await between the local-only check and the replacement, so
    readers see either the old roster or the new one.
    """

    def __init__(
        self,
        store: BlobStoreClient,
        cache: LocalCache,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        sync_interval: float = DEFAULT_SYNC_INTERVAL,
    ) -> None:
        if chunk_size < 1:
            msg = f"chunk_size must be >= 1, got {chunk_size}"
            raise ValueError(msg)
        if sync_interval <= 0:
            msg = f"sync_interval must be > 0, got {sync_interval}"
            raise ValueError(msg)
        self._store = store
        self._cache = cache
        self._chunk_size = chunk_size
        self._sync_interval = sync_interval

        self._roster: tuple[EmployeeRecord, ...] = ()
        self._metadata: SubmissionInfo | None = None
        self._local_only = False
        self._local_file_name = ""
        self._last_synced: str | None = None
        self._last_error: str | None = None
        self._status = SyncStatus.IDLE
        self._progress = ""

        self._lock = asyncio.Lock()
        self._poll_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> SyncCoordinator:
        """Wire a coordinator to the configured bucket and state directory."""
        store = BlobStoreClient(
            settings.sync_base_url,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )
        return cls(
            store,
            LocalCache(settings.state_dir),
            chunk_size=settings.chunk_size,
            sync_interval=settings.sync_interval_seconds,
        )

    # ── State ────────────────────────────────────────

    @property
    def store(self) -> BlobStoreClient:
        return self._store

    @property
    def roster(self) -> tuple[EmployeeRecord, ...]:
        return self._roster

    @property
    def metadata(self) -> SubmissionInfo | None:
        return self._metadata

    @property
    def local_only(self) -> bool:
        """True while a locally loaded roster has not been pushed."""
        return self._local_only

    @property
    def local_file_name(self) -> str:
        return self._local_file_name

    @property
    def last_synced(self) -> str | None:
        return self._last_synced

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def progress(self) -> str:
        return self._progress

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def restore(self) -> None:
        """Load the last known roster from the local cache."""
        self._roster = tuple(self._cache.load_roster())
        self._metadata = self._cache.load_metadata()
        self._last_synced = self._cache.load_last_synced()
        logger.info("Restored %d cached records", len(self._roster))

    def load_local(self, roster: Iterable[EmployeeRecord], file_name: str) -> None:
        """Replace the roster with freshly ingested data, pending a push."""
        self._roster = tuple(roster)
        self._local_file_name = file_name
        self._local_only = True
        self._last_error = None
        logger.info("Loaded %d records from %s (local only)", len(self._roster), file_name)

    def reset(self) -> None:
        """Drop the roster from memory and from the local cache."""
        self._roster = ()
        self._metadata = None
        self._local_only = False
        self._local_file_name = ""
        self._last_error = None
        self._cache.clear_roster()
        logger.info("Local roster cleared")

    def lookup(self, query: str) -> LookupResult:
        return lookup(self._roster, query)

    def _persist(
        self,
        roster: tuple[EmployeeRecord, ...],
        metadata: SubmissionInfo | None,
        synced_at: str,
    ) -> None:
        try:
            self._cache.save_roster(roster)
            self._cache.save_metadata(metadata)
            self._cache.save_last_synced(synced_at)
        except OSError as exc:
            logger.error("Failed to persist roster to local cache: %s", exc)

    def _record_failure(self, exc: SyncError) -> None:
        self._status = SyncStatus.ERROR
        self._last_error = str(exc)
        logger.error("%s", exc)

    # ── Pull ─────────────────────────────────────────

    async def pull(self, *, automatic: bool = False) -> bool:
        """Fetch the remote roster and adopt it if it differs.

        Automatic (timer-driven) pulls never raise on sync failures and are
        skipped while a local roster is pending a push or another operation
        is in flight. Manual pulls raise a ``PullError`` naming the failed
        stage.

        Returns:
            True if the in-memory roster was replaced.
        """
        if automatic and self._local_only:
            logger.debug("Skipping background pull: local roster not yet pushed")
            return False
        if automatic and self._lock.locked():
            logger.debug("Skipping background pull: sync already in progress")
            return False

        async with self._lock:
            self._status = SyncStatus.PULLING
            self._progress = "Manifest..."
            try:
                updated = await self._pull_locked()
            except SyncError as exc:
                if not automatic:
                    self._record_failure(exc)
                    raise
                logger.warning("Background pull failed: %s", exc)
                return False
            finally:
                self._progress = ""
                if self._status is SyncStatus.PULLING:
                    self._status = SyncStatus.IDLE
            self._last_error = None
            return updated

    async def _fetch_chunks(self, count: int) -> list[str]:
        self._progress = f"Chunks (0/{count})"
        results = await asyncio.gather(
            *(self._store.get_chunk(i) for i in range(count)),
            return_exceptions=True,
        )
        chunks: list[str] = []
        for index, result in enumerate(results):
            if isinstance(result, BlobStoreError):
                msg = f"Chunk {index} of {count} fetch failed: {result}"
                raise ChunkFetchError(msg) from result
            if isinstance(result, BaseException):
                raise result
            chunks.append(result)
        return chunks

    async def _pull_locked(self) -> bool:
        try:
            manifest = await self._store.get_manifest()
        except BlobStoreError as exc:
            msg = f"Manifest fetch failed: {exc}"
            raise ManifestFetchError(msg) from exc
        if manifest is None:
            logger.debug("No manifest published yet")
            return False

        chunks = await self._fetch_chunks(manifest.chunk_count)

        payload = decompress(join(chunks))
        if payload is None:
            msg = f"Remote payload ({manifest.chunk_count} chunks) could not be decompressed"
            raise PayloadDecodeError(msg)
        try:
            remote = tuple(decode_payload(payload))
        except (ValueError, IndexError) as exc:
            msg = f"Remote payload could not be decoded: {exc}"
            raise PayloadDecodeError(msg) from exc

        if self._local_only:
            logger.info("Discarding remote roster: local roster not yet pushed")
            return False
        if remote == self._roster:
            return False

        synced_at = format_time()
        self._roster = remote
        self._metadata = manifest.metadata
        self._last_synced = synced_at
        self._persist(remote, manifest.metadata, synced_at)
        logger.info("Pulled %d records from %d chunk(s)", len(remote), manifest.chunk_count)
        return True

    # ── Push ─────────────────────────────────────────

    async def push(self, submitter_name: str) -> SubmissionInfo:
        """Publish the in-memory roster, replacing the remote copy.

        Chunks are uploaded one at a time in index order and the manifest is
        published last. If any step fails the previous manifest stays in
        place and the local roster remains pending.

        Raises:
            ValueError: If ``submitter_name`` is blank.
            ChunkUploadError: If a chunk upload failed.
            ManifestPublishError: If all chunks landed but the manifest did not.
        """
        name = submitter_name.strip()
        if not name:
            msg = "Submitter name is required"
            raise ValueError(msg)

        async with self._lock:
            self._status = SyncStatus.PUSHING
            try:
                metadata = await self._push_locked(name)
            except SyncError as exc:
                self._record_failure(exc)
                raise
            finally:
                self._progress = ""
                if self._status is SyncStatus.PUSHING:
                    self._status = SyncStatus.IDLE
            self._last_error = None
            return metadata

    async def _push_locked(self, submitter_name: str) -> SubmissionInfo:
        roster = self._roster
        file_name = self._local_file_name or (self._metadata.file_name if self._metadata else "")

        self._progress = "Normalizing..."
        package = encode(roster)
        self._progress = "Compressing..."
        chunks = split(compress(serialize_package(package)), self._chunk_size)

        for index, chunk in enumerate(chunks):
            self._progress = f"Uploading {index + 1}/{len(chunks)}"
            try:
                await self._store.put_chunk(index, chunk)
            except BlobStoreError as exc:
                raise ChunkUploadError(index, str(exc)) from exc

        self._progress = "Finalizing..."
        metadata = SubmissionInfo(
            submitter_name=submitter_name,
            file_name=file_name,
            timestamp=format_timestamp(),
        )
        try:
            await self._store.put_manifest(Manifest(chunk_count=len(chunks), metadata=metadata))
        except BlobStoreError as exc:
            msg = f"Manifest publish failed: {exc}"
            raise ManifestPublishError(msg) from exc

        logger.info(
            "Pushed %d records in %d chunk(s) as %s", len(roster), len(chunks), submitter_name
        )
        if self._roster is not roster:
            logger.warning("Roster replaced during push; keeping the newer local roster pending")
            return metadata

        synced_at = format_time()
        self._metadata = metadata
        self._local_only = False
        self._last_synced = synced_at
        self._persist(roster, metadata, synced_at)
        return metadata

    # ── Polling ──────────────────────────────────────

    def start(self) -> None:
        """Start the background polling task. Must be called inside a running loop."""
        if self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop(), name="roster-sync-poll")
        logger.info("Polling %s every %.0fs", self._store.manifest_url, self._sync_interval)

    async def stop(self) -> None:
        """Cancel the background polling task and wait for it to finish."""
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.pull(automatic=True)
            except Exception:
                logger.exception("Unexpected error in background pull")
            await asyncio.sleep(self._sync_interval)

    async def __aenter__(self) -> SyncCoordinator:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()
