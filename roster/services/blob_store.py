"""HTTP client for the shared key-value bucket.

The bucket stores plain string values under URL-addressed keys. One manifest
key names how many chunk keys make up the current roster; chunk keys are
derived from the same base URL. Each call is an independent round trip with
no atomicity across keys.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from roster.exceptions import BlobStoreError
from roster.schemas.sync import Manifest

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

_NO_CACHE_HEADERS = {"Cache-Control": "no-cache"}


class BlobStoreClient:
    """Async GET/PUT access to the manifest and chunk keys under ``base_url``.

    Args:
        base_url: Key prefix, e.g. ``https://kvdb.io/<bucket>/employee_master_v7``.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def manifest_url(self) -> str:
        return f"{self.base_url}_manifest"

    def chunk_url(self, index: int) -> str:
        if index < 0:
            msg = f"chunk index must be >= 0, got {index}"
            raise ValueError(msg)
        return f"{self.base_url}_chunk_{index}"

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> BlobStoreClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get(self, url: str) -> httpx.Response:
        try:
            return await self._client.get(url, headers=_NO_CACHE_HEADERS)
        except httpx.HTTPError as exc:
            raise BlobStoreError(url, f"GET failed: {exc!r}") from exc

    async def _put(
        self, url: str, content: str | bytes, headers: dict[str, str] | None = None
    ) -> None:
        try:
            resp = await self._client.put(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            raise BlobStoreError(url, f"PUT failed: {exc!r}") from exc
        if not resp.is_success:
            raise BlobStoreError(url, f"PUT returned {resp.status_code}")

    async def get_manifest(self) -> Manifest | None:
        """Fetch the manifest. Returns None if nothing has been published yet."""
        url = self.manifest_url
        resp = await self._get(url)
        if resp.status_code == 404:
            return None
        if not resp.is_success:
            raise BlobStoreError(url, f"GET returned {resp.status_code}")
        if not resp.content.strip():
            return None
        try:
            return Manifest.model_validate_json(resp.content)
        except ValidationError as exc:
            raise BlobStoreError(url, f"invalid manifest: {exc.error_count()} error(s)") from exc

    async def put_manifest(self, manifest: Manifest) -> None:
        """Publish the manifest as JSON."""
        await self._put(
            self.manifest_url,
            content=manifest.model_dump_json(by_alias=True),
            headers={"Content-Type": "application/json"},
        )

    async def get_chunk(self, index: int) -> str:
        """Fetch one chunk. A missing key is a failure, never an empty chunk."""
        url = self.chunk_url(index)
        resp = await self._get(url)
        if not resp.is_success:
            raise BlobStoreError(url, f"GET returned {resp.status_code}")
        return resp.text

    async def put_chunk(self, index: int, data: str) -> None:
        """Write one chunk as a raw string value."""
        await self._put(self.chunk_url(index), content=data.encode("utf-8"))
        logger.debug("Stored chunk %d (%d chars)", index, len(data))
