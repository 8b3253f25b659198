"""Split large payloads into bounded fragments and reassemble them."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def split(payload: str, max_chunk_size: int) -> list[str]:
    """Slice ``payload`` into consecutive fragments of at most ``max_chunk_size``."""
    if max_chunk_size < 1:
        msg = f"max_chunk_size must be >= 1, got {max_chunk_size}"
        raise ValueError(msg)
    return [payload[i : i + max_chunk_size] for i in range(0, len(payload), max_chunk_size)]


def join(chunks: Iterable[str]) -> str:
    """Concatenate fragments in the order given."""
    return "".join(chunks)
