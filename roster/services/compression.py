"""LZ-string compression producing base64 text, as stored in the shared bucket.

Browser clients of the bucket use lz-string's ``compressToBase64``, which
works on UTF-16 code units. Characters outside the Basic Multilingual Plane
are split into surrogate pairs before compressing and recombined after
decompressing so both sides agree.
"""

from __future__ import annotations

import logging
import re

from lzstring import LZString

logger = logging.getLogger(__name__)

_LZ = LZString()
_ASTRAL = re.compile("[\U00010000-\U0010ffff]")


def _surrogate_pair(match: re.Match[str]) -> str:
    offset = ord(match.group()) - 0x10000
    return chr(0xD800 + (offset >> 10)) + chr(0xDC00 + (offset & 0x3FF))


def _to_code_units(text: str) -> str:
    return _ASTRAL.sub(_surrogate_pair, text)


def _from_code_units(text: str) -> str:
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")


def compress(text: str) -> str:
    """Compress text with lz-string and return its base64 form."""
    return _LZ.compressToBase64(_to_code_units(text))


def decompress(data: str) -> str | None:
    """Reverse :func:`compress`.

    Returns None when the input is empty or not a valid compressed string;
    callers treat that as "no usable data".
    """
    if not data:
        return None
    try:
        result = _LZ.decompressFromBase64(data)
        if result is None:
            return None
        return _from_code_units(result)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        # KeyError: a character outside the base64 alphabet.
        # UnicodeDecodeError (a ValueError): an unpaired surrogate.
        logger.debug("Discarding undecodable payload: %s", exc)
        return None
