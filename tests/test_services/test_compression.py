"""Tests for the compression adapter."""

from __future__ import annotations

import string

from lzstring import LZString

from roster.schemas.employee import EmployeeRecord
from roster.services.codec import decode_payload, encode, serialize_package
from roster.services.compression import compress, decompress
from tests.conftest import legacy_payload, make_record

_BASE64_ALPHABET = set(string.ascii_letters + string.digits + "+/=")


class TestCompress:
    def test_output_is_base64_text(self, sample_roster: list[EmployeeRecord]) -> None:
        out = compress(serialize_package(encode(sample_roster)))
        assert set(out) <= _BASE64_ALPHABET

    def test_repetitive_roster_shrinks(self) -> None:
        roster = [make_record(str(i)) for i in range(500)]
        text = serialize_package(encode(roster))
        assert len(compress(text)) < len(text)

    def test_round_trip(self, sample_roster: list[EmployeeRecord]) -> None:
        text = serialize_package(encode(sample_roster))
        assert decompress(compress(text)) == text

    def test_characters_outside_bmp_round_trip(self) -> None:
        text = '{"name": "Zoë 😀 𝄞"}'
        assert decompress(compress(text)) == text


class TestInterop:
    """Payloads are exchanged with browser clients running lz-string."""

    def test_reads_lz_string_encoded_roster(self, sample_roster: list[EmployeeRecord]) -> None:
        stored = LZString().compressToBase64(serialize_package(encode(sample_roster)))
        text = decompress(stored)
        assert text is not None
        assert decode_payload(text) == sample_roster

    def test_reads_lz_string_legacy_roster(self, sample_roster: list[EmployeeRecord]) -> None:
        stored = LZString().compressToBase64(legacy_payload(sample_roster))
        text = decompress(stored)
        assert text is not None
        assert decode_payload(text) == sample_roster

    def test_output_readable_by_lz_string(self, sample_roster: list[EmployeeRecord]) -> None:
        text = serialize_package(encode(sample_roster))
        assert LZString().decompressFromBase64(compress(text)) == text

    def test_astral_characters_stored_as_surrogate_pairs(self) -> None:
        # lz-string in the browser compresses UTF-16 code units.
        stored = compress("😀")
        assert LZString().decompressFromBase64(stored) == "\ud83d\ude00"


class TestDecompress:
    def test_empty_input_is_sentinel(self) -> None:
        assert decompress("") is None

    def test_non_base64_is_sentinel(self) -> None:
        assert decompress("!!! not base64 !!!") is None

    def test_non_ascii_is_sentinel(self) -> None:
        assert decompress("ÄÖÜ") is None

    def test_truncated_payload_is_not_the_original(
        self, sample_roster: list[EmployeeRecord]
    ) -> None:
        text = serialize_package(encode(sample_roster))
        data = compress(text)
        assert decompress(data[: len(data) // 2]) != text
