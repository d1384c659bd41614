"""Tests for ItsPduHeader decoding and buffer helpers."""

import numpy as np
import pytest

from its_dispatch.protocols.base import DispatchError, MalformedInputError
from its_dispatch.protocols.header import (
    HEADER_LENGTH,
    ItsPduHeader,
    decode_pdu_header,
    encode_pdu_header,
)
from its_dispatch.utils.buffers import as_byte_array, as_bytes, to_hex


class TestPduHeader:
    """Tests for header decoding."""

    def test_decode(self):
        """Test decoding a CAM header."""
        data = bytes([0x02, 0x02, 0x00, 0x00, 0x30, 0x39, 0xAA])
        header, consumed = decode_pdu_header(data)
        assert header == ItsPduHeader(protocol_version=2, message_id=2, station_id=12345)
        assert consumed == HEADER_LENGTH == 6

    def test_encode_matches_decode(self):
        """Test encoder output is accepted by the decoder."""
        header = ItsPduHeader(1, 10, 0xFFFFFFFF)
        assert decode_pdu_header(encode_pdu_header(header))[0] == header

    @pytest.mark.parametrize("length", [0, 1, 5])
    def test_short_buffer(self, length):
        """Test truncated headers are malformed."""
        with pytest.raises(MalformedInputError, match="needs 6 bytes"):
            decode_pdu_header(b"\x00" * length)

    def test_encode_out_of_range(self):
        """Test encoding rejects out-of-range fields."""
        with pytest.raises(MalformedInputError) as exc_info:
            encode_pdu_header(ItsPduHeader(1, 256, 0))
        assert exc_info.value.cause is not None


class TestErrors:
    """Tests for error formatting."""

    def test_plain(self):
        error = MalformedInputError("bad")
        assert str(error) == "bad"
        assert isinstance(error, DispatchError)

    def test_with_context(self):
        """Test message id and cause are rendered."""
        error = MalformedInputError("bad", message_id=2, cause=ValueError("x"))
        assert str(error) == "[msg_id=2] bad (caused by: x)"


class TestBuffers:
    """Tests for buffer helpers."""

    def test_as_bytes(self):
        assert as_bytes(b"\x01") == b"\x01"
        assert as_bytes(bytearray(b"\x02")) == b"\x02"
        assert as_bytes(memoryview(b"\x03")) == b"\x03"
        assert as_bytes(np.array([4, 5], dtype=np.uint8)) == b"\x04\x05"

    def test_as_byte_array(self):
        arr = as_byte_array(b"\x00\xff")
        assert arr.dtype == np.uint8
        np.testing.assert_array_equal(arr, [0, 255])

    def test_to_hex(self):
        assert to_hex(b"\x01\xab") == "01ab"
        assert to_hex(b"\x01\xab", sep=" ") == "01 ab"
        assert to_hex(b"\x01\x02\x03", max_bytes=2) == "0102..."
        assert to_hex(b"") == ""
