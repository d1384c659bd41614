"""
ItsPduHeader decoding.

The common header is protocolVersion INTEGER(0..255), messageID
INTEGER(0..255) and stationID INTEGER(0..4294967295). Under UPER these
are fixed-width, octet-aligned fields.
"""

import struct
from dataclasses import dataclass
from typing import Callable, Tuple

from .base import MalformedInputError

HEADER_FORMAT = ">BBI"
HEADER_LENGTH = struct.calcsize(HEADER_FORMAT)


@dataclass(frozen=True)
class ItsPduHeader:
    """Decoded ItsPduHeader."""

    protocol_version: int
    message_id: int
    station_id: int


# Callable(data) -> (header, bytes consumed)
HeaderDecoder = Callable[[bytes], Tuple[ItsPduHeader, int]]


def decode_pdu_header(data: bytes) -> Tuple[ItsPduHeader, int]:
    """
    Decode the common ITS PDU header.

    Args:
        data: Message buffer starting at the header

    Returns:
        Tuple of (header, number of bytes consumed)

    Raises:
        MalformedInputError: If the buffer is shorter than the header
    """
    if len(data) < HEADER_LENGTH:
        raise MalformedInputError(
            f"ItsPduHeader needs {HEADER_LENGTH} bytes, got {len(data)}"
        )

    version, message_id, station_id = struct.unpack_from(HEADER_FORMAT, data)
    return ItsPduHeader(version, message_id, station_id), HEADER_LENGTH


def encode_pdu_header(header: ItsPduHeader) -> bytes:
    """Encode a header, mainly for building test traffic."""
    try:
        return struct.pack(
            HEADER_FORMAT, header.protocol_version, header.message_id, header.station_id
        )
    except struct.error as e:
        raise MalformedInputError("Header field out of range", cause=e) from e
