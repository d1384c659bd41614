"""
Byte buffer helpers.

Normalizes the buffer types accepted from transports (bytes, bytearray,
memoryview, numpy arrays) into bytes and numpy uint8 views.
"""

from typing import Union

import numpy as np

# Type alias for accepted buffer types
Buffer = Union[bytes, bytearray, memoryview, np.ndarray]


def as_bytes(buffer: Buffer) -> bytes:
    """
    Convert a buffer to immutable bytes.

    Args:
        buffer: Input buffer

    Returns:
        Buffer contents as bytes
    """
    if isinstance(buffer, bytes):
        return buffer
    if isinstance(buffer, np.ndarray):
        return np.ascontiguousarray(buffer, dtype=np.uint8).tobytes()
    return bytes(buffer)


def as_byte_array(buffer: Buffer) -> np.ndarray:
    """
    Convert a buffer to a read-only numpy uint8 array.

    Args:
        buffer: Input buffer

    Returns:
        1-D uint8 array
    """
    arr = np.frombuffer(as_bytes(buffer), dtype=np.uint8)
    return arr


def to_hex(buffer: Buffer, max_bytes: int = 0, sep: str = "") -> str:
    """
    Render a buffer as hex.

    Args:
        buffer: Input buffer
        max_bytes: Truncate after this many bytes (0 = no limit)
        sep: Separator between bytes

    Returns:
        Hex string, with "..." appended when truncated
    """
    arr = as_byte_array(buffer)
    truncated = max_bytes > 0 and arr.size > max_bytes
    if truncated:
        arr = arr[:max_bytes]
    text = sep.join(f"{b:02x}" for b in arr.tolist())
    if truncated:
        text += "..."
    return text
