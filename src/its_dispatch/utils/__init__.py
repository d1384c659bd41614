"""
Utility functions for buffer handling.
"""

from .buffers import Buffer, as_byte_array, as_bytes, to_hex

__all__ = [
    "Buffer",
    "as_bytes",
    "as_byte_array",
    "to_hex",
]
