"""
ITS protocol types - Message classes, header, cause codes, and regional extensions.
"""

from .base import (
    RAW_DATA_HANDLE,
    ConfigurationError,
    DecodeContext,
    DecodedMessage,
    DecoderHandle,
    DispatchError,
    MalformedInputError,
    MessageClass,
    RawData,
    decode_raw,
)
from .causes import CauseCode, SubCauseField, subcause_field_for
from .constants import RegExtKind, RegionId
from .header import ItsPduHeader, decode_pdu_header, encode_pdu_header
from .regional import ExtensionResult, RegionalExtensionResolver, composite_key, in_key_range

__all__ = [
    # Base types
    "MessageClass",
    "DecoderHandle",
    "DecodeContext",
    "DecodedMessage",
    "RawData",
    "RAW_DATA_HANDLE",
    "decode_raw",
    # Errors
    "DispatchError",
    "ConfigurationError",
    "MalformedInputError",
    # Header
    "ItsPduHeader",
    "decode_pdu_header",
    "encode_pdu_header",
    # Cause codes
    "CauseCode",
    "SubCauseField",
    "subcause_field_for",
    # Regional extensions
    "RegionId",
    "RegExtKind",
    "ExtensionResult",
    "RegionalExtensionResolver",
    "composite_key",
    "in_key_range",
]
