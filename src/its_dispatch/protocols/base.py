"""
Base types for ITS message dispatch.

Provides message classes, decoder handles, per-call decode context,
decode results, and the error hierarchy shared by the registry,
resolvers, and dispatcher.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, List, Optional

import numpy as np

from ..utils.buffers import as_byte_array, to_hex

if TYPE_CHECKING:
    from .causes import SubCauseField
    from .header import ItsPduHeader
    from .regional import ExtensionResult, RegionalExtensionResolver

logger = logging.getLogger(__name__)


PROTOCOL_NAME = "ITS"
PROTOCOL_ABBREV = "its"


class DispatchError(Exception):
    """
    Base exception for dispatch errors.

    Attributes:
        message_id: ITS message id being decoded (if known)
        cause: Original exception that caused this error (if any)
    """

    def __init__(
        self,
        message: str,
        message_id: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message_id = message_id
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.message_id is not None:
            msg = f"[msg_id={self.message_id}] {msg}"
        if self.cause:
            msg = f"{msg} (caused by: {self.cause})"
        return msg


class ConfigurationError(DispatchError):
    """
    Raised when registration at startup is invalid.

    This typically occurs when:
    - The same (key space, key) pair is registered twice
    - An entry of the wrong type is bound to a key space
    - A registration is attempted after the registry was frozen
    """

    pass


class MalformedInputError(DispatchError):
    """
    Raised by header, body, or extension decoders on invalid content.

    The dispatcher never recovers from this error; it reaches the caller
    unchanged.
    """

    pass


class MessageClass(Enum):
    """ITS facility message families."""

    EVENT_NOTIFICATION = "denm"
    COOPERATIVE_AWARENESS = "cam"
    SIGNAL_REQUEST = "srem"
    SIGNAL_STATUS = "ssem"
    INTERSECTION_MAP = "mapem"
    INTERSECTION_STATE = "spatem"
    IVI = "ivim"
    CHARGING_POI = "evcsn"
    CHARGING_SESSION = "evrsr"
    TRANSACTION_POI = "tistpg"

    @property
    def short_name(self) -> str:
        """Short name, e.g. "CAM"."""
        return self.value.upper()

    @property
    def display_name(self) -> str:
        """Display name, e.g. "ITS message - CAM"."""
        return f"ITS message - {self.short_name}"

    @property
    def abbrev(self) -> str:
        """Filter abbreviation, e.g. "its.message.cam"."""
        return f"{PROTOCOL_ABBREV}.message.{self.value}"


# Signature shared by body and extension decoders
DecodeFunc = Callable[[bytes, "DecodeContext"], Any]


@dataclass(frozen=True)
class DecoderHandle:
    """
    Reference to an externally supplied decoder.

    Attributes:
        name: Human-readable decoder name
        abbrev: Filter abbreviation of the decoded content
        decode: Callable(payload, context) returning the decoded tree
        message_class: Message family decoded by this handle (if any)
    """

    name: str
    abbrev: str
    decode: DecodeFunc = field(compare=False)
    message_class: Optional[MessageClass] = None

    @classmethod
    def for_message(cls, message_class: MessageClass, decode: DecodeFunc) -> "DecoderHandle":
        """Create a body decoder handle named after its message class."""
        return cls(
            name=message_class.display_name,
            abbrev=message_class.abbrev,
            decode=decode,
            message_class=message_class,
        )


@dataclass
class RawData:
    """Undecoded bytes passed through by the fallback decoder."""

    data: np.ndarray

    @property
    def length(self) -> int:
        return int(self.data.size)

    @property
    def hex(self) -> str:
        return to_hex(self.data)


def decode_raw(payload: bytes, context: Optional["DecodeContext"] = None) -> RawData:
    """Raw-bytes passthrough used whenever no decoder is resolved."""
    return RawData(data=as_byte_array(payload))


RAW_DATA_HANDLE = DecoderHandle(name="Data", abbrev="data", decode=decode_raw)


@dataclass
class DecodeContext:
    """
    Per-message decode state.

    Created by the dispatcher for one message and discarded when the
    call returns. Body decoders set ``region_id``/``extension_kind``
    before decoding an open-type regional extension, and ``cause_code``
    before decoding a subcause.
    """

    session: Optional[Hashable] = None
    message_id: Optional[int] = None
    region_id: Optional[int] = None
    extension_kind: Optional[int] = None
    cause_code: Optional[int] = None
    extensions: Optional["RegionalExtensionResolver"] = None
    opaque: List[str] = field(default_factory=list)

    def decode_extension(self, payload: bytes) -> "ExtensionResult":
        """
        Decode regional extension content for the active region and kind.

        Args:
            payload: Open-type content of the extension

        Returns:
            ExtensionResult (raw fallback when no decoder is registered)
        """
        from .regional import RegionalExtensionResolver

        resolver = self.extensions or RegionalExtensionResolver()
        region_id = self.region_id if self.region_id is not None else 0
        kind = self.extension_kind if self.extension_kind is not None else 0

        result = resolver.resolve_extension(region_id, kind, payload, context=self)
        if result.is_fallback:
            if result.key is None:
                location = f"({result.region_id}, {result.kind})"
            else:
                location = f"0x{result.key:08x}"
            self.mark_opaque(
                f"dsrc.regionid {location}: {result.raw.size} bytes undecoded"
            )
        return result

    def subcause_field(self) -> "SubCauseField":
        """Get the subcause field for the pending cause code."""
        from .causes import SubCauseField, subcause_field_for

        if self.cause_code is None:
            return SubCauseField.GENERIC
        return subcause_field_for(self.cause_code)

    def mark_opaque(self, marker: str) -> None:
        """Record a portion of the message that was decoded as opaque bytes."""
        self.opaque.append(marker)


@dataclass
class DecodedMessage:
    """Result of dispatching one ITS message."""

    header: "ItsPduHeader"
    message_id: int
    decoder: str
    tree: Any
    raw: np.ndarray
    protocol: str = PROTOCOL_NAME
    session: Optional[Hashable] = None
    is_fallback: bool = False
    overridden: bool = False
    opaque: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        """True if no part of the message was decoded as opaque bytes."""
        return not self.is_fallback and not self.opaque

    def summary(self) -> str:
        """One-line description of the decoded message."""
        text = f"{self.protocol} {self.decoder} (msg_id={self.message_id}, {self.raw.size} bytes)"
        if self.overridden:
            text += f" [decode as, header msg_id={self.header.message_id}]"
        if not self.is_complete:
            text += " [opaque]"
        return text
