"""
ITS Dispatch - Intelligent Transport Systems message dispatch

Routes ETSI ITS facility messages (CAM, DENM, SPATEM, MAPEM, IVIM,
SREM, SSEM, EVCSN, EV-RSR, TISTPG) to externally supplied body
decoders, resolves DSRC regional extension decoders, and maps DENM
cause codes to their subcause fields.

Usage:
    from its_dispatch import Dispatcher, MessageClass, build_default_registry

    registry = build_default_registry({
        MessageClass.COOPERATIVE_AWARENESS: decode_cam,
        MessageClass.EVENT_NOTIFICATION: decode_denm,
    })
    dispatcher = Dispatcher(registry)
    message = dispatcher.deliver(payload, transport_port=2001)
"""

__version__ = "0.1.0"
__author__ = "ITS Dispatch Team"

from .core import (
    DecodeAsTable,
    Dispatcher,
    DispatchConfig,
    KeySpace,
    MessageRegistry,
    build_default_registry,
    dispatch,
)
from .protocols import (
    CauseCode,
    ConfigurationError,
    DecodeContext,
    DecodedMessage,
    DecoderHandle,
    MalformedInputError,
    MessageClass,
    RegExtKind,
    RegionId,
    SubCauseField,
    subcause_field_for,
)

__all__ = [
    # Core
    "MessageRegistry",
    "KeySpace",
    "Dispatcher",
    "dispatch",
    "DecodeAsTable",
    "DispatchConfig",
    "build_default_registry",
    # Protocol types
    "MessageClass",
    "DecoderHandle",
    "DecodeContext",
    "DecodedMessage",
    "CauseCode",
    "SubCauseField",
    "subcause_field_for",
    "RegionId",
    "RegExtKind",
    # Errors
    "ConfigurationError",
    "MalformedInputError",
    # Version
    "__version__",
]
