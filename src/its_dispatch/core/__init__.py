"""
Core module - Registry, dispatcher, Decode As, and configuration.
"""

from .config import ConfigValidationError, DecodeAsConfig, DispatchConfig, TransportConfig
from .decode_as import DecodeAsTable
from .dispatcher import Dispatcher, DispatchStats, dispatch
from .registration import build_default_registry
from .registry import KeySpace, MessageRegistry

__all__ = [
    "MessageRegistry",
    "KeySpace",
    "Dispatcher",
    "DispatchStats",
    "dispatch",
    "DecodeAsTable",
    "build_default_registry",
    # Configuration
    "DispatchConfig",
    "TransportConfig",
    "DecodeAsConfig",
    "ConfigValidationError",
]
