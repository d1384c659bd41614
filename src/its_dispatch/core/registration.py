"""
Default registry construction.

Binds the well-known BTP ports, security v1 message types, security v2
application ids, ITS message ids and DSRC AddGrpC regional extensions
to the decoders supplied by the caller, then freezes the registry.
"""

import logging
from typing import Mapping, Optional

from ..protocols.base import DecodeFunc, DecoderHandle, MessageClass
from ..protocols.constants import (
    ADDGRPC_ABBREV,
    ADDGRPC_EXTENSIONS,
    ADDGRPC_NAME,
    APPLICATION_IDS,
    MESSAGE_IDS,
    SECURED_MESSAGE_TYPES,
    WELL_KNOWN_PORTS,
    RegionId,
)
from .config import DispatchConfig
from .registry import MessageRegistry

logger = logging.getLogger(__name__)


def addgrpc_handle(type_name: str, decode: DecodeFunc) -> DecoderHandle:
    """Create a handle for an AddGrpC extension type."""
    return DecoderHandle(
        name=f"{ADDGRPC_NAME}: {type_name}",
        abbrev=ADDGRPC_ABBREV,
        decode=decode,
    )


def build_default_registry(
    body_decoders: Mapping[MessageClass, DecodeFunc],
    extension_decoders: Optional[Mapping[str, DecodeFunc]] = None,
    config: Optional[DispatchConfig] = None,
) -> MessageRegistry:
    """
    Build and freeze the standard ITS registry.

    Message classes without a body decoder are left unregistered and
    their traffic is passed through as raw data.

    Args:
        body_decoders: Body decoder per message class
        extension_decoders: AddGrpC extension decoders keyed by type
            name, e.g. "ConnectionTrajectory-addGrpC"
        config: Transport bindings to register (defaults to all)

    Returns:
        Frozen MessageRegistry

    Raises:
        ConfigurationError: On conflicting registrations
    """
    config = config or DispatchConfig()
    extension_decoders = extension_decoders or {}
    registry = MessageRegistry()

    for port in config.transport.ports:
        registry.register_port(port, WELL_KNOWN_PORTS[port])

    for message_type in config.transport.secured_message_types:
        registry.register_secured_message_type(
            message_type, SECURED_MESSAGE_TYPES[message_type]
        )

    for application_id in config.transport.application_ids:
        registry.register_application_id(application_id, APPLICATION_IDS[application_id])

    for message_class, message_id in sorted(MESSAGE_IDS.items(), key=lambda item: item[1]):
        decode = body_decoders.get(message_class)
        if decode is None:
            logger.debug(f"No body decoder supplied for {message_class.short_name}")
            continue
        registry.register_message(message_id, DecoderHandle.for_message(message_class, decode))

    known_types = set(ADDGRPC_EXTENSIONS.values())
    for type_name in extension_decoders:
        if type_name not in known_types:
            logger.warning(f"Ignoring decoder for unknown AddGrpC type '{type_name}'")

    for kind, type_name in ADDGRPC_EXTENSIONS.items():
        decode = extension_decoders.get(type_name)
        if decode is None:
            continue
        registry.register_extension(RegionId.ADD_GRP_C, kind, addgrpc_handle(type_name, decode))

    registry.freeze()
    return registry
