"""
Top-level ITS message dispatcher.

Entry point for the transport layer: recognizes ITS traffic by port,
secured message type or application id, decodes the common header, and
forwards the payload to the body decoder selected by message id or by a
Decode As override.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Hashable, List, Optional

from ..protocols.base import (
    RAW_DATA_HANDLE,
    DecodeContext,
    DecodedMessage,
    MalformedInputError,
    MessageClass,
)
from ..protocols.header import HeaderDecoder, decode_pdu_header
from ..utils.buffers import Buffer, as_byte_array, as_bytes
from .config import DispatchConfig
from .decode_as import DecodeAsTable
from .registry import KeySpace, MessageRegistry

logger = logging.getLogger(__name__)


def dispatch(
    buffer: Buffer,
    header_decoder: HeaderDecoder,
    registry: MessageRegistry,
    decode_as: Optional[DecodeAsTable] = None,
    session: Optional[Hashable] = None,
) -> DecodedMessage:
    """
    Decode one ITS message.

    Args:
        buffer: Complete message, header included
        header_decoder: Callable(data) -> (ItsPduHeader, bytes consumed)
        registry: Frozen message registry
        decode_as: Optional Decode As table consulted for the session
        session: Session key for Decode As

    Returns:
        DecodedMessage; raw passthrough if no decoder is resolved

    Raises:
        MalformedInputError: Propagated from the header or body decoder
    """
    data = as_bytes(buffer)
    header, consumed = header_decoder(data)
    payload = data[consumed:]

    override = None
    if decode_as is not None:
        decode_as.record(session, header.message_id)
        override = decode_as.get_override(session)

    message_id = header.message_id if override is None else override
    handle = registry.resolve_message(message_id)
    context = DecodeContext(
        session=session,
        message_id=message_id,
        extensions=registry.extensions,
    )

    if handle is None:
        logger.debug(f"No decoder for msg_id {message_id}, passing {len(payload)} bytes as data")
        handle = RAW_DATA_HANDLE
        is_fallback = True
    else:
        is_fallback = False

    tree = handle.decode(payload, context)

    return DecodedMessage(
        header=header,
        message_id=message_id,
        decoder=handle.abbrev,
        tree=tree,
        raw=as_byte_array(payload),
        session=session,
        is_fallback=is_fallback,
        overridden=override is not None,
        opaque=list(context.opaque),
    )


@dataclass
class DispatchStats:
    """Dispatcher statistics."""

    messages: int = 0
    fallbacks: int = 0
    overridden: int = 0
    malformed: int = 0
    unrecognized: int = 0


class Dispatcher:
    """
    ITS dispatcher bound to a registry.

    Safe to call from several threads at once: the registry is
    read-only and each call owns its DecodeContext.
    """

    def __init__(
        self,
        registry: MessageRegistry,
        header_decoder: HeaderDecoder = decode_pdu_header,
        config: Optional[DispatchConfig] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            registry: Message registry (normally frozen)
            header_decoder: Common header decoder
            config: Optional configuration
        """
        self._config = config or DispatchConfig()
        self._registry = registry
        self._header_decoder = header_decoder
        self._decode_as: Optional[DecodeAsTable] = None
        if self._config.decode_as.enabled:
            self._decode_as = DecodeAsTable(
                registry,
                key=self._config.decode_as.key,
                max_sessions=self._config.decode_as.max_sessions,
            )
        self._listeners: List[Callable[[DecodedMessage], None]] = []
        self._stats = DispatchStats()
        self._stats_lock = Lock()

        if not registry.is_frozen:
            logger.warning("Dispatcher created with a registry that is not frozen")

    @property
    def registry(self) -> MessageRegistry:
        return self._registry

    @property
    def decode_as(self) -> Optional[DecodeAsTable]:
        """Decode As table, or None when overrides are disabled."""
        return self._decode_as

    def recognize(
        self,
        transport_port: Optional[int] = None,
        application_id: Optional[int] = None,
        secured_message_type: Optional[int] = None,
    ) -> Optional[MessageClass]:
        """
        Check whether a buffer belongs to the ITS family.

        The transport port is checked first, then the security v1
        message type, then the security v2 application id.

        Args:
            transport_port: BTP destination port
            application_id: Security v2 application id
            secured_message_type: Security v1 message type

        Returns:
            Pre-selected message class, or None if nothing is registered
        """
        candidates = (
            (KeySpace.PORT, transport_port),
            (KeySpace.SECURED_MESSAGE_TYPE, secured_message_type),
            (KeySpace.APPLICATION_ID, application_id),
        )
        for key_space, key in candidates:
            if key is None:
                continue
            message_class = self._registry.resolve(key_space, key)
            if message_class is not None:
                return message_class
        return None

    def dispatch(self, buffer: Buffer, session: Optional[Hashable] = None) -> DecodedMessage:
        """
        Decode one message known to be ITS.

        Raises:
            MalformedInputError: Propagated from the header or body decoder
        """
        return self._dispatch(buffer, session, {})

    def _dispatch(
        self, buffer: Buffer, session: Optional[Hashable], metadata: Dict[str, Any]
    ) -> DecodedMessage:
        try:
            message = dispatch(
                buffer,
                self._header_decoder,
                self._registry,
                decode_as=self._decode_as,
                session=session,
            )
        except MalformedInputError:
            with self._stats_lock:
                self._stats.malformed += 1
            raise

        message.metadata.update(metadata)
        with self._stats_lock:
            self._stats.messages += 1
            if message.is_fallback:
                self._stats.fallbacks += 1
            if message.overridden:
                self._stats.overridden += 1

        self._notify_listeners(message)
        return message

    def deliver(
        self,
        buffer: Buffer,
        transport_port: Optional[int] = None,
        application_id: Optional[int] = None,
        session: Optional[Hashable] = None,
        secured_message_type: Optional[int] = None,
    ) -> Optional[DecodedMessage]:
        """
        Transport entry point.

        Args:
            buffer: Received application message
            transport_port: BTP destination port (if carried over BTP)
            application_id: Application id (if carried in a security v2 packet)
            session: Capture/session key
            secured_message_type: Message type (if carried in a security v1 packet)

        Returns:
            DecodedMessage, or None if the buffer is not ITS traffic

        Raises:
            MalformedInputError: Propagated from the header or body decoder
        """
        message_class = self.recognize(transport_port, application_id, secured_message_type)
        if message_class is None:
            logger.debug(
                f"Not ITS traffic (port={transport_port}, "
                f"msg_type={secured_message_type}, app_id={application_id})"
            )
            with self._stats_lock:
                self._stats.unrecognized += 1
            return None

        metadata = {
            "transport_port": transport_port,
            "application_id": application_id,
            "secured_message_type": secured_message_type,
            "transport_class": message_class,
        }
        return self._dispatch(buffer, session, metadata)

    def end_session(self, session: Hashable) -> None:
        """Release the Decode As state of a finished session."""
        if self._decode_as is not None:
            self._decode_as.forget(session)

    def add_listener(self, callback: Callable[[DecodedMessage], None]) -> None:
        """
        Add a tap listener.

        Args:
            callback: Function(message) called for every decoded message
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[DecodedMessage], None]) -> None:
        """Remove a previously added listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, message: DecodedMessage) -> None:
        """Notify all listeners of a decoded message."""
        for listener in self._listeners:
            try:
                listener(message)
            except Exception as e:
                logger.error(f"Listener error: {e}")

    @property
    def stats(self) -> DispatchStats:
        """Get a copy of dispatcher statistics."""
        with self._stats_lock:
            return DispatchStats(**vars(self._stats))

    def reset_stats(self) -> None:
        """Reset dispatcher statistics."""
        with self._stats_lock:
            self._stats = DispatchStats()
