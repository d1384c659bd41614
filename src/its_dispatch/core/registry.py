"""
Message registry for ITS dispatch.

Holds the keyed tables used to pick a decoder for a received buffer.
The transport port, secured message type and application id tables
recognize the protocol family. The message id table maps a decoded
header to its body decoder.
"""

import logging
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..protocols.base import ConfigurationError, DecoderHandle, MessageClass
from ..protocols.regional import RegionalExtensionResolver

logger = logging.getLogger(__name__)


class KeySpace(Enum):
    """Independent key spaces of the registry."""

    PORT = "btp.port"
    MESSAGE_ID = "its.msg_id"
    SECURED_MESSAGE_TYPE = "geonw.sec.v1.msg_type"
    APPLICATION_ID = "geonw.sec.v2.app_id"


RegistryEntry = Union[MessageClass, DecoderHandle]

# Entry type expected for each key space
_ENTRY_TYPES = {
    KeySpace.PORT: MessageClass,
    KeySpace.MESSAGE_ID: DecoderHandle,
    KeySpace.SECURED_MESSAGE_TYPE: MessageClass,
    KeySpace.APPLICATION_ID: MessageClass,
}


class MessageRegistry:
    """
    Startup-time registration tables.

    Built once, frozen, then shared by reference with every dispatch
    call. Lookups after freeze() take no lock.
    """

    def __init__(self):
        self._tables: Dict[KeySpace, Dict[int, RegistryEntry]] = {
            space: {} for space in KeySpace
        }
        self._extensions = RegionalExtensionResolver()
        self._lock = Lock()
        self._frozen = False
        self._listeners: List[Callable[[KeySpace, int, RegistryEntry], None]] = []

    def register(self, key_space: KeySpace, key: int, entry: RegistryEntry) -> None:
        """
        Register an entry under a key.

        Args:
            key_space: Table to register in
            key: Port, message id, message type, or application id
            entry: DecoderHandle for MESSAGE_ID, MessageClass for the
                other key spaces

        Raises:
            ConfigurationError: On duplicate key, wrong entry type,
                non-integer or negative key, or registration after freeze()
        """
        expected = _ENTRY_TYPES[key_space]
        if not isinstance(entry, expected):
            raise ConfigurationError(
                f"{key_space.value} entries must be {expected.__name__}, "
                f"got {type(entry).__name__}"
            )
        try:
            key = int(key)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"{key_space.value} key must be an integer, got {key!r}", cause=e
            )
        if key < 0:
            raise ConfigurationError(f"{key_space.value} key must be non-negative, got {key}")

        with self._lock:
            if self._frozen:
                raise ConfigurationError(
                    f"Cannot register {key_space.value} {key}: registry is frozen"
                )

            table = self._tables[key_space]
            if key in table:
                raise ConfigurationError(
                    f"{key_space.value} {key} already registered to {_describe(table[key])}"
                )

            table[key] = entry
            logger.info(f"Registered {key_space.value} {key}: {_describe(entry)}")

        self._notify_listeners(key_space, key, entry)

    def register_port(self, port: int, message_class: MessageClass) -> None:
        """Register a well-known transport port."""
        self.register(KeySpace.PORT, port, message_class)

    def register_message(self, message_id: int, handle: DecoderHandle) -> None:
        """Register the body decoder for a message id."""
        self.register(KeySpace.MESSAGE_ID, message_id, handle)

    def register_secured_message_type(
        self, message_type: int, message_class: MessageClass
    ) -> None:
        """Register a security v1 message type."""
        self.register(KeySpace.SECURED_MESSAGE_TYPE, message_type, message_class)

    def register_application_id(self, application_id: int, message_class: MessageClass) -> None:
        """Register a security-layer application id."""
        self.register(KeySpace.APPLICATION_ID, application_id, message_class)

    def register_extension(self, region_id: int, kind: int, handle: DecoderHandle) -> int:
        """
        Register a regional extension decoder.

        Returns:
            Composite key of the registration
        """
        with self._lock:
            if self._frozen:
                raise ConfigurationError(
                    f"Cannot register extension ({region_id}, {kind}): registry is frozen"
                )
            key = self._extensions.register(region_id, kind, handle)
            logger.info(f"Registered dsrc.regionid 0x{key:08x}: {handle.name}")
            return key

    def register_many(self, key_space: KeySpace, bindings: Mapping[int, RegistryEntry]) -> None:
        """Register several entries in one key space, in key order."""
        for key in sorted(bindings):
            self.register(key_space, key, bindings[key])

    def resolve(self, key_space: KeySpace, key: int) -> Optional[RegistryEntry]:
        """
        Look up an entry.

        Args:
            key_space: Table to search
            key: Key to look up

        Returns:
            Registered entry or None if not found
        """
        return self._tables[key_space].get(key)

    def resolve_message(self, message_id: int) -> Optional[DecoderHandle]:
        """Look up the body decoder for a message id."""
        return self._tables[KeySpace.MESSAGE_ID].get(message_id)

    @property
    def extensions(self) -> RegionalExtensionResolver:
        """Regional extension table."""
        return self._extensions

    def freeze(self) -> None:
        """End the registration phase."""
        with self._lock:
            self._frozen = True
            self._extensions.freeze()
        logger.info(
            f"Registry frozen: {self.count(KeySpace.PORT)} ports, "
            f"{self.count(KeySpace.MESSAGE_ID)} message ids, "
            f"{self.count(KeySpace.SECURED_MESSAGE_TYPE)} secured message types, "
            f"{self.count(KeySpace.APPLICATION_ID)} application ids, "
            f"{len(self._extensions)} extensions"
        )

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def keys(self, key_space: KeySpace) -> List[int]:
        """List registered keys of a key space."""
        return sorted(self._tables[key_space].keys())

    def count(self, key_space: KeySpace) -> int:
        """Number of entries in a key space."""
        return len(self._tables[key_space])

    def decoders(self) -> List[DecoderHandle]:
        """List message decoders in message id order."""
        table = self._tables[KeySpace.MESSAGE_ID]
        return [table[key] for key in sorted(table)]

    def add_listener(self, callback: Callable[[KeySpace, int, RegistryEntry], None]) -> None:
        """
        Add a registration listener.

        Args:
            callback: Function(key_space, key, entry) called after each
                successful registration
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[KeySpace, int, RegistryEntry], None]) -> None:
        """Remove a previously added listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, key_space: KeySpace, key: int, entry: RegistryEntry) -> None:
        """Notify all listeners of a registration."""
        for listener in self._listeners:
            try:
                listener(key_space, key, entry)
            except Exception as e:
                logger.error(f"Listener error: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        return {
            "frozen": self._frozen,
            "by_key_space": {space.name: self.count(space) for space in KeySpace},
            "extensions": len(self._extensions),
        }


def _describe(entry: RegistryEntry) -> str:
    if isinstance(entry, MessageClass):
        return entry.short_name
    return entry.name
