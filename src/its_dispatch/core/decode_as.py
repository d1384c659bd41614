"""
Decode As: operator override of message id routing.

Each session (capture, connection, or any hashable context key) may pin
the message id used to pick the body decoder, regardless of the id in
the header. The last header message id seen in a session is kept for
prompting, for a bounded number of recently active sessions.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Hashable, List, Optional

from ..protocols.base import RAW_DATA_HANDLE, DecoderHandle
from .registry import KeySpace, MessageRegistry

logger = logging.getLogger(__name__)

DECODE_AS_KEY = KeySpace.MESSAGE_ID.value
DECODE_AS_DESCRIPTION = "ITS msg id"
DEFAULT_MAX_SESSIONS = 1024


@dataclass(frozen=True)
class SessionBinding:
    """Decode As state of one session."""

    override: Optional[int] = None
    last_message_id: Optional[int] = None


class DecodeAsTable:
    """
    Per-session message id overrides.

    Overrides stay until cleared or forgotten. Header message ids are
    cached for at most ``max_sessions`` sessions; the least recently
    active session is evicted first. All state changes happen under one
    lock, so readers see either the old or the new value.
    """

    def __init__(
        self,
        registry: MessageRegistry,
        key: str = DECODE_AS_KEY,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        """
        Initialize the table.

        Args:
            registry: Registry supplying the default decoders
            key: Stable operator-facing table key
            max_sessions: Sessions whose last header message id is cached
        """
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")
        self._registry = registry
        self._key = key
        self._max_sessions = max_sessions
        self._overrides: Dict[Hashable, int] = {}
        self._recent: "OrderedDict[Hashable, int]" = OrderedDict()
        self._lock = Lock()

    @property
    def key(self) -> str:
        return self._key

    @property
    def description(self) -> str:
        return DECODE_AS_DESCRIPTION

    @property
    def max_sessions(self) -> int:
        return self._max_sessions

    def binding(self, session: Hashable) -> SessionBinding:
        """Snapshot of a session's Decode As state."""
        with self._lock:
            return SessionBinding(
                override=self._overrides.get(session),
                last_message_id=self._recent.get(session),
            )

    def set_override(self, session: Hashable, message_id: int) -> None:
        """
        Route all further messages of a session to a message id's decoder.

        Args:
            session: Session key
            message_id: Message id whose decoder should be used
        """
        message_id = int(message_id)
        if self._registry.resolve_message(message_id) is None:
            logger.warning(
                f"Decode As {self._key}={message_id} for session {session!r}: "
                "no decoder registered, messages will be passed through as raw data"
            )
        with self._lock:
            self._overrides[session] = message_id
        logger.info(f"Decode As {self._key}: session {session!r} -> {message_id}")

    def get_override(self, session: Hashable) -> Optional[int]:
        """Get the override message id of a session, or None."""
        with self._lock:
            return self._overrides.get(session)

    def clear_override(self, session: Hashable) -> bool:
        """
        Restore header-based routing for a session.

        Returns:
            True if an override was removed
        """
        with self._lock:
            if self._overrides.pop(session, None) is None:
                return False
        logger.info(f"Decode As {self._key}: session {session!r} reset")
        return True

    def forget(self, session: Hashable) -> None:
        """Drop all state of a finished session, override included."""
        with self._lock:
            self._overrides.pop(session, None)
            self._recent.pop(session, None)

    def reset(self) -> None:
        """Clear all overrides and cached message ids."""
        with self._lock:
            self._overrides.clear()
            self._recent.clear()

    def record(self, session: Hashable, message_id: int) -> None:
        """Cache the header message id of the message being processed."""
        with self._lock:
            self._recent[session] = int(message_id)
            self._recent.move_to_end(session)
            while len(self._recent) > self._max_sessions:
                self._recent.popitem(last=False)

    def current_value(self, session: Hashable) -> Optional[int]:
        """Header message id of the last message processed in a session."""
        with self._lock:
            return self._recent.get(session)

    def session_count(self) -> int:
        """Number of sessions holding any state."""
        with self._lock:
            return len(self._recent.keys() | self._overrides.keys())

    def prompt(self, session: Hashable) -> str:
        """Operator prompt for the session, e.g. "MsgId (→2)"."""
        value = self.current_value(session)
        return f"MsgId (→{'' if value is None else value})"

    def default_decoder_for(self, message_id: int) -> DecoderHandle:
        """
        Decoder the registry binds to a message id.

        Returns:
            Registered handle, or the raw data handle when none
        """
        return self._registry.resolve_message(message_id) or RAW_DATA_HANDLE

    def populate_list(self) -> List[DecoderHandle]:
        """Decoders an operator can choose from."""
        return self._registry.decoders()

    def overrides(self) -> Dict[Hashable, int]:
        """Snapshot of active overrides."""
        with self._lock:
            return dict(self._overrides)
