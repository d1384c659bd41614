"""
Regional extension resolution.

DSRC messages carry open-type regional extensions whose content depends
on a RegionId and on the extension point (RegExtKind) that holds them.
Both are folded into one composite key so a single flat table serves
every region and kind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import numpy as np

from ..utils.buffers import Buffer, as_byte_array, as_bytes
from .base import RAW_DATA_HANDLE, ConfigurationError, DecoderHandle
from .constants import RegionId

if TYPE_CHECKING:
    from .base import DecodeContext

logger = logging.getLogger(__name__)

REGION_ID_MAX = 0xFF
KIND_MAX = 0xFFFF
REGION_SHIFT = 16

TABLE_NAME = "dsrc.regionid"


def composite_key(region_id: int, kind: int) -> int:
    """
    Combine a region id and extension kind into one table key.

    Args:
        region_id: DSRC RegionId (high-order bits)
        kind: Regional extension kind (low-order 16 bits)

    Returns:
        Composite key
    """
    return (int(region_id) << REGION_SHIFT) + int(kind)


def split_key(key: int) -> Tuple[int, int]:
    """Split a composite key into (region_id, kind)."""
    return key >> REGION_SHIFT, key & KIND_MAX


def in_key_range(region_id: int, kind: int) -> bool:
    """True if the pair fits the composite key without overlapping another region."""
    return 0 <= int(region_id) <= REGION_ID_MAX and 0 <= int(kind) <= KIND_MAX


@dataclass
class ExtensionResult:
    """Result of resolving one regional extension."""

    region_id: int
    kind: int
    decoder: str
    tree: Any
    raw: np.ndarray
    is_fallback: bool = False
    ambiguous: bool = False

    @property
    def key(self) -> Optional[int]:
        """Composite key, or None when the pair is outside the key range."""
        if not in_key_range(self.region_id, self.kind):
            return None
        return composite_key(self.region_id, self.kind)


class RegionalExtensionResolver:
    """
    Table of regional extension decoders.

    Registration happens once at startup; lookups afterwards are
    read-only and safe to share between threads.
    """

    def __init__(self):
        self._table: Dict[int, DecoderHandle] = {}
        self._frozen = False

    def register(self, region_id: int, kind: int, handle: DecoderHandle) -> int:
        """
        Register an extension decoder.

        Args:
            region_id: DSRC RegionId
            kind: Regional extension kind
            handle: Decoder for the extension content

        Returns:
            Composite key the handle was registered under

        Raises:
            ConfigurationError: On invalid ids, duplicates, or after freeze()
        """
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register extension ({region_id}, {kind}): table is frozen"
            )
        if not (0 <= int(region_id) <= REGION_ID_MAX):
            raise ConfigurationError(f"region_id out of range: {region_id}")
        if not (0 <= int(kind) <= KIND_MAX):
            raise ConfigurationError(f"extension kind out of range: {kind}")
        if not isinstance(handle, DecoderHandle):
            raise ConfigurationError(
                f"Extension entry must be a DecoderHandle, got {type(handle).__name__}"
            )

        key = composite_key(region_id, kind)
        if key in self._table:
            raise ConfigurationError(
                f"Extension ({region_id}, {kind}) already registered to "
                f"'{self._table[key].name}'"
            )

        self._table[key] = handle
        logger.debug(f"Registered extension 0x{key:08x}: {handle.name}")
        return key

    def lookup(self, region_id: int, kind: int) -> Optional[DecoderHandle]:
        """Get the decoder for a (region, kind) pair, or None."""
        if not in_key_range(region_id, kind):
            return None
        return self._table.get(composite_key(region_id, kind))

    def resolve_extension(
        self,
        region_id: int,
        kind: int,
        buffer: Buffer,
        context: Optional["DecodeContext"] = None,
    ) -> ExtensionResult:
        """
        Decode regional extension content.

        With RegionId noRegion the content cannot be identified by kind
        alone. The lookup is still made on the declared content and the
        result is flagged ambiguous. Pairs outside the key range never
        match a registration and are passed through as raw data.

        Args:
            region_id: DSRC RegionId
            kind: Regional extension kind
            buffer: Extension content (declared length of the open type)
            context: Decode context passed through to the decoder

        Returns:
            ExtensionResult; raw passthrough when nothing is registered

        Raises:
            MalformedInputError: Propagated from the extension decoder
        """
        payload = as_bytes(buffer)
        region_id, kind = int(region_id), int(kind)
        ambiguous = region_id == RegionId.NO_REGION
        if ambiguous:
            logger.debug(
                f"Regional extension kind {kind} with noRegion, "
                f"{len(payload)} bytes: best effort"
            )

        handle = self.lookup(region_id, kind)
        if handle is None:
            return ExtensionResult(
                region_id=region_id,
                kind=kind,
                decoder=RAW_DATA_HANDLE.abbrev,
                tree=RAW_DATA_HANDLE.decode(payload, context),
                raw=as_byte_array(payload),
                is_fallback=True,
                ambiguous=ambiguous,
            )

        return ExtensionResult(
            region_id=region_id,
            kind=kind,
            decoder=handle.abbrev,
            tree=handle.decode(payload, context),
            raw=as_byte_array(payload),
            ambiguous=ambiguous,
        )

    def freeze(self) -> None:
        """Disallow further registration."""
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def keys(self) -> List[int]:
        """List registered composite keys."""
        return sorted(self._table.keys())

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: Tuple[int, int]) -> bool:
        region_id, kind = key
        return self.lookup(region_id, kind) is not None
