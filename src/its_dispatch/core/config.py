"""
Configuration management for ITS dispatch.

Selects which transport ports, secured message types and application
ids are bound at startup, and whether operator Decode As overrides are
honoured.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..protocols.constants import APPLICATION_IDS, SECURED_MESSAGE_TYPES, WELL_KNOWN_PORTS

logger = logging.getLogger(__name__)

# Overrides the default configuration file location
CONFIG_PATH_ENV = "ITS_DISPATCH_CONFIG"

PathLike = Union[str, Path]


class ConfigValidationError(ValueError):
    """Raised when configuration values are invalid."""

    pass


def _check_bindings(name: str, values: Iterable[int], supported: Mapping[int, Any]) -> None:
    values = list(values)
    unknown = [v for v in values if v not in supported]
    if unknown:
        raise ConfigValidationError(
            f"Unsupported {name}: {unknown}. Must be among {sorted(supported)}"
        )
    if len(set(values)) != len(values):
        raise ConfigValidationError(f"Duplicate {name}: {values}")


@dataclass
class TransportConfig:
    """Transport bindings registered at startup."""

    ports: List[int] = field(default_factory=lambda: sorted(WELL_KNOWN_PORTS))
    secured_message_types: List[int] = field(
        default_factory=lambda: sorted(SECURED_MESSAGE_TYPES)
    )
    application_ids: List[int] = field(default_factory=lambda: sorted(APPLICATION_IDS))

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all configuration fields."""
        _check_bindings("ports", self.ports, WELL_KNOWN_PORTS)
        _check_bindings(
            "secured_message_types", self.secured_message_types, SECURED_MESSAGE_TYPES
        )
        _check_bindings("application_ids", self.application_ids, APPLICATION_IDS)


@dataclass
class DecodeAsConfig:
    """Configuration for Decode As overrides."""

    enabled: bool = True
    key: str = "its.msg_id"
    max_sessions: int = 1024

    def __post_init__(self) -> None:
        if not self.key:
            raise ConfigValidationError("Decode As key must not be empty")
        if self.max_sessions < 1:
            raise ConfigValidationError(
                f"Invalid max_sessions: {self.max_sessions}. Must be at least 1"
            )


@dataclass
class DispatchConfig:
    """Main configuration container."""

    transport: TransportConfig = field(default_factory=TransportConfig)
    decode_as: DecodeAsConfig = field(default_factory=DecodeAsConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DispatchConfig":
        """
        Create configuration from dictionary.

        Missing sections keep their defaults. Unknown sections are
        ignored with a warning; unknown fields inside a section raise.
        """
        if not isinstance(data, Mapping):
            raise ConfigValidationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )

        sections = {"transport": TransportConfig, "decode_as": DecodeAsConfig}
        for name in data:
            if name not in sections:
                logger.warning(f"Ignoring unknown configuration section '{name}'")

        values = {
            name: section_cls(**data[name])
            for name, section_cls in sections.items()
            if name in data
        }
        return cls(**values)

    def save(self, path: PathLike) -> bool:
        """Write the configuration as JSON.

        Returns:
            True on success, False if the file could not be written
        """
        target = Path(path)
        try:
            text = json.dumps(self.to_dict(), indent=2, sort_keys=True)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize configuration: {e}")
            return False

        try:
            target.write_text(text + "\n")
        except OSError as e:
            logger.error(f"Cannot write configuration to {target}: {e}")
            return False

        logger.info(f"Saved configuration to {target}")
        return True

    @classmethod
    def load(cls, path: PathLike) -> Optional["DispatchConfig"]:
        """Read a JSON configuration.

        Returns:
            DispatchConfig, or None if the file is missing, unreadable,
            or holds invalid values
        """
        source = Path(path)
        try:
            data = json.loads(source.read_text())
        except FileNotFoundError:
            logger.warning(f"No configuration at {source}")
            return None
        except OSError as e:
            logger.error(f"Cannot read configuration from {source}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"Malformed JSON in {source}: {e}")
            return None

        try:
            config = cls.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Rejected configuration in {source}: {e}")
            return None

        logger.info(f"Loaded configuration from {source}")
        return config

    @classmethod
    def get_default_config_path(cls) -> Path:
        """
        Default configuration file.

        ``$ITS_DISPATCH_CONFIG`` when set, otherwise
        ``~/.config/its_dispatch/config.json``. The parent directory is
        created if needed.
        """
        override = os.environ.get(CONFIG_PATH_ENV)
        if override:
            path = Path(override)
        else:
            path = Path.home() / ".config" / "its_dispatch" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def save_default(self) -> bool:
        return self.save(self.get_default_config_path())

    @classmethod
    def load_default(cls) -> "DispatchConfig":
        """Load the default configuration file, falling back to defaults."""
        path = cls.get_default_config_path()
        if not path.is_file():
            return cls()
        config = cls.load(path)
        if config is None:
            logger.warning(f"Falling back to default configuration, {path} is unusable")
            return cls()
        return config


def create_preset_btp_only() -> DispatchConfig:
    """Unsecured BTP traffic only."""
    return DispatchConfig(
        transport=TransportConfig(secured_message_types=[], application_ids=[])
    )


def create_preset_secured_only() -> DispatchConfig:
    """Secured GeoNetworking traffic only."""
    return DispatchConfig(transport=TransportConfig(ports=[]))


def create_preset_fixed_routing() -> DispatchConfig:
    """Header routing only; operator overrides are ignored."""
    return DispatchConfig(decode_as=DecodeAsConfig(enabled=False))


# Preset factories; each call builds an independent configuration
PRESETS: Dict[str, Callable[[], DispatchConfig]] = {
    "default": DispatchConfig,
    "btp_only": create_preset_btp_only,
    "secured_only": create_preset_secured_only,
    "fixed_routing": create_preset_fixed_routing,
}


def get_preset(name: str) -> Optional[DispatchConfig]:
    """Get a fresh preset configuration by name, or None."""
    factory = PRESETS.get(name)
    return factory() if factory is not None else None


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS)
