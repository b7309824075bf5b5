"""Configuration management for pitch_tuner components."""

import copy
import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Any, Optional

from ..errors import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

MIN_A4_REFERENCE = 415.0
MAX_A4_REFERENCE = 466.0


def validate_sensitivity(sensitivity: float) -> float:
    """Return sensitivity if it is in (0, 1], raise ConfigurationError otherwise."""
    if not 0.0 < sensitivity <= 1.0:
        raise ConfigurationError(f"Sensitivity must be in (0, 1], got {sensitivity}")
    return float(sensitivity)


def validate_a4_reference(a4_reference: float) -> float:
    """Return a4_reference if it is in the supported range, raise otherwise."""
    if not MIN_A4_REFERENCE <= a4_reference <= MAX_A4_REFERENCE:
        raise ConfigurationError(
            f"A4 reference must be between {MIN_A4_REFERENCE:g} and "
            f"{MAX_A4_REFERENCE:g} Hz, got {a4_reference}"
        )
    return float(a4_reference)


@dataclass(frozen=True)
class TunerSettings:
    """Validated per-tick settings for the frame loop."""

    sensitivity: float = 0.5
    a4_reference: float = 440.0

    def __post_init__(self):
        validate_sensitivity(self.sensitivity)
        validate_a4_reference(self.a4_reference)

    def updated(self, **changes) -> "TunerSettings":
        """Copy with changes applied, validated again."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


class ConfigManager:
    """Configuration manager for pitch_tuner components."""

    DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
        "detector": {
            "sensitivity": 0.5,
            "a4_reference": 440.0,
            "min_floor": 0.0001,
            "max_ceiling": 0.01,
            "trim_threshold": 0.2,
        },
        "audio_input": {
            "sample_rate": 44100,
            "frame_size": 2048,
            "channels": 1,
            "device_id": None,
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_file: Optional JSON file whose sections override the defaults

        Raises:
            ConfigurationError: If the file cannot be read or has unknown sections
        """
        self.configs = copy.deepcopy(self.DEFAULT_CONFIGS)
        if config_file is not None:
            self.load_file(config_file)

    def load_file(self, config_file: str) -> None:
        """Overlay settings from a JSON file onto the current configuration.

        Args:
            config_file: Path to a JSON object keyed by section name
        """
        path = Path(config_file)
        try:
            with open(path, "r") as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read configuration from {path}: {e}") from e

        if not isinstance(overrides, dict):
            raise ConfigurationError(f"Configuration file {path} must hold a JSON object")

        for name, updates in overrides.items():
            self.update_config(name, updates)
        logger.info(f"Loaded configuration from {path}")

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of a configuration section.

        Raises:
            ConfigurationError: If the section is unknown
        """
        if name not in self.configs:
            raise ConfigurationError(f"Unknown configuration: {name}")
        return self.configs[name].copy()

    def update_config(self, name: str, updates: Dict[str, Any]) -> None:
        """Update keys of a configuration section.

        Raises:
            ConfigurationError: If the section or any key is unknown
        """
        if name not in self.configs:
            raise ConfigurationError(f"Unknown configuration: {name}")
        if not isinstance(updates, dict):
            raise ConfigurationError(f"Configuration section {name} must be an object")
        unknown = set(updates) - set(self.DEFAULT_CONFIGS[name])
        if unknown:
            raise ConfigurationError(
                f"Unknown keys for {name}: {', '.join(sorted(unknown))}"
            )
        self.configs[name].update(updates)

    def reset_config(self, name: str) -> None:
        """Reset a configuration section to its defaults."""
        if name not in self.DEFAULT_CONFIGS:
            raise ConfigurationError(f"Unknown configuration: {name}")
        self.configs[name] = self.DEFAULT_CONFIGS[name].copy()

    def tuner_settings(self) -> TunerSettings:
        """Validated sensitivity and A4 reference from the detector section."""
        detector = self.configs["detector"]
        return TunerSettings(
            sensitivity=detector["sensitivity"],
            a4_reference=detector["a4_reference"],
        )
