"""Simple YAML configuration loader for PitchRoll."""

import copy
import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'audio': {
        'sample_rate': 44100,
        'chunk_size': 1024,
        'channels': 1,
    },
    'pitch': {
        'frame_length': 4096,
        'hop_length': 1024,
        'threshold': 0.1,
        'min_frequency': 80.0,
        'max_frequency': 2000.0,
    },
    'session': {
        'max_duration_seconds': 60,
        'yield_every': 64,
    },
    'logging': {
        'level': 'INFO',
        'file_path': 'data/logs/pitchroll.log',
        'console_output': True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class PitchRollConfig:
    """PitchRoll configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults are used.
        """
        if config_path is None:
            self.config_file = None
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(DEFAULT_CONFIG, loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        log_path = config['logging'].get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'pitch.threshold').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.sample_rate')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'pitch.hop_length')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")


@dataclass(frozen=True)
class PitchSettings:
    """Validated detection parameters shared by the frame source and estimator."""
    sample_rate: int = 44100
    chunk_size: int = 1024
    frame_length: int = 4096
    hop_length: int = 1024
    threshold: float = 0.1
    min_frequency: float = 80.0
    max_frequency: float = 2000.0
    max_duration_seconds: Optional[float] = 60.0
    yield_every: int = 64

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.frame_length < 2:
            raise ValueError(f"frame_length must be at least 2, got {self.frame_length}")
        if not 0 < self.hop_length <= self.frame_length:
            raise ValueError(
                f"hop_length must be in (0, frame_length={self.frame_length}], got {self.hop_length}")
        if not 0 < self.threshold < 1:
            raise ValueError(f"threshold must be in (0, 1), got {self.threshold}")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"Invalid frequency band: {self.min_frequency} - {self.max_frequency} Hz")
        if self.yield_every < 1:
            raise ValueError(f"yield_every must be at least 1, got {self.yield_every}")

    @property
    def hop_seconds(self) -> float:
        """Per-frame processing budget for live capture."""
        return self.hop_length / self.sample_rate

    @classmethod
    def from_config(cls, config: PitchRollConfig) -> "PitchSettings":
        return cls(
            sample_rate=int(config.get('audio.sample_rate', 44100)),
            chunk_size=int(config.get('audio.chunk_size', 1024)),
            frame_length=int(config.get('pitch.frame_length', 4096)),
            hop_length=int(config.get('pitch.hop_length', 1024)),
            threshold=float(config.get('pitch.threshold', 0.1)),
            min_frequency=float(config.get('pitch.min_frequency', 80.0)),
            max_frequency=float(config.get('pitch.max_frequency', 2000.0)),
            max_duration_seconds=config.get('session.max_duration_seconds', 60),
            yield_every=int(config.get('session.yield_every', 64)),
        )
