"""
Configuration Management for Method Trace

Holds the process-wide tracing toggle and rendering limits.
"""

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ENABLED_ENV_VAR = "METHODTRACE_ENABLED"
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class TraceConfig:
    """Main configuration class for Method Trace."""

    # Core settings
    enabled: bool = True

    # Rendering settings
    max_repr_length: int = 1000

    # Logging settings
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate limits."""
        if self.max_repr_length < 1:
            raise ValueError(f"max_repr_length must be positive, got {self.max_repr_length}")


class Config:
    """Global configuration singleton."""

    _instance: Optional[TraceConfig] = None
    _lock = threading.RLock()

    @classmethod
    def initialize(cls, config_path: Optional[Path] = None, **kwargs) -> TraceConfig:
        """Initialize configuration from file or kwargs."""
        with cls._lock:
            if config_path:
                cls._instance = cls.load_config(config_path)
            else:
                cls._instance = TraceConfig(**kwargs)
            return cls._instance

    @classmethod
    def get_instance(cls) -> TraceConfig:
        """Get the configuration instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = TraceConfig()
            return cls._instance

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        instance = cls.get_instance()
        return getattr(instance, key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a configuration value."""
        instance = cls.get_instance()
        if hasattr(instance, key):
            setattr(instance, key, value)

    @classmethod
    def is_enabled(cls, config: Optional[TraceConfig] = None) -> bool:
        """Whether tracing is switched on, for ``config`` or the global instance."""
        # Check environment variable first
        env = os.environ.get(ENABLED_ENV_VAR)
        if env is not None:
            return env.strip().lower() not in _FALSE_VALUES

        # Fall back to config
        if config is not None:
            return bool(config.enabled)
        return bool(cls.get("enabled", True))

    @classmethod
    def load_config(cls, config_path: Path) -> TraceConfig:
        """Load configuration from a JSON file."""
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = json.load(f)
                return TraceConfig(**data)
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Error loading config from %s: %s", config_path, e)

        return TraceConfig()

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(cls.get_instance())

    @classmethod
    def reset(cls) -> None:
        """Drop the current instance so the next access rebuilds defaults."""
        with cls._lock:
            cls._instance = None


def load_config(config_path: Optional[Path] = None) -> TraceConfig:
    """Load configuration from file or use defaults."""
    return Config.initialize(config_path)


def get_config() -> TraceConfig:
    """Get the current configuration."""
    return Config.get_instance()
