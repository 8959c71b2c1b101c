"""Configuration loader for the mirror service."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_INTERVAL_MS = 1000
DEFAULT_LOG_FILE = "mirror.log"


class ConfigError(Exception):
    """Raised when config validation fails."""

    pass


class Config:
    """Configuration object for the mirror service."""

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self._config = config_dict
        self._validate()

    def _validate(self) -> None:
        """Validate required configuration fields."""
        required_keys = ["source_root", "replica_root"]
        for key in required_keys:
            if key not in self._config:
                raise ConfigError(f"Missing required config key: {key}")

            path = self._config[key]
            if not isinstance(path, str):
                raise ConfigError(f"Config key '{key}' must be a string")
            if not path.strip():
                raise ConfigError(f"Config key '{key}' must not be blank")

        interval = self._config.get("interval_ms", DEFAULT_INTERVAL_MS)
        # bool is an int subclass, reject it explicitly
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise ConfigError("Config key 'interval_ms' must be an integer")
        if interval <= 0:
            raise ConfigError("Config key 'interval_ms' must be positive")

    @classmethod
    def from_arguments(
        cls,
        source_root: str,
        replica_root: str,
        interval_ms: int,
        log_file_path: Optional[str] = None,
    ) -> "Config":
        """Build a config from command line values."""
        config_dict: Dict[str, Any] = {
            "source_root": source_root,
            "replica_root": replica_root,
            "interval_ms": interval_ms,
        }
        if log_file_path:
            config_dict["logging"] = {"file_path": log_file_path}
        return cls(config_dict)

    @property
    def source_root(self) -> str:
        """Get source root path."""
        return self._config["source_root"]

    @property
    def replica_root(self) -> str:
        """Get replica root path."""
        return self._config["replica_root"]

    @property
    def interval_ms(self) -> int:
        """Get polling interval in milliseconds."""
        return self._config.get("interval_ms", DEFAULT_INTERVAL_MS)

    @property
    def ignore_extensions(self) -> list:
        """Get extensions to ignore."""
        items = (self._config.get("ignore") or {}).get("extensions", [])
        return [i for i in (items or []) if i]

    @property
    def ignore_filenames_prefix(self) -> list:
        """Get filename prefixes to ignore."""
        items = (self._config.get("ignore") or {}).get("filenames_prefix", [])
        return [i for i in (items or []) if i]

    @property
    def ignore_filenames_exact(self) -> list:
        """Get exact filenames to ignore."""
        items = (self._config.get("ignore") or {}).get("filenames_exact", [])
        return [i for i in (items or []) if i]

    @property
    def log_file_path(self) -> str:
        """Get log file path."""
        return (self._config.get("logging") or {}).get("file_path", DEFAULT_LOG_FILE)

    @property
    def log_level(self) -> str:
        """Get log level."""
        return (self._config.get("logging") or {}).get("level", "INFO")

    @property
    def log_max_size_mb(self) -> int:
        """Get max log file size in MB before rotation."""
        return (self._config.get("logging") or {}).get("max_size_mb", 10)

    @property
    def log_backup_count(self) -> int:
        """Get number of rotated log files to keep."""
        return (self._config.get("logging") or {}).get("backup_count", 5)

    @property
    def log_rotation_enabled(self) -> bool:
        """Get log rotation flag."""
        return (self._config.get("logging") or {}).get("rotation_enabled", True)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Config object

    Raises:
        ConfigError: If config file doesn't exist or is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return Config(config_dict)


def load_config_from_env(env_var: str = "MIRROR_CONFIG") -> Config:
    """Load configuration from environment variable.

    Args:
        env_var: Name of environment variable containing config path

    Returns:
        Config object

    Raises:
        ConfigError: If environment variable not set or config invalid
    """
    config_path = os.getenv(env_var)
    if not config_path:
        raise ConfigError(f"Environment variable {env_var} not set")

    return load_config(config_path)
