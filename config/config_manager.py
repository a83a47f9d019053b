"""
Configuration management: layered sources resolved into an immutable ``Args``.
"""
import os
import json
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from copy import deepcopy
from utils.logging_config import get_logger
from utils.exceptions import ConfigurationError
from .args import Args

logger = get_logger(__name__)


class ConfigManager:
    """
    Collects configuration values from files, the environment and plain
    dictionaries. Later sources override earlier ones; :meth:`build_args`
    freezes the result.
    """

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(defaults or {})
        self.logger = get_logger(self.__class__.__name__)

    def load_from_file(self, filepath: str):
        """
        Load configuration from file (JSON or YAML).

        Args:
            filepath: Path to configuration file
        """
        path = Path(filepath)

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {filepath}",
                details={'filepath': str(path)}
            )

        if path.suffix not in ['.yaml', '.yml', '.json']:
            raise ConfigurationError(
                f"Unsupported file format: {path.suffix}",
                details={'filepath': str(path)}
            )

        try:
            with open(path, 'r') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {filepath}: {e}",
                details={'filepath': str(path), 'error': str(e)}
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {filepath}",
                details={'filepath': str(path), 'actual_type': type(data).__name__}
            )

        self._data.update(data)
        self.logger.info(f"Loaded configuration from {filepath}")

    def load_from_env(self, prefix: str = "LABELBAG_"):
        """
        Load configuration from environment variables.

        ``LABELBAG_NBASE=8`` sets ``nbase``; values are parsed as JSON when
        possible so numbers and booleans keep their type.

        Args:
            prefix: Prefix for environment variables
        """
        count = 0

        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()

                try:
                    parsed_value = json.loads(value)
                except json.JSONDecodeError:
                    parsed_value = value

                self._data[config_key] = parsed_value
                count += 1

        self.logger.info(f"Loaded {count} configuration values from environment")

    def load_from_dict(self, data: Dict[str, Any]):
        """Load configuration from dictionary."""
        self._data.update(data)
        self.logger.info("Loaded configuration from dictionary")

    def save_to_file(self, filepath: str, format: str = 'yaml'):
        """
        Save configuration to file.

        Args:
            filepath: Path to save configuration
            format: File format ('yaml' or 'json')
        """
        if format not in ('yaml', 'json'):
            raise ConfigurationError(f"Unsupported format: {format}")

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            if format == 'yaml':
                yaml.dump(self.to_dict(), f, default_flow_style=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

        self.logger.info(f"Saved configuration to {filepath}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self._data[key] = value
        self.logger.debug(f"Set config: {key} = {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return deepcopy(self._data)

    def build_args(self) -> Args:
        """Freeze the collected values into a validated ``Args``."""
        return Args.from_dict(self._data).validate()

    def clear(self):
        """Clear all configuration."""
        self._data = {}
        self.logger.info("Cleared all configuration")


# Global configuration manager instance
_global_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _global_config_manager
    if _global_config_manager is None:
        _global_config_manager = ConfigManager()
    return _global_config_manager


def load_config(filepath: str) -> Args:
    """Load configuration from file into global manager and build ``Args``."""
    manager = get_config_manager()
    manager.load_from_file(filepath)
    return manager.build_args()
