"""Configuration management module."""

import copy
import os
import json
import logging
from typing import Dict, Optional, Any
from pathlib import Path

from .security import SecureFileHandler, validate_file_path_input
from .error_handler import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


class Config:
    """Configuration management for the application."""

    DEFAULT_CONFIG = {
        'api': {
            'base_url': 'https://date.nager.at'
        },
        'cache': {
            'directory': None  # None -> ~/.holidate/cache
        },
        'holidays': {
            'default_quantity': 5,
            'max_years': 10
        }
    }

    ENV_OVERRIDES = {
        'HOLIDATE_API_URL': 'api.base_url',
        'HOLIDATE_CACHE_DIR': 'cache.directory'
    }

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file or self._get_default_config_path()
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path.

        Returns:
            Default config file path
        """
        return str(Path.home() / '.holidate' / 'config.json')

    def load_config(self):
        """Load configuration from file and environment variables."""
        if os.path.exists(self.config_file):
            try:
                validated_path = validate_file_path_input(self.config_file, require_exists=True)
                content = SecureFileHandler.read_secure_file(validated_path)
                file_config = json.loads(content)
                if not isinstance(file_config, dict):
                    raise ValueError("top level must be an object")
                self._merge_config(file_config)
            except (ValueError, ValidationError) as e:
                logger.warning(f"Failed to load config file {self.config_file}: {e}")

        for env_name, key_path in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                self.set(key_path, value)

    def save_config(self):
        """Save current configuration to file."""
        try:
            content = json.dumps(self.config, indent=2)
            SecureFileHandler.write_secure_file(
                Path(self.config_file),
                content,
                permissions=SecureFileHandler.READABLE_FILE_PERMISSIONS
            )
        except ValidationError as e:
            logger.warning(f"Failed to save config file {self.config_file}: {e}")

    def _merge_config(self, new_config: Dict[str, Any]):
        """Merge new configuration with existing config.

        Args:
            new_config: New configuration to merge
        """
        def merge_dict(base: Dict, update: Dict):
            for key, value in update.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    merge_dict(base[key], value)
                else:
                    base[key] = value

        merge_dict(self.config, new_config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value by key path.

        Args:
            key_path: Dot-separated key path (e.g., 'api.base_url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any):
        """Set configuration value by key path.

        Args:
            key_path: Dot-separated key path
            value: Value to set
        """
        keys = key_path.split('.')
        config = self.config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def get_api_url(self) -> str:
        return self.get('api.base_url', self.DEFAULT_CONFIG['api']['base_url'])

    def get_cache_dir(self) -> Optional[Path]:
        """Configured cache root, or None for the default location."""
        directory = self.get('cache.directory')
        return Path(directory).expanduser() if directory else None

    def get_default_quantity(self) -> int:
        return self._get_int('holidays.default_quantity', minimum=1)

    def get_max_years(self) -> Optional[int]:
        """Year horizon for paging; None disables the limit."""
        if self.get('holidays.max_years', 10) is None:
            return None
        return self._get_int('holidays.max_years', minimum=1)

    def _get_int(self, key_path: str, minimum: int) -> int:
        value = self.get(key_path)
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise ConfigurationError(
                f"Configuration value {key_path} must be an integer >= {minimum}, got {value!r}",
                config_key=key_path
            )
        return value
