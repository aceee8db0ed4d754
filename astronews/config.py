"""
Configuration management for astronews.
"""
import os
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = 'ASTRONEWS_'

# Default configuration
DEFAULT_CONFIG = {
    "server": {
        "host": "127.0.0.1",
        "port": 5000
    },
    "storage": {
        "seed": True,
        "seed_file": None,
        "all_category_slug": "top"
    },
    "pagination": {
        "default_limit": 20,
        "max_limit": 100
    },
    "logging": {
        "level": "INFO",
        "file": None
    }
}


def _copy_defaults() -> Dict:
    return json.loads(json.dumps(DEFAULT_CONFIG))


class Config:
    """
    Configuration manager for astronews.

    Values come from DEFAULT_CONFIG, then an optional YAML or JSON file,
    then ASTRONEWS_-prefixed environment variables.
    """
    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to the configuration file
            environ: Environment to read overrides from (defaults to os.environ)
        """
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = _copy_defaults()

        if self.config_path:
            try:
                path = Path(self.config_path)
                if path.exists():
                    if path.suffix.lower() in ['.yaml', '.yml']:
                        with open(path, 'r') as f:
                            user_config = yaml.safe_load(f) or {}
                    elif path.suffix.lower() == '.json':
                        with open(path, 'r') as f:
                            user_config = json.load(f)
                    else:
                        raise ValueError(f"Unsupported config file format: {path.suffix}")

                    if not isinstance(user_config, dict):
                        raise ValueError(f"Config file must contain a mapping, got {type(user_config).__name__}")
                    self._update_dict(config, user_config)
                else:
                    logger.warning(f"Config file {self.config_path} not found")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading config from {self.config_path}: {e}")
                logger.error("Using default configuration")

        self._override_from_env(config)

        return config

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _override_from_env(self, config: Dict, prefix: str = ENV_PREFIX) -> None:
        """
        Override configuration with environment variables.

        ASTRONEWS_SERVER__PORT=8080 sets server.port. Sections are separated
        by a double underscore so keys like default_limit survive intact.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in self.environ.items():
            if not key.startswith(prefix) or key == f"{prefix}CONFIG_PATH":
                continue
            parts = key[len(prefix):].lower().split('__')

            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'server.port')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config
        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current


def load_config(config_path: Optional[str] = None) -> Config:
    """Build a Config from the given path or ASTRONEWS_CONFIG_PATH."""
    return Config(config_path or os.getenv(f"{ENV_PREFIX}CONFIG_PATH"))
