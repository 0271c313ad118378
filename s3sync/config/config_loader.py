"""
Configuration Loader

Handles loading, parsing, and merging configuration from YAML files,
.env files and environment variables.

Author: s3sync Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config

DEFAULT_CONFIG_PATH = "s3sync.yaml"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


class ConfigLoader:
    """
    Configuration loader and manager.

    Loads configuration from a YAML file, merges environment variables and
    validates the structure.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to the configuration file. If None, uses
                S3SYNC_CONFIG or ./s3sync.yaml.
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path or os.getenv(
            "S3SYNC_CONFIG",
            DEFAULT_CONFIG_PATH
        )
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """
        Load and validate configuration.

        Returns:
            Validated Config object

        Raises:
            ValueError: If YAML parsing or configuration validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)

        self._config = Config(**config_data)
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        config_file = Path(self.config_path)

        if not config_file.exists():
            return self._create_default_config()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_file}")
        return data

    def _create_default_config(self) -> Dict[str, Any]:
        """
        Create default configuration structure.

        Returns:
            Default configuration dictionary
        """
        return {
            "sync": {
                "parallel": 16,
                "delete": False,
                "dry_run": False,
                "acl": None,
                "content_type": None,
                "guess_mime": True
            },
            "aws": {
                "region": None,
                "profile_name": None,
                "endpoint_url": None,
                "force_path_style": False
            },
            "logging": {
                "log_level": "INFO",
                "log_to_file": False,
                "json_format": False
            }
        }

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values.

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        # Sync settings
        if os.getenv("S3SYNC_PARALLEL"):
            config_data.setdefault("sync", {})["parallel"] = int(os.getenv("S3SYNC_PARALLEL"))
        if os.getenv("S3SYNC_DELETE"):
            config_data.setdefault("sync", {})["delete"] = _env_bool(os.getenv("S3SYNC_DELETE"))
        if os.getenv("S3SYNC_DRY_RUN"):
            config_data.setdefault("sync", {})["dry_run"] = _env_bool(os.getenv("S3SYNC_DRY_RUN"))
        if os.getenv("S3SYNC_ACL"):
            config_data.setdefault("sync", {})["acl"] = os.getenv("S3SYNC_ACL")
        if os.getenv("S3SYNC_CONTENT_TYPE"):
            config_data.setdefault("sync", {})["content_type"] = os.getenv("S3SYNC_CONTENT_TYPE")
        if os.getenv("S3SYNC_GUESS_MIME"):
            config_data.setdefault("sync", {})["guess_mime"] = _env_bool(os.getenv("S3SYNC_GUESS_MIME"))

        # AWS settings
        if os.getenv("AWS_REGION"):
            config_data.setdefault("aws", {})["region"] = os.getenv("AWS_REGION")
        if os.getenv("AWS_PROFILE"):
            config_data.setdefault("aws", {})["profile_name"] = os.getenv("AWS_PROFILE")
        if os.getenv("S3SYNC_ENDPOINT_URL"):
            config_data.setdefault("aws", {})["endpoint_url"] = os.getenv("S3SYNC_ENDPOINT_URL")

        # Logging
        if os.getenv("S3SYNC_LOG_LEVEL"):
            config_data.setdefault("logging", {})["log_level"] = os.getenv("S3SYNC_LOG_LEVEL").upper()

        return config_data

    def save(self, config: Config, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Config object to save
            path: Path to save to (uses default if None)
        """
        save_path = Path(path or self.config_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.dict()

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def reload(self) -> Config:
        """
        Reload configuration from file.

        Returns:
            Reloaded Config object
        """
        return self.load()

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
