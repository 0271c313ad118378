"""
s3sync Configuration Module

Loads, validates and merges configuration from YAML files, .env files
and environment variables.

Author: s3sync Project
License: MIT
"""

from .schema import Config, SyncConfig, AwsConfig, LoggingConfig, TransferSettings
from .config_loader import ConfigLoader, load_config

__version__ = "0.1.0"
__all__ = [
    'Config', 'SyncConfig', 'AwsConfig', 'LoggingConfig', 'TransferSettings',
    'ConfigLoader', 'load_config'
]
