"""Simple YAML configuration loader for live-translate."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.session import SessionConfig

logger = logging.getLogger(__name__)

SUBSCRIPTION_KEY_ENV = "AZURE_SPEECH_KEY"


class LiveTranslateConfig:
    """live-translate configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (e.g. live_translate.yaml)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'azure_speech.region').

        Args:
            key_path: Dot-separated key path
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
            key_path: Dot-separated path to config value (e.g., 'languages.target')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_region(self) -> str:
        """Get Azure Speech region - CRASHES if not configured."""
        region = self.get('azure_speech.region')
        if not region:
            raise ValueError("Azure Speech region not configured in live_translate.yaml")
        return region

    def get_subscription_key(self) -> str:
        """Get Azure Speech subscription key from config or environment."""
        key = self.get('azure_speech.subscription_key') or os.environ.get(SUBSCRIPTION_KEY_ENV)
        if not key:
            raise ValueError(
                f"Azure Speech subscription key not configured: set azure_speech.subscription_key "
                f"or the {SUBSCRIPTION_KEY_ENV} environment variable"
            )
        return key

    def get_token_endpoint(self) -> Optional[str]:
        """Get the optional token endpoint URL."""
        return self.get('azure_speech.token_endpoint') or None

    def get_token_validity_seconds(self) -> float:
        return float(self.get('auth.token_validity_seconds', 600))

    def get_refresh_margin_seconds(self) -> float:
        return float(self.get('auth.refresh_margin_seconds', 60))

    def get_session_config(self) -> SessionConfig:
        """Get the initial language configuration."""
        return SessionConfig(
            speech_language=self.get('languages.speech', 'en-US'),
            target_language=self.get('languages.target', 'es'),
        )
