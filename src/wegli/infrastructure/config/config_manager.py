"""Configuration manager for loading and validating .wegli.yml"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from wegli.domain.config import ApiConfig, AppConfig, RetryConfig, RetryPolicy

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".wegli.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "WEGLI_API_URL": ("api", "url"),
    "WEGLI_API_TOKEN": ("api", "token"),
    "WEGLI_MAX_RETRIES": ("retry", "max_retries"),
    "WEGLI_INITIAL_BACKOFF_MS": ("retry", "initial_backoff_ms"),
    "WEGLI_BACKOFF_MULTIPLIER": ("retry", "backoff_multiplier"),
}


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .wegli.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .wegli.yml file (searched upward from current directory)
    3. Environment variables (WEGLI_*)
    4. CLI arguments (handled by CLI layer)
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .wegli.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If the file is unreadable or validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .wegli.yml starting from the current directory"""
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILENAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILENAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and environment, then validate

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the file cannot be read or parsed
        """
        config_dict = AppConfig().model_dump(mode="json")

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            for section in list(file_config):
                # "retry:" with nothing below it loads as None
                if file_config[section] is None:
                    file_config[section] = {}
                elif section in config_dict and not isinstance(file_config[section], dict):
                    raise ConfigurationError(
                        f"Section '{section}' in {self.config_path} must be a mapping"
                    )
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply WEGLI_* environment variable overrides"""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                config[section][key] = value
        return config

    def get_api_config(self) -> ApiConfig:
        """Get API connection configuration"""
        return self.config.api

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration"""
        return self.config.retry

    def get_retry_policy(self) -> RetryPolicy:
        """Get the retry policy built from the retry configuration"""
        return self.config.retry.to_policy()
