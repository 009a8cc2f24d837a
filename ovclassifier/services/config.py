"""
Configuration loading from config.yaml
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import logging

logger = logging.getLogger(__name__)

PERFORMANCE_HINTS = ("LATENCY", "THROUGHPUT", "CUMULATIVE_THROUGHPUT")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config:
    """Loads and caches the raw settings from config.yaml"""

    _instance: Optional['Config'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load the configuration from config.yaml

        Args:
            config_path: Path to the configuration file. If None, looks in
                         the project root.

        Returns:
            Dictionary with the loaded configuration
        """
        if self._config and config_path is None:
            return self._config

        if config_path is None:
            # Project root is the parent of the ovclassifier package
            config_path = Path(__file__).parent.parent.parent / "config.yaml"

        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
            logger.info(f"Configuration loaded from: {config_path}")
            return self._config
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation

        Args:
            key: Configuration key (e.g. 'api.port')
            default: Value returned when the key is missing

        Returns:
            Configuration value or default
        """
        if not self._config:
            self.load()

        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def reload(self) -> Dict[str, Any]:
        """Reload the configuration from disk"""
        self._config = {}
        return self.load()


class ClassifierSettings(BaseSettings):
    """Typed settings for the classification pipeline.

    Values come from the ``classifier`` section of config.yaml; fields
    the file leaves out are read from ``OVCLS_*`` environment variables.
    """
    model_config = SettingsConfigDict(env_prefix="OVCLS_", extra="ignore")

    cache_dir: str = "cache"
    cache_device: str = "GPU"
    excluded_device: str = "GNA"
    virtual_device: Optional[str] = "AUTO"
    performance_hint: str = "LATENCY"
    inference_precision: str = "f32"
    log_level: str = "INFO"

    @field_validator('cache_dir', 'excluded_device')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("value must not be empty")
        return v

    @field_validator('performance_hint')
    @classmethod
    def validate_performance_hint(cls, v: str) -> str:
        v = v.upper()
        if v not in PERFORMANCE_HINTS:
            raise ValueError(f"performance_hint must be one of {PERFORMANCE_HINTS}, got: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got: {v}")
        return v

    @field_validator('virtual_device')
    @classmethod
    def validate_virtual_device(cls, v: Optional[str]) -> Optional[str]:
        return v or None


def load_settings(config_path: Optional[Union[str, Path]] = None) -> ClassifierSettings:
    """Build ClassifierSettings from the ``classifier`` section of config.yaml"""
    if config_path is None:
        data = config.load()
    else:
        data = config.load(config_path)
    section = data.get('classifier') or {}
    return ClassifierSettings(**section)


# Global configuration instance
config = Config()
