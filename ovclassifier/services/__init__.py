"""
Services: configuration, API schemas and the HTTP API
"""

from .config import Config, ClassifierSettings, config, load_settings

__all__ = [
    'Config',
    'ClassifierSettings',
    'config',
    'load_settings',
]
