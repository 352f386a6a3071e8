"""Configuration management for minebot."""

from minebot.config.loader import Config, ConfigManager, load_config
from minebot.config.secrets import load_environment_secrets, resolve_api_key

__all__ = ["Config", "ConfigManager", "load_config", "load_environment_secrets", "resolve_api_key"]
