"""Configuration loading and resolution."""

from doxnav.config.load import DEFAULT_CONFIG_FILE, load_config, resolve_config
from doxnav.config.model import Config

__all__ = ["DEFAULT_CONFIG_FILE", "Config", "load_config", "resolve_config"]
