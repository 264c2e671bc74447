"""Configuration module for counsellor."""

from counsellor.config.loader import configure_logging, get_config_path, load_config
from counsellor.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path", "configure_logging"]
