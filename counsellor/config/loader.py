"""Configuration loading utilities."""

import json
from pathlib import Path

from pydantic import ValidationError

from counsellor.config.schema import Config
from counsellor.logging import get_logger, setup_logging

logger = get_logger(__name__)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".counsellor" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return Config.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning("config_load_failed", path=str(path), error=str(e), fallback="defaults")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file using camelCase keys."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def configure_logging(config: Config) -> None:
    """Apply the config's log level and output format to the ``counsellor`` loggers."""
    setup_logging(json_output=config.log_json, level=config.log_level)
