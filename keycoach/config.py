"""YAML configuration for keycoach, validated by pydantic.

Settings are read when the engine is built; editing the file has no effect on
a running engine.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from instrukt_ai_logging import get_logger
from pydantic import BaseModel, ConfigDict, Field

from keycoach.filters import EditorFilterStrategy

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.keycoach/keycoach.yml")
CONFIG_PATH_ENV = "KEYCOACH_CONFIG"


class KeycoachConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    cooldown_interval_s: float = Field(default=300.0, ge=0)
    session_recommendation_limit: int = Field(default=3, ge=0)
    editor_filter: EditorFilterStrategy = EditorFilterStrategy.SHORTCUT_GROUPS
    catalog_path: Optional[str] = None
    database_path: str = "~/.keycoach/keycoach.db"
    log_level: Optional[str] = None


def expand_env_vars(config: object) -> object:
    """Recursively replace ``${VAR}`` patterns with environment values; unknown vars stay as-is."""
    if isinstance(config, dict):
        return {k: expand_env_vars(v) for k, v in config.items()}  # type: ignore[misc]
    if isinstance(config, list):
        return [expand_env_vars(item) for item in config]
    if isinstance(config, str):

        def replace_env_var(match: re.Match[str]) -> str:
            return os.getenv(match.group(1), match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_env_var, config)
    return config


def resolve_config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(path: Optional[Path] = None) -> KeycoachConfig:
    """Load and validate configuration.

    A missing or unreadable file yields the defaults. Invalid values raise
    ``pydantic.ValidationError``.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return KeycoachConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.warning("Failed to read config file %s: %s", config_path, e)
        return KeycoachConfig()

    config = KeycoachConfig.model_validate(expand_env_vars(raw))
    if config.model_extra:
        logger.warning("Unknown keys in %s: %s", config_path, list(config.model_extra.keys()))
    return config
