"""Configuration loading utilities."""

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from .main_config import Config

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".chatforge"
CONFIG_FILENAMES = ("chatforge.jsonc", "chatforge.json")

# Environment overrides for chat settings
ENV_OVERRIDES = {
    "CHATFORGE_DEFAULT_PROVIDER": "default_provider",
    "CHATFORGE_DEFAULT_MODEL": "default_model",
}


def strip_jsonc_comments(content: str) -> str:
    """
    Strip comments from JSONC content to convert to valid JSON.

    Handles:
    - Single-line comments: // comment
    - Multi-line comments: /* comment */

    Args:
        content: JSONC content string

    Returns:
        JSON string with comments removed
    """
    # Single-line comments, but not the "//" inside URLs like "https://"
    content = re.sub(r"(?<!:)//.*?$", "", content, flags=re.MULTILINE)
    content = re.sub(r"/\*.*?\*/", "", content, flags=re.DOTALL)
    return content


def load_config_file(path: Path) -> dict[str, Any] | None:
    """
    Load a config file from the given path.

    Supports both .json and .jsonc files with comment stripping.

    Args:
        path: Path to the config file

    Returns:
        Parsed config dictionary or None if the file is missing or invalid
    """
    if not path.exists():
        return None

    try:
        content = path.read_text()
        if path.suffix == ".jsonc":
            content = strip_jsonc_comments(content)
        data = json.loads(content)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: top level must be an object", path)
        return None
    return data


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two configuration dictionaries.

    Args:
        base: Base configuration
        override: Override configuration (takes precedence)

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _env_overrides() -> dict[str, Any]:
    chat: dict[str, Any] = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            chat[field_name] = value
    return {"chat": chat} if chat else {}


def load_config(project_root: Path | None = None, home: Path | None = None) -> Config:
    """
    Load configuration from multiple sources with precedence.

    Sources, lowest precedence first:
    1. Global: ~/.chatforge/chatforge.jsonc
    2. Project-level: chatforge.jsonc, chatforge.json, .chatforge/chatforge.jsonc
    3. Environment: CHATFORGE_DEFAULT_PROVIDER, CHATFORGE_DEFAULT_MODEL

    Args:
        project_root: Project root directory (defaults to current working directory)
        home: Home directory holding the global config (defaults to the user's home)

    Returns:
        Loaded and merged Config model
    """
    if project_root is None:
        project_root = Path.cwd()
    if home is None:
        home = Path.home()

    global_config_path = home / CONFIG_DIR_NAME / CONFIG_FILENAMES[0]
    config_data = load_config_file(global_config_path) or {}

    project_config_paths = [
        *(project_root / name for name in CONFIG_FILENAMES),
        project_root / CONFIG_DIR_NAME / CONFIG_FILENAMES[0],
    ]

    for path in project_config_paths:
        project_config = load_config_file(path)
        if project_config:
            logger.debug("Loaded project config from %s", path)
            config_data = merge_configs(config_data, project_config)
            break

    config_data = merge_configs(config_data, _env_overrides())
    return Config(**config_data)


@lru_cache(maxsize=1)
def get_config(project_root: Path | None = None) -> Config:
    """
    Get cached configuration.

    This function caches the config to avoid repeated file I/O.
    To reload the config, clear the cache with get_config.cache_clear().

    Args:
        project_root: Project root directory (defaults to current working directory)

    Returns:
        Cached Config model
    """
    root = project_root or Path.cwd()
    return load_config(root)
