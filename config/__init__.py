"""
Configuration module for the chat server.

Exports the main configuration classes and functions for use throughout the application.
"""

from .chat_config import ChatSettings
from .defaults import DEFAULT_MODEL, DEFAULT_PROVIDER, WORK_DIR
from .loader import get_config, load_config, load_config_file, merge_configs, strip_jsonc_comments
from .main_config import Config
from .providers import (
    ModelInfo,
    ModelProvider,
    ProviderCatalog,
    ProviderInfo,
    get_provider_catalog,
    reset_provider_catalog,
    set_provider_catalog,
)

__all__ = [
    # Constants
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "WORK_DIR",
    # Config models
    "Config",
    "ChatSettings",
    # Loader functions
    "load_config",
    "get_config",
    "load_config_file",
    "merge_configs",
    "strip_jsonc_comments",
    # Provider catalog
    "ModelInfo",
    "ModelProvider",
    "ProviderInfo",
    "ProviderCatalog",
    "get_provider_catalog",
    "set_provider_catalog",
    "reset_provider_catalog",
]
