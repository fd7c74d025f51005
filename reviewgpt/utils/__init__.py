"""Utility modules for reviewgpt."""

from reviewgpt.utils.config_loader import ConfigLoaderError, get_config, load_config
from reviewgpt.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "ConfigLoaderError",
    "JsonFormatter",
    "configure_logging",
    "get_config",
    "get_logger",
    "load_config",
]
