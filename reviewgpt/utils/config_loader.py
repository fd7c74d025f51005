"""Environment configuration loader."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import TYPE_CHECKING

from reviewgpt.models.config import (
    DEFAULT_MODEL,
    DEFAULT_PROMPT,
    AppConfig,
    ChatOptions,
    GitHubSettings,
    ProviderConfig,
    SelectionRules,
)
from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger("utils.config_loader")


class ConfigLoaderError(Exception):
    """Error raised when configuration loading fails."""

    pass


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build the application configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        AppConfig instance.

    Raises:
        ConfigLoaderError: If a value cannot be parsed or is out of range.
    """
    env = os.environ if environ is None else environ

    try:
        config = AppConfig(
            openai_api_key=_get_str(env, "OPENAI_API_KEY"),
            provider=ProviderConfig.resolve(
                endpoint=_get_str(env, "OPENAI_API_ENDPOINT"),
                api_version=_get_str(env, "AZURE_API_VERSION"),
                deployment=_get_str(env, "AZURE_DEPLOYMENT"),
            ),
            chat=ChatOptions(
                model=_get_str(env, "MODEL") or DEFAULT_MODEL,
                temperature=_get_float(env, "temperature", 1.0),
                top_p=_get_float(env, "top_p", 1.0),
                max_tokens=_get_int(env, "max_tokens"),
                prompt=_get_str(env, "PROMPT") or DEFAULT_PROMPT,
                language=_get_str(env, "LANGUAGE"),
            ),
            selection=SelectionRules(
                ignore_list=frozenset(split_lines(env.get("IGNORE", ""))),
                ignore_patterns=tuple(split_patterns(env.get("IGNORE_PATTERNS", ""))),
                include_patterns=tuple(split_patterns(env.get("INCLUDE_PATTERNS", ""))),
            ),
            github=GitHubSettings(
                app_id=_get_int(env, "GITHUB_APP_ID"),
                private_key=_get_str(env, "GITHUB_PRIVATE_KEY"),
                private_key_path=_get_str(env, "GITHUB_PRIVATE_KEY_PATH"),
                webhook_secret=env.get("GITHUB_WEBHOOK_SECRET", ""),
                token=_get_str(env, "GITHUB_TOKEN"),
            ),
            target_label=_get_str(env, "TARGET_LABEL"),
            max_patch_length=_get_int(env, "MAX_PATCH_LENGTH"),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
    except ValueError as e:
        raise ConfigLoaderError(f"Invalid configuration: {e}") from e

    logger.debug(
        "Loaded configuration",
        extra={
            "provider": config.provider.kind.value,
            "model": config.chat.model,
            "has_api_key": config.openai_api_key is not None,
            "include_patterns": list(config.selection.include_patterns),
            "ignore_patterns": list(config.selection.ignore_patterns),
        },
    )

    return config


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the process-wide configuration, loading it on first use."""
    return load_config()


def split_lines(value: str) -> list[str]:
    """Split a newline-separated list, dropping empty entries."""
    return [line for line in value.split("\n") if line != ""]


def split_patterns(value: str) -> list[str]:
    """Split a comma-separated pattern list, dropping blank entries."""
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


def _get_str(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    return value if value else None


def _get_int(env: Mapping[str, str], name: str) -> int | None:
    value = env.get(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e
