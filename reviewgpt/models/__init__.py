"""Data models for reviewgpt."""

from reviewgpt.models.config import (
    DEFAULT_MODEL,
    DEFAULT_PROMPT,
    AppConfig,
    ChatOptions,
    GitHubSettings,
    ProviderConfig,
    ProviderKind,
    SelectionRules,
)
from reviewgpt.models.file_diff import ChangedFile, FileStatus
from reviewgpt.models.pull_request import PullRequest
from reviewgpt.models.review import ReviewVerdict

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_PROMPT",
    "AppConfig",
    "ChangedFile",
    "ChatOptions",
    "FileStatus",
    "GitHubSettings",
    "ProviderConfig",
    "ProviderKind",
    "PullRequest",
    "ReviewVerdict",
    "SelectionRules",
]
