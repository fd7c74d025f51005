"""Configuration models for reviewgpt."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_OPENAI_ENDPOINT = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_PROMPT = (
    "Please review the following code patch. "
    "Focus on potential bugs, risks, and improvement suggestions."
)

# Name of the repository variable holding the API key
OPENAI_API_KEY_VARIABLE = "OPENAI_API_KEY"


class ProviderKind(str, Enum):
    """Chat completion provider variant."""

    OPENAI = "openai"
    AZURE = "azure"


@dataclass(frozen=True)
class ProviderConfig:
    """Which chat completion endpoint to talk to.

    Resolved once at startup; the Azure variant is selected only when both
    the deployment name and the API version are configured.
    """

    kind: ProviderKind = ProviderKind.OPENAI
    endpoint: str | None = None
    api_version: str | None = None
    deployment: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.kind == ProviderKind.AZURE and not (self.api_version and self.deployment):
            raise ValueError("Azure provider requires both api_version and deployment")

    @classmethod
    def resolve(
        cls,
        endpoint: str | None = None,
        api_version: str | None = None,
        deployment: str | None = None,
    ) -> ProviderConfig:
        """Pick the provider variant from the configured values."""
        if api_version and deployment:
            return cls(
                kind=ProviderKind.AZURE,
                endpoint=endpoint or None,
                api_version=api_version,
                deployment=deployment,
            )
        return cls(kind=ProviderKind.OPENAI, endpoint=endpoint or DEFAULT_OPENAI_ENDPOINT)

    @property
    def is_azure(self) -> bool:
        """Check if the Azure variant is selected."""
        return self.kind == ProviderKind.AZURE


@dataclass(frozen=True)
class ChatOptions:
    """Parameters of the chat completion call and the review prompt."""

    model: str = DEFAULT_MODEL
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int | None = None
    prompt: str = DEFAULT_PROMPT
    language: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.model:
            raise ValueError("model cannot be empty")

        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be between 0.0 and 2.0, got {self.temperature}")

        if not 0.0 <= self.top_p <= 1.0:
            raise ValueError(f"top_p must be between 0.0 and 1.0, got {self.top_p}")

        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


@dataclass(frozen=True)
class SelectionRules:
    """Include/ignore rules deciding which changed files get reviewed.

    A non-empty ``include_patterns`` is authoritative and the ignore rules
    are not consulted. Otherwise ``ignore_list`` (exact filenames) wins over
    ``ignore_patterns``.
    """

    ignore_list: frozenset[str] = frozenset()
    ignore_patterns: tuple[str, ...] = ()
    include_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class GitHubSettings:
    """Credentials for talking to GitHub."""

    app_id: int | None = None
    private_key: str | None = None
    private_key_path: str | None = None
    webhook_secret: str = ""
    token: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Process-wide configuration, captured once at startup."""

    openai_api_key: str | None = None
    provider: ProviderConfig = field(default_factory=ProviderConfig.resolve)
    chat: ChatOptions = field(default_factory=ChatOptions)
    selection: SelectionRules = field(default_factory=SelectionRules)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    target_label: str | None = None
    max_patch_length: int | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_patch_length is not None and self.max_patch_length < 0:
            raise ValueError(
                f"max_patch_length must be non-negative, got {self.max_patch_length}"
            )
