"""Review client backed by an OpenAI-compatible chat completion API."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from openai import AzureOpenAI, OpenAI

from reviewgpt.agent.prompts import build_review_prompt
from reviewgpt.models.config import DEFAULT_OPENAI_ENDPOINT
from reviewgpt.models.review import ReviewVerdict
from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from reviewgpt.models.config import ChatOptions, ProviderConfig

logger = get_logger("agent.reviewer")


def create_chat_client(provider: ProviderConfig, api_key: str) -> OpenAI:
    """Create the SDK client for the configured provider variant.

    Args:
        provider: Resolved provider configuration.
        api_key: API key for the provider.

    Returns:
        An ``OpenAI`` or ``AzureOpenAI`` client.
    """
    if provider.is_azure:
        return AzureOpenAI(
            api_key=api_key,
            azure_endpoint=provider.endpoint,
            api_version=provider.api_version,
            azure_deployment=provider.deployment,
        )

    return OpenAI(api_key=api_key, base_url=provider.endpoint or DEFAULT_OPENAI_ENDPOINT)


class ReviewClient:
    """Asks a chat model to review a patch and returns its verdict."""

    def __init__(
        self,
        api_key: str,
        provider: ProviderConfig,
        options: ChatOptions,
        client: OpenAI | None = None,
    ) -> None:
        """Initialize the review client.

        Args:
            api_key: API key for the chat provider.
            provider: Which provider variant to talk to.
            options: Model parameters and prompt settings.
            client: Pre-built SDK client, mostly for tests.
        """
        self.provider = provider
        self.options = options
        self.client = client if client is not None else create_chat_client(provider, api_key)

        logger.info(
            "ReviewClient initialized",
            extra={
                "provider": provider.kind.value,
                "model": options.model,
            },
        )

    def _completion_params(self, prompt: str) -> dict[str, Any]:
        params: dict[str, Any] = {
            "messages": [{"role": "user", "content": prompt}],
            "model": self.options.model,
            "temperature": self.options.temperature,
            "top_p": self.options.top_p,
            "response_format": {"type": "json_object"},
        }
        if self.options.max_tokens is not None:
            params["max_tokens"] = self.options.max_tokens
        return params

    def review(self, patch: str) -> ReviewVerdict:
        """Review a patch.

        An empty patch is approved without calling the model. A response that
        is not the expected JSON object is returned as a non-approving verdict
        carrying the raw text.

        Args:
            patch: The assembled patch.

        Returns:
            The model's verdict.

        Raises:
            openai.OpenAIError: If the chat completion call itself fails.
        """
        if not patch:
            return ReviewVerdict.approved()

        prompt = build_review_prompt(
            patch,
            instruction=self.options.prompt,
            language=self.options.language,
        )

        started = time.perf_counter()
        response = self.client.chat.completions.create(**self._completion_params(prompt))

        logger.info(
            "Code review completed",
            extra={
                "model": self.options.model,
                "patch_length": len(patch),
                "choice_count": len(response.choices),
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )

        if not response.choices:
            return ReviewVerdict.approved()

        content = response.choices[0].message.content or ""

        try:
            return ReviewVerdict.from_json(content)
        except ValueError as e:
            logger.warning(
                "Could not parse review response, returning raw text",
                extra={"error": str(e), "content_length": len(content)},
            )
            return ReviewVerdict.needs_attention(content)
