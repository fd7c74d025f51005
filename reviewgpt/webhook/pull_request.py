"""Pull request event handling: fetch the diff, review it, post the verdict."""

from __future__ import annotations

import time
from enum import Enum
from typing import TYPE_CHECKING

from reviewgpt.agent.reviewer import ReviewClient
from reviewgpt.filters.selector import select_files
from reviewgpt.models.config import OPENAI_API_KEY_VARIABLE
from reviewgpt.tools.comments import (
    MISSING_API_KEY_COMMENT,
    comment_body_for,
    post_issue_comment,
)
from reviewgpt.tools.diff import assemble_patch
from reviewgpt.tools.github import compare_commits, get_repository_variable
from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from github import Github

    from reviewgpt.models.config import AppConfig, ChatOptions, ProviderConfig
    from reviewgpt.models.file_diff import ChangedFile
    from reviewgpt.models.pull_request import PullRequest

    ReviewClientFactory = Callable[[str, ProviderConfig, ChatOptions], ReviewClient]

logger = get_logger("webhook.pull_request")


class ReviewStatus(str, Enum):
    """Outcome of handling one pull request event."""

    NO_CHAT = "no chat"
    INVALID_PAYLOAD = "invalid event payload"
    NO_TARGET_LABEL = "no target label attached"
    NO_CHANGE = "no change"
    REVIEW_FAILED = "review failed"
    SUCCESS = "success"


class PullRequestEventHandler:
    """Reviews a pull request when it is opened or receives new commits."""

    def __init__(
        self,
        config: AppConfig,
        github_client: Github,
        review_client_factory: ReviewClientFactory = ReviewClient,
    ) -> None:
        """Initialize the handler.

        Args:
            config: Application configuration.
            github_client: Client authenticated for the PR's installation.
            review_client_factory: Builds the review client from the resolved
                API key, provider and chat options.
        """
        self.config = config
        self.github = github_client
        self.review_client_factory = review_client_factory

    def handle(self, pr: PullRequest) -> ReviewStatus:  # noqa: PLR0911
        """Run the review pipeline for a pull request event.

        Args:
            pr: The pull request from the webhook payload.

        Returns:
            ReviewStatus describing how far the pipeline got.
        """
        started = time.perf_counter()

        review_client = self._load_review_client(pr)
        if review_client is None:
            logger.info("Chat initialization failed", extra={"pr_number": pr.number})
            return ReviewStatus.NO_CHAT

        if pr.is_closed:
            logger.info(
                "Invalid event payload",
                extra={"pr_number": pr.number, "state": pr.state, "locked": pr.locked},
            )
            return ReviewStatus.INVALID_PAYLOAD

        target_label = self.config.target_label
        if target_label and not pr.has_label(target_label):
            logger.info(
                "No target label attached",
                extra={"pr_number": pr.number, "target_label": target_label},
            )
            return ReviewStatus.NO_TARGET_LABEL

        changed_files = select_files(self._fetch_changed_files(pr), self.config.selection)
        if not changed_files:
            logger.info("No change found", extra={"pr_number": pr.number})
            return ReviewStatus.NO_CHANGE

        patch = assemble_patch(changed_files, self.config.max_patch_length)

        try:
            verdict = review_client.review(patch)
        except Exception as e:
            logger.error(
                "Review failed",
                extra={"pr_number": pr.number, "repository": pr.repository, "error": str(e)},
            )
            return ReviewStatus.REVIEW_FAILED

        try:
            post_issue_comment(
                client=self.github,
                pr_number=pr.number,
                repository=pr.repository,
                body=comment_body_for(verdict),
            )
        except Exception as e:
            logger.error(
                "Failed to create PR comment",
                extra={"pr_number": pr.number, "repository": pr.repository, "error": str(e)},
            )

        logger.info(
            "Successfully reviewed",
            extra={
                "html_url": pr.html_url,
                "lgtm": verdict.lgtm,
                "file_count": len(changed_files),
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )
        return ReviewStatus.SUCCESS

    def _resolve_api_key(self, pr: PullRequest) -> str | None:
        """Find the chat API key, falling back to the repository variable.

        Posts a guidance comment when the variable cannot be read.
        """
        if self.config.openai_api_key:
            return self.config.openai_api_key

        try:
            return get_repository_variable(self.github, pr.repository, OPENAI_API_KEY_VARIABLE)
        except Exception as e:
            logger.warning(
                "OPENAI_API_KEY not available",
                extra={"repository": pr.repository, "error": str(e)},
            )

        try:
            post_issue_comment(
                client=self.github,
                pr_number=pr.number,
                repository=pr.repository,
                body=MISSING_API_KEY_COMMENT,
            )
        except Exception as e:
            logger.error("Failed to post configuration comment", extra={"error": str(e)})

        return None

    def _load_review_client(self, pr: PullRequest) -> ReviewClient | None:
        api_key = self._resolve_api_key(pr)
        if api_key is None:
            return None

        try:
            return self.review_client_factory(
                api_key,
                self.config.provider,
                self.config.chat,
            )
        except Exception as e:
            logger.error("Failed to create review client", extra={"error": str(e)})
            return None

    def _fetch_changed_files(self, pr: PullRequest) -> list[ChangedFile]:
        """Fetch the files to consider for review.

        On ``synchronize`` only the last pushed commit is compared against
        its parent, so earlier commits are not reviewed again.
        """
        comparison = compare_commits(self.github, pr.repository, pr.base_sha, pr.head_sha)

        if pr.is_update and len(comparison.commit_shas) >= 2:
            base, head = comparison.commit_shas[-2], comparison.commit_shas[-1]
            logger.debug(
                "Narrowing diff to last commit",
                extra={"pr_number": pr.number, "base": base, "head": head},
            )
            return compare_commits(self.github, pr.repository, base, head).files

        return comparison.files
