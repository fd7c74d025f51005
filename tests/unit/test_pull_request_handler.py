"""Unit tests for the pull request review pipeline."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from reviewgpt.models.config import AppConfig, SelectionRules
from reviewgpt.models.pull_request import PullRequest
from reviewgpt.models.review import ReviewVerdict
from reviewgpt.tools.comments import LGTM_COMMENT, MISSING_API_KEY_COMMENT, CommentPostError
from reviewgpt.tools.github import CommitComparison, GitHubToolError
from reviewgpt.webhook.pull_request import PullRequestEventHandler, ReviewStatus
from tests.fixtures.webhook_payloads import create_pr_payload

if TYPE_CHECKING:
    from collections.abc import Generator

    from reviewgpt.models.file_diff import ChangedFile

MODULE = "reviewgpt.webhook.pull_request"


def _pr(**kwargs: object) -> PullRequest:
    return PullRequest.from_webhook_payload(create_pr_payload(pr_number=42, **kwargs))


@pytest.fixture
def review_client() -> MagicMock:
    """Review client returning an approving verdict."""
    client = MagicMock()
    client.review.return_value = ReviewVerdict.approved()
    return client


@pytest.fixture
def factory(review_client: MagicMock) -> MagicMock:
    """Review client factory handing out ``review_client``."""
    return MagicMock(return_value=review_client)


@pytest.fixture
def mock_compare(sample_changed_files: list[ChangedFile]) -> Generator[MagicMock]:
    """Patch compare_commits to return the sample files."""
    with patch(f"{MODULE}.compare_commits") as compare:
        compare.return_value = CommitComparison(
            files=sample_changed_files, commit_shas=["1" * 40]
        )
        yield compare


@pytest.fixture
def mock_post() -> Generator[MagicMock]:
    """Patch post_issue_comment."""
    with patch(f"{MODULE}.post_issue_comment") as post:
        yield post


def _handler(
    config: AppConfig,
    github_client: MagicMock,
    factory: MagicMock,
) -> PullRequestEventHandler:
    return PullRequestEventHandler(config, github_client, review_client_factory=factory)


class TestHandle:
    """Tests for PullRequestEventHandler.handle."""

    def test_success_posts_lgtm(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,
    ) -> None:
        """Test the full path for an approving review."""
        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.SUCCESS
        factory.assert_called_once_with("sk-test", app_config.provider, app_config.chat)
        patch_text = review_client.review.call_args.args[0]
        assert "// File: src/app.ts" in patch_text
        assert "// File: lib/calc.py" in patch_text
        mock_post.assert_called_once_with(
            client=mock_github_client,
            pr_number=42,
            repository="owner/repo",
            body=LGTM_COMMENT,
        )

    def test_success_posts_review_comment(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that a non-approving verdict posts the model's comment."""
        review_client.review.return_value = ReviewVerdict(
            lgtm=False, review_comment="Quantity may be undefined."
        )

        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.SUCCESS
        assert mock_post.call_args.kwargs["body"] == "Quantity may be undefined."

    def test_opened_compares_base_and_head(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that an opened PR is compared base...head."""
        pr = _pr()

        _handler(app_config, mock_github_client, factory).handle(pr)

        mock_compare.assert_called_once_with(
            mock_github_client, "owner/repo", pr.base_sha, pr.head_sha
        )

    def test_synchronize_compares_last_commit(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        sample_changed_files: list[ChangedFile],
        mock_compare: MagicMock,
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that only the newest commit is reviewed on synchronize."""
        commits = ["1" * 40, "2" * 40, "3" * 40]
        mock_compare.side_effect = [
            CommitComparison(files=sample_changed_files, commit_shas=commits),
            CommitComparison(files=sample_changed_files[:1], commit_shas=commits[2:]),
        ]

        status = _handler(app_config, mock_github_client, factory).handle(
            _pr(action="synchronize")
        )

        assert status == ReviewStatus.SUCCESS
        assert mock_compare.call_count == 2
        assert mock_compare.call_args_list[1].args == (
            mock_github_client,
            "owner/repo",
            commits[1],
            commits[2],
        )

    def test_synchronize_with_single_commit_uses_full_range(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that a one-commit PR is not narrowed further."""
        _handler(app_config, mock_github_client, factory).handle(_pr(action="synchronize"))

        mock_compare.assert_called_once()

    def test_closed_pr_is_invalid(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,
    ) -> None:
        """Test that closed PRs are not reviewed."""
        status = _handler(app_config, mock_github_client, factory).handle(_pr(state="closed"))

        assert status == ReviewStatus.INVALID_PAYLOAD
        mock_compare.assert_not_called()
        mock_post.assert_not_called()

    def test_locked_pr_is_invalid(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that locked PRs are not reviewed."""
        status = _handler(app_config, mock_github_client, factory).handle(_pr(locked=True))

        assert status == ReviewStatus.INVALID_PAYLOAD
        mock_compare.assert_not_called()

    def test_missing_target_label(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,
    ) -> None:
        """Test that a PR without the target label is skipped."""
        config = replace(app_config, target_label="needs-review")

        status = _handler(config, mock_github_client, factory).handle(_pr(labels=["bug"]))

        assert status == ReviewStatus.NO_TARGET_LABEL
        mock_compare.assert_not_called()
        review_client.review.assert_not_called()
        mock_post.assert_not_called()

    def test_target_label_attached(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that a PR carrying the target label is reviewed."""
        config = replace(app_config, target_label="needs-review")

        status = _handler(config, mock_github_client, factory).handle(
            _pr(labels=["bug", "needs-review"])
        )

        assert status == ReviewStatus.SUCCESS

    def test_no_selected_files(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that nothing is reviewed when every file is filtered out."""
        config = replace(app_config, selection=SelectionRules(include_patterns=("*.go",)))

        status = _handler(config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHANGE
        review_client.review.assert_not_called()
        mock_post.assert_not_called()

    def test_long_patches_are_left_out(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that the patch length limit is applied before review."""
        config = replace(app_config, max_patch_length=10)

        _handler(config, mock_github_client, factory).handle(_pr())

        review_client.review.assert_called_once_with("")

    def test_review_failure_posts_nothing(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        review_client: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that a failing chat call skips the comment."""
        review_client.review.side_effect = RuntimeError("rate limited")

        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.REVIEW_FAILED
        mock_post.assert_not_called()

    def test_comment_failure_is_not_fatal(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that a failed comment post still reports success."""
        mock_post.side_effect = CommentPostError("Forbidden")

        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.SUCCESS

    def test_comment_transport_error_is_not_fatal(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that a dropped connection while commenting still reports success."""
        issue = mock_github_client.get_repo.return_value.get_issue.return_value
        issue.create_comment.side_effect = ConnectionError("Connection reset by peer")

        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.SUCCESS
        issue.create_comment.assert_called_once_with(LGTM_COMMENT)

    def test_factory_failure_is_no_chat(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that a client that cannot be built stops the pipeline."""
        factory = MagicMock(side_effect=ValueError("missing azure endpoint"))

        status = _handler(app_config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT
        mock_compare.assert_not_called()


class TestApiKeyResolution:
    """Tests for finding the chat API key."""

    def test_repository_variable_fallback(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that the repository variable is used without a configured key."""
        config = AppConfig()

        with patch(f"{MODULE}.get_repository_variable", return_value="sk-repo") as get_var:
            status = _handler(config, mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.SUCCESS
        get_var.assert_called_once_with(mock_github_client, "owner/repo", "OPENAI_API_KEY")
        assert factory.call_args.args[0] == "sk-repo"

    def test_configured_key_skips_variable_lookup(
        self,
        app_config: AppConfig,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that the process key wins over the repository variable."""
        with patch(f"{MODULE}.get_repository_variable") as get_var:
            _handler(app_config, mock_github_client, factory).handle(_pr())

        get_var.assert_not_called()

    def test_missing_key_posts_guidance(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,
    ) -> None:
        """Test that an unreadable variable posts the setup comment."""
        with patch(
            f"{MODULE}.get_repository_variable",
            side_effect=GitHubToolError("Not Found"),
        ):
            status = _handler(AppConfig(), mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT
        factory.assert_not_called()
        mock_compare.assert_not_called()
        mock_post.assert_called_once_with(
            client=mock_github_client,
            pr_number=42,
            repository="owner/repo",
            body=MISSING_API_KEY_COMMENT,
        )

    def test_guidance_comment_failure_is_not_fatal(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that failing to post the setup comment still ends in no chat."""
        mock_post.side_effect = CommentPostError("Forbidden")

        with patch(
            f"{MODULE}.get_repository_variable",
            side_effect=GitHubToolError("Not Found"),
        ):
            status = _handler(AppConfig(), mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT

    def test_empty_variable_is_no_chat(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
        mock_post: MagicMock,
    ) -> None:
        """Test that an empty variable stops without a comment."""
        with patch(f"{MODULE}.get_repository_variable", return_value=None):
            status = _handler(AppConfig(), mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT
        mock_post.assert_not_called()

    def test_variable_transport_error_posts_guidance(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,
        mock_post: MagicMock,
    ) -> None:
        """Test that a network failure reading the variable posts the setup comment."""
        mock_github_client.get_repo.side_effect = ConnectionError("Name resolution failed")

        status = _handler(AppConfig(), mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT
        factory.assert_not_called()
        mock_compare.assert_not_called()
        mock_post.assert_called_once_with(
            client=mock_github_client,
            pr_number=42,
            repository="owner/repo",
            body=MISSING_API_KEY_COMMENT,
        )

    def test_guidance_comment_transport_error_is_no_chat(
        self,
        mock_github_client: MagicMock,
        factory: MagicMock,
        mock_compare: MagicMock,  # noqa: ARG002
    ) -> None:
        """Test that a dropped connection on both GitHub calls still ends in no chat."""
        mock_github_client.get_repo.side_effect = ConnectionError("Connection reset by peer")

        status = _handler(AppConfig(), mock_github_client, factory).handle(_pr())

        assert status == ReviewStatus.NO_CHAT
        assert mock_github_client.get_repo.call_count == 2
