"""Comment posting tools for the review bot."""

from __future__ import annotations

from typing import TYPE_CHECKING

from github import Github, GithubException

from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from reviewgpt.models.review import ReviewVerdict

logger = get_logger("tools.comments")

LGTM_COMMENT = "LGTM 👍"

MISSING_API_KEY_COMMENT = (
    "Seems you are using me but didn't get OPENAI_API_KEY set in Variables/Secrets "
    "for this repo. You could follow [readme](https://github.com/anc95/ChatGPT-CodeReview) "
    "for more information."
)


class CommentPostError(Exception):
    """Error raised when comment posting fails."""

    pass


def comment_body_for(verdict: ReviewVerdict) -> str:
    """Choose the comment text for a review verdict.

    The model's comment is used only when it withholds approval and actually
    says something; everything else is posted as the LGTM sentinel.
    """
    if verdict.requests_changes:
        return verdict.review_comment
    return LGTM_COMMENT


def post_issue_comment(
    client: Github,
    pr_number: int,
    repository: str,
    body: str,
) -> None:
    """Post a comment on a pull request's conversation thread.

    Args:
        client: Authenticated GitHub client.
        pr_number: Pull request number.
        repository: Repository in owner/repo format.
        body: Comment text (supports markdown).

    Raises:
        CommentPostError: If comment cannot be posted.
    """
    try:
        repo = client.get_repo(repository)
        issue = repo.get_issue(pr_number)
        comment = issue.create_comment(body)

    except GithubException as e:
        raise CommentPostError(f"Failed to post comment on #{pr_number}: {e}") from e

    logger.info(
        "Posted comment",
        extra={
            "pr_number": pr_number,
            "repository": repository,
            "comment_id": comment.id,
        },
    )
