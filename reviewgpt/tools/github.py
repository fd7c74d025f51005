"""GitHub API tools for the review bot."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from github import Auth, Github, GithubException, GithubIntegration

from reviewgpt.models.file_diff import ChangedFile
from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from reviewgpt.models.config import GitHubSettings

logger = get_logger("tools.github")


class GitHubToolError(Exception):
    """Error raised by GitHub tools."""

    pass


@dataclass
class CommitComparison:
    """Files and commits between two refs."""

    files: list[ChangedFile] = field(default_factory=list)
    commit_shas: list[str] = field(default_factory=list)


def _get_private_key(settings: GitHubSettings) -> str:
    """Get the GitHub App private key.

    Args:
        settings: GitHub credentials.

    Returns:
        The private key content.

    Raises:
        GitHubToolError: If private key is not configured.
    """
    if settings.private_key:
        return settings.private_key

    if settings.private_key_path:
        try:
            return Path(settings.private_key_path).read_text()
        except OSError as e:
            raise GitHubToolError(
                f"Failed to read private key from {settings.private_key_path}: {e}"
            ) from e

    raise GitHubToolError(
        "GitHub private key not configured. "
        "Set GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH environment variable."
    )


def create_github_client(installation_id: int, settings: GitHubSettings) -> Github:
    """Create an authenticated GitHub client for an installation.

    A configured ``GITHUB_TOKEN`` takes precedence over GitHub App auth.

    Args:
        installation_id: The GitHub App installation ID.
        settings: GitHub credentials.

    Returns:
        Authenticated Github client.

    Raises:
        GitHubToolError: If authentication fails.
    """
    if settings.token:
        return Github(auth=Auth.Token(settings.token))

    if not settings.app_id:
        raise GitHubToolError("GITHUB_APP_ID environment variable not set")

    private_key = _get_private_key(settings)

    try:
        auth = Auth.AppAuth(settings.app_id, private_key)
        gi = GithubIntegration(auth=auth)
        return gi.get_github_for_installation(installation_id)
    except Exception as e:
        raise GitHubToolError(f"Failed to create GitHub client: {e}") from e


def compare_commits(
    client: Github,
    repository: str,
    base: str,
    head: str,
) -> CommitComparison:
    """Compare two commits and collect the changed files.

    Args:
        client: Authenticated GitHub client.
        repository: Repository in owner/repo format.
        base: Base commit SHA.
        head: Head commit SHA.

    Returns:
        CommitComparison with files in API listing order.

    Raises:
        GitHubToolError: If the comparison cannot be fetched.
    """
    try:
        repo = client.get_repo(repository)
        comparison = repo.compare(base, head)

        files = [ChangedFile.from_github_file(f) for f in comparison.files]
        commit_shas = [commit.sha for commit in comparison.commits]

    except GithubException as e:
        if e.status == 404:
            raise GitHubToolError(f"Cannot compare {base}...{head} in {repository}") from e
        raise GitHubToolError(f"GitHub API error: {e}") from e

    logger.info(
        "Compared commits",
        extra={
            "repository": repository,
            "base": base,
            "head": head,
            "file_count": len(files),
            "commit_count": len(commit_shas),
        },
    )

    return CommitComparison(files=files, commit_shas=commit_shas)


def get_repository_variable(client: Github, repository: str, name: str) -> str | None:
    """Read a repository-level Actions variable.

    Args:
        client: Authenticated GitHub client.
        repository: Repository in owner/repo format.
        name: Variable name.

    Returns:
        The variable value, or None if it is empty.

    Raises:
        GitHubToolError: If the variable cannot be read (missing or forbidden).
    """
    try:
        repo = client.get_repo(repository)
        variable = repo.get_variable(name)
    except GithubException as e:
        raise GitHubToolError(f"Failed to read variable {name} from {repository}: {e}") from e

    return variable.value or None
