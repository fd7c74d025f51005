"""Pull request model."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any


@dataclass
class PullRequest:
    """Represents a GitHub pull request event being reviewed."""

    number: int
    title: str
    state: str
    base_sha: str
    head_sha: str
    repository: str
    installation_id: int
    html_url: str
    action: str = "opened"
    locked: bool = False
    labels: list[str] = field(default_factory=list)

    # Validation patterns
    REPO_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+/[a-zA-Z0-9_.-]+$")
    SHA_PATTERN = re.compile(r"^[a-f0-9]{40}$")

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")

        if not self.REPO_PATTERN.match(self.repository):
            raise ValueError(
                f"Invalid repository format: {self.repository}. Expected format: owner/repo"
            )

        for name, sha in (("base", self.base_sha), ("head", self.head_sha)):
            if not self.SHA_PATTERN.match(sha):
                raise ValueError(
                    f"Invalid {name} SHA format: {sha}. Expected 40-character hex string"
                )

        if self.installation_id <= 0:
            raise ValueError(f"Installation ID must be positive, got {self.installation_id}")

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> PullRequest:
        """Create a PullRequest from a GitHub webhook payload.

        Args:
            payload: The webhook payload containing pull_request data.

        Returns:
            PullRequest instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        pr = payload["pull_request"]
        return cls(
            number=payload["number"],
            title=pr["title"],
            state=pr["state"],
            locked=bool(pr.get("locked", False)),
            labels=[label["name"] for label in pr.get("labels") or [] if label.get("name")],
            base_sha=pr["base"]["sha"],
            head_sha=pr["head"]["sha"],
            repository=payload["repository"]["full_name"],
            installation_id=payload["installation"]["id"],
            html_url=pr["html_url"],
            action=payload.get("action", "opened"),
        )

    @property
    def is_closed(self) -> bool:
        """Closed or locked pull requests are never reviewed."""
        return self.state == "closed" or self.locked

    @property
    def is_update(self) -> bool:
        """Check if the event was caused by new commits being pushed."""
        return self.action == "synchronize"

    def has_label(self, name: str) -> bool:
        """Check if a label with the given name is attached."""
        return name in self.labels
