"""Changed file model."""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import unquote, urlparse


class FileStatus(str, Enum):
    """Status of a file in a commit comparison."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


# Only these statuses carry a line-level diff worth reviewing
REVIEWABLE_STATUSES = frozenset({FileStatus.ADDED, FileStatus.MODIFIED})


@dataclass(frozen=True)
class ChangedFile:
    """A single file's changes between two commits."""

    filename: str
    status: FileStatus
    contents_url: str
    patch: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.filename:
            raise ValueError("filename cannot be empty")

        # Normalize status to FileStatus enum if string
        if not isinstance(self.status, FileStatus):
            object.__setattr__(self, "status", FileStatus(self.status))

    @property
    def content_path(self) -> str:
        """Percent-decoded path component of the contents URL.

        The API encodes characters in ``contents_url`` differently than in
        ``filename``, so path-based filters match against this value.
        """
        return unquote(urlparse(self.contents_url).path)

    @property
    def is_reviewable(self) -> bool:
        """Check if the file status carries a reviewable diff."""
        return self.status in REVIEWABLE_STATUSES

    @classmethod
    def from_github_file(cls, file: Any) -> "ChangedFile":
        """Create a ChangedFile from a PyGithub ``File`` or an API dict.

        Args:
            file: File object from a commit comparison, or its raw JSON.

        Returns:
            ChangedFile instance.
        """
        if isinstance(file, dict):
            return cls(
                filename=file["filename"],
                status=FileStatus(file["status"]),
                contents_url=file.get("contents_url", ""),
                patch=file.get("patch"),
            )

        return cls(
            filename=file.filename,
            status=FileStatus(file.status),
            contents_url=file.contents_url or "",
            patch=getattr(file, "patch", None),
        )
