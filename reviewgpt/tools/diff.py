"""Assembly of per-file patches into a single reviewable diff."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reviewgpt.models.file_diff import ChangedFile

logger = get_logger("tools.diff")

FILE_HEADER_TEMPLATE = "\n\n// File: {filename}\n{patch}"


def format_file_patch(filename: str, patch: str) -> str:
    """Render one file's patch with its filename header."""
    return FILE_HEADER_TEMPLATE.format(filename=filename, patch=patch)


def skip_reason(file: ChangedFile, max_patch_length: int | None = None) -> str | None:
    """Explain why a file's patch is left out of the review, if it is.

    Args:
        file: The changed file.
        max_patch_length: Longest patch accepted; ``None`` means no limit.

    Returns:
        A short reason, or None if the patch should be included.
    """
    if not file.is_reviewable:
        return f"status {file.status.value}"

    if not file.patch:
        return "no patch"

    if max_patch_length is not None and len(file.patch) > max_patch_length:
        return "patch too long"

    return None


def assemble_patch(files: Sequence[ChangedFile], max_patch_length: int | None = None) -> str:
    """Concatenate the patches of the given files.

    Only added and modified files with a non-empty patch no longer than
    ``max_patch_length`` contribute; longer patches are dropped whole, never
    truncated. Input order is preserved.

    Args:
        files: Selected changed files.
        max_patch_length: Longest patch accepted; ``None`` means no limit.

    Returns:
        The combined patch. An empty string means there is nothing to review.
    """
    chunks: list[str] = []

    for file in files:
        reason = skip_reason(file, max_patch_length)
        if reason is None and file.patch:
            chunks.append(format_file_patch(file.filename, file.patch))
            continue

        logger.debug(
            "Leaving file out of patch",
            extra={"file_path": file.filename, "reason": reason},
        )

    return "".join(chunks)
