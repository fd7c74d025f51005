"""Selection of the changed files that should be reviewed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewgpt.filters.matcher import match_patterns
from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reviewgpt.models.config import SelectionRules
    from reviewgpt.models.file_diff import ChangedFile

logger = get_logger("filters.selector")


def should_review_file(file: ChangedFile, rules: SelectionRules) -> bool:
    """Decide whether a single changed file is kept for review.

    Paths are matched against the decoded contents URL path rather than
    ``filename``.

    Args:
        file: The changed file.
        rules: Configured include/ignore rules.

    Returns:
        True if the file should be reviewed.
    """
    path = file.content_path

    if rules.include_patterns:
        return match_patterns(rules.include_patterns, path)

    if file.filename in rules.ignore_list:
        return False

    if rules.ignore_patterns:
        return not match_patterns(rules.ignore_patterns, path)

    return True


def select_files(files: Sequence[ChangedFile], rules: SelectionRules) -> list[ChangedFile]:
    """Filter changed files down to the ones that should be reviewed.

    Args:
        files: Changed files in API listing order.
        rules: Configured include/ignore rules.

    Returns:
        The kept files, in input order. May be empty.
    """
    selected: list[ChangedFile] = []
    skipped: list[str] = []
    for file in files:
        if should_review_file(file, rules):
            selected.append(file)
        else:
            skipped.append(file.filename)

    logger.debug(
        "Selected files for review",
        extra={
            "candidate_count": len(files),
            "selected_count": len(selected),
            "skipped": skipped,
        },
    )

    return selected
