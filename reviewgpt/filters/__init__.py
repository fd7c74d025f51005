"""Include/ignore filtering of changed files."""

from reviewgpt.filters.matcher import match_patterns
from reviewgpt.filters.selector import select_files, should_review_file

__all__ = ["match_patterns", "select_files", "should_review_file"]
