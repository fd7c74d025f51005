"""Path pattern matching for include/ignore filters.

Each pattern is tried against a path with an ordered list of strategies.
A strategy answers ``True``/``False`` when it understands the pattern and
``None`` when it does not, in which case the next strategy gets a turn.
A pattern no strategy understands simply does not match.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

from reviewgpt.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    MatchStrategy = Callable[[str, str], bool | None]

logger = get_logger("filters.matcher")


class GlobSyntaxError(ValueError):
    """Raised when a glob pattern cannot be translated."""

    pass


def normalize_pattern(pattern: str) -> str:
    """Anchor a pattern so it can match at any directory depth.

    ``/src/*.ts`` becomes ``**/src/*.ts``, ``**/x`` is kept as is and
    ``*.md`` becomes ``**/*.md``.
    """
    if pattern.startswith("/"):
        return "**" + pattern
    if pattern.startswith("**"):
        return pattern
    return "**/" + pattern


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob pattern into a compiled regular expression.

    ``**`` crosses directory boundaries (``**/`` may also match nothing),
    ``*`` and ``?`` stay inside a single path segment, and ``[...]`` /
    ``[!...]`` are character classes.

    Raises:
        GlobSyntaxError: If the pattern is empty or has an unterminated
            character class.
    """
    if not pattern:
        raise GlobSyntaxError("Empty glob pattern")

    parts: list[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if char == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    i += 1
                    parts.append("(?:.*/)?")
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")

        elif char == "?":
            parts.append("[^/]")

        elif char == "[":
            start = i + 1
            if start < n and pattern[start] == "!":
                start += 1
            if start < n and pattern[start] == "]":
                start += 1
            end = pattern.find("]", start)
            if end == -1:
                raise GlobSyntaxError(f"Unterminated character class in {pattern!r}")
            body = pattern[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body.replace("\\", "\\\\") + "]")
            i = end

        else:
            parts.append(re.escape(char))

        i += 1

    try:
        return re.compile("".join(parts) + r"\Z", re.DOTALL)
    except (re.error, OverflowError) as e:
        raise GlobSyntaxError(f"Invalid glob pattern {pattern!r}: {e}") from e


def match_glob(pattern: str, path: str) -> bool | None:
    """Glob strategy. Declines malformed globs."""
    try:
        regex = glob_to_regex(normalize_pattern(pattern))
    except GlobSyntaxError:
        return None
    return regex.match(path) is not None


def match_regex(pattern: str, path: str) -> bool | None:
    """Regular expression strategy. Declines patterns that fail to compile."""
    try:
        return re.search(pattern, path) is not None
    except (re.error, OverflowError):
        return None


DEFAULT_STRATEGIES: tuple[MatchStrategy, ...] = (match_glob, match_regex)


def match_pattern(
    pattern: str,
    path: str,
    strategies: Sequence[MatchStrategy] = DEFAULT_STRATEGIES,
) -> bool:
    """Match a single pattern, using the first strategy that accepts it."""
    for strategy in strategies:
        result = strategy(pattern, path)
        if result is not None:
            return result

    logger.debug("Pattern not understood by any strategy", extra={"pattern": pattern})
    return False


def match_patterns(patterns: Sequence[str], path: str) -> bool:
    """Check whether any of the patterns matches the path.

    Args:
        patterns: Glob or regular expression patterns.
        path: Path to test, e.g. ``/repos/owner/repo/contents/src/app.ts``.

    Returns:
        True if at least one pattern matches. Never raises on bad patterns.
    """
    return any(match_pattern(pattern, path) for pattern in patterns)
