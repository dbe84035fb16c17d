"""Turn raw candidate phrases into the bounded suggestion list."""

from __future__ import annotations

import re
from collections.abc import Iterable

DEFAULT_LOOKUP_RESULTS_LIMIT = 7


def extract_current_word(candidate: str, pattern: re.Pattern[str]) -> str | None:
    match = pattern.match(candidate)
    if match is None:
        return None
    return match.group("word")


def dedupe_case_insensitive(values: Iterable[str]) -> list[str]:
    """Keep the first occurrence of each value, ignoring case."""
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def rank_suggestions(
    candidates: Iterable[str],
    pattern: re.Pattern[str],
    limit: int = DEFAULT_LOOKUP_RESULTS_LIMIT,
) -> list[str]:
    """Extract, deduplicate and bound candidates, preserving their order.

    Candidates the pattern does not match are dropped. No re-sorting happens:
    callers pass full-phrase results ahead of last-word results.
    """
    if limit <= 0:
        return []
    extracted = (extract_current_word(candidate, pattern) for candidate in candidates)
    return dedupe_case_insensitive(word for word in extracted if word is not None)[:limit]
