"""Split raw search input into the phrase and word lookups are keyed on."""

from __future__ import annotations

import re
from dataclasses import dataclass

WORD_RE = re.compile(r"\S+")
LAST_WORD_RE = re.compile(r"\S+$")


def build_word_boundary_pattern(word_count: int) -> re.Pattern[str]:
    """Return a matcher isolating the ``word_count``-th word of a candidate.

    The ``prefix`` group holds the words already typed, ``word`` holds the
    completion of the word currently being typed.
    """
    if word_count < 1:
        raise ValueError("word_count must be at least 1")
    leading = word_count - 1
    return re.compile(rf"^(?P<prefix>(?:\S+\s+){{{leading}}})(?P<word>\S+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class InputSegments:
    raw: str
    full_phrase: str
    words: tuple[str, ...]
    last_word: str | None
    word_boundary_pattern: re.Pattern[str]

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def needs_last_word_lookup(self) -> bool:
        return self.word_count > 1 and self.last_word is not None and self.last_word != self.full_phrase

    def substitute_last_word(self, text: str) -> str:
        """Put ``text`` in place of the final word of the phrase."""
        return LAST_WORD_RE.sub(lambda _: text, self.full_phrase, count=1)


def segment_input(raw: str) -> InputSegments | None:
    """Segment ``raw`` input; ``None`` means there is nothing to look up."""
    full_phrase = raw.strip()
    if not full_phrase:
        return None
    words = tuple(WORD_RE.findall(full_phrase))
    return InputSegments(
        raw=raw,
        full_phrase=full_phrase,
        words=words,
        last_word=words[-1] if len(words) > 1 else None,
        word_boundary_pattern=build_word_boundary_pattern(len(words)),
    )
