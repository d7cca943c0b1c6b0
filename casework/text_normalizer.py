"""
Text normalization utilities for incident reports.

Goals:
- Remove dangerous control characters.
- Strip simple HTML tags, leaving "<" and ">" in prose alone.
- Collapse whitespace so matching is stable under spacing.
- Keep the original casing around for name-like extraction.
"""

import re
from dataclasses import dataclass
from typing import Pattern


@dataclass(frozen=True)
class NormalizedText:
    """Searchable form of a report, alongside the text it came from"""

    original: str
    text: str
    lowered: str

    def contains(self, pattern: Pattern) -> bool:
        return pattern.search(self.lowered) is not None

    @property
    def is_empty(self) -> bool:
        return not self.lowered


class TextNormalizer:
    """Normalizes free-text reports before rule matching."""

    def __init__(self):
        # Simple regexes compiled once
        self._html_tag_re = re.compile(r"</?[A-Za-z][A-Za-z0-9-]*(?:\s[^<>]*)?/?>")
        # Whitespace controls (\x0b, \x0c, \x1c-\x1f) are left for the whitespace pass
        self._control_re = re.compile(r"[\x00-\x08\x0E-\x1B\x7F]")
        self._space_re = re.compile(r"\s+")

    def normalize(self, text: str) -> NormalizedText:
        """Return the cleaned and lower-cased forms of the input text."""
        if not text:
            return NormalizedText(original=text or "", text="", lowered="")

        cleaned = self._control_re.sub("", text)

        # Strip simple HTML tags like <b>, <br/>, etc.
        cleaned = self._html_tag_re.sub(" ", cleaned)

        # Normalize whitespace (including multiple newlines)
        cleaned = self._space_re.sub(" ", cleaned).strip()

        return NormalizedText(original=text, text=cleaned, lowered=cleaned.lower())


def compile_phrase(phrase: str) -> Pattern:
    """
    Build a word-boundary pattern for a trigger phrase.

    Whitespace inside the phrase matches any whitespace run. A trailing ``*``
    turns the last word into a prefix, so ``deteriorat*`` matches
    "deteriorating" and "deteriorated".
    """
    phrase = phrase.strip().lower()
    prefix = phrase.endswith("*")
    if prefix:
        phrase = phrase[:-1].rstrip()
    if not phrase:
        raise ValueError("Trigger phrase must not be empty")

    body = r"\s+".join(re.escape(word) for word in phrase.split())
    tail = r"\w*" if prefix else ""
    return re.compile(r"(?<!\w)" + body + tail + r"(?!\w)", re.IGNORECASE)
