"""
Entity Extraction Heuristics
Best-effort scan for suspect names and evidence mentions in report text
"""

import logging
import re
from typing import List, Optional, Pattern, Tuple

from casework.rules import ExtractionRules
from casework.text_normalizer import compile_phrase

logger = logging.getLogger(__name__)

# Capitalized word, allowing O'Brien / Smith-Jones
NAME = r"[A-Z][a-z]+(?:['-][A-Za-z]+)?"
MAX_EVIDENCE_WORDS = 6
EVIDENCE_WORD = r"[^\s.,;:!?]+"


def _alternation(phrases) -> str:
    return "|".join(r"\s+".join(re.escape(word) for word in p.split()) for p in phrases)


class EntityExtractor:
    """Extracts suspect-like and evidence-like mentions. Never raises."""

    def __init__(self, rules: ExtractionRules):
        self.name_stopwords = frozenset(rules.name_stopwords)
        self.evidence_stopwords = frozenset(w.lower() for w in rules.evidence_stopwords)

        self._suspect_after: Optional[Pattern] = None
        if rules.suspect_triggers:
            self._suspect_after = re.compile(
                r"(?i:(?<!\w)(?:" + _alternation(rules.suspect_triggers) + r"))"
                r"(?:\s+(?i:is|was))?[:,]?\s+"
                r"(" + NAME + r"(?:\s+" + NAME + r")?)"
            )

        self._suspect_before: Optional[Pattern] = None
        if rules.suspect_actions:
            self._suspect_before = re.compile(
                r"(?<!\w)(" + NAME + r"\s+" + NAME + r")\s+"
                r"(?i:(?:" + _alternation(rules.suspect_actions) + r"))(?!\w)"
            )

        self._evidence_after: Optional[Pattern] = None
        if rules.evidence_triggers:
            # Capture at most MAX_EVIDENCE_WORDS words up to the next punctuation
            self._evidence_after = re.compile(
                r"(?i:(?<!\w)(?:" + _alternation(rules.evidence_triggers) + r")(?!\w))"
                rf"\s+(?=({EVIDENCE_WORD}(?:[^\S\n]+{EVIDENCE_WORD}){{0,{MAX_EVIDENCE_WORDS - 1}}}))"
            )

        self._evidence_terms: Tuple[Pattern, ...] = tuple(compile_phrase(t) for t in rules.evidence_terms)

    def extract_entities(self, text: str) -> Tuple[List[str], List[str]]:
        """
        Scan original-cased text for suspects and evidence

        Returns:
            Tuple of (suspects, evidence); both empty when nothing plausible is found
        """
        if not text:
            return [], []
        try:
            return self._extract_suspects(text), self._extract_evidence(text)
        except Exception as e:
            logger.warning("Entity extraction failed, returning no entities: %s", e)
            return [], []

    def _clean_name(self, candidate: str) -> Optional[str]:
        tokens = candidate.split()
        while tokens and tokens[0] in self.name_stopwords:
            tokens.pop(0)
        for i, token in enumerate(tokens):
            if token in self.name_stopwords:
                tokens = tokens[:i]
                break
        return " ".join(tokens) or None

    def _extract_suspects(self, text: str) -> List[str]:
        found = []
        for pattern in (self._suspect_after, self._suspect_before):
            if pattern is None:
                continue
            for match in pattern.finditer(text):
                name = self._clean_name(match.group(1))
                if name:
                    found.append((match.start(1), name))

        return _first_seen(found)

    def _clean_phrase(self, phrase: str) -> Optional[str]:
        words = []
        for word in phrase.split():
            if word.lower() in self.evidence_stopwords or len(words) >= MAX_EVIDENCE_WORDS:
                break
            words.append(word)
        return " ".join(words) or None

    def _extract_evidence(self, text: str) -> List[str]:
        found = []
        spans = []
        if self._evidence_after is not None:
            for match in self._evidence_after.finditer(text):
                phrase = self._clean_phrase(match.group(1))
                if phrase:
                    found.append((match.start(1), phrase))
                    spans.append((match.start(1), match.start(1) + len(phrase)))

        for pattern in self._evidence_terms:
            for match in pattern.finditer(text):
                # Skip terms already covered by a captured phrase
                if any(start <= match.start() and match.end() <= end for start, end in spans):
                    continue
                found.append((match.start(), match.group(0)))

        return _first_seen(found)


def _first_seen(found) -> List[str]:
    """Order by position in the text, dropping case-insensitive duplicates"""
    result = []
    seen = set()
    for _, value in sorted(found, key=lambda item: item[0]):
        key = value.lower()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result
