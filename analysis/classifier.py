"""
Case Type Classifier
Scores incident text against the weighted trigger tables of each case type
"""

import logging
from typing import Dict, Pattern, Tuple

from casework.models import PriorityLevel
from casework.rules import CaseTypeRule, RuleSet
from casework.text_normalizer import NormalizedText, compile_phrase

logger = logging.getLogger(__name__)


class _CompiledCaseType:
    """Pre-compiled patterns for one case type"""

    __slots__ = ("rule", "triggers", "escalators")

    def __init__(self, rule: CaseTypeRule):
        self.rule = rule
        self.triggers: Tuple[Tuple[Pattern, int], ...] = tuple(
            (compile_phrase(phrase), weight) for phrase, weight in rule.triggers.items()
        )
        self.escalators: Tuple[Pattern, ...] = tuple(compile_phrase(p) for p in rule.escalators)

    def score(self, text: NormalizedText) -> int:
        # Each distinct trigger counts once, however often it appears
        return sum(weight for pattern, weight in self.triggers if text.contains(pattern))

    def escalated(self, text: NormalizedText) -> bool:
        return any(text.contains(pattern) for pattern in self.escalators)


class CaseClassifier:
    """Assigns a case type and priority from keyword rules"""

    def __init__(self, rules: RuleSet):
        self.unclassified = rules.unclassified.name
        # Table order doubles as the tie-break order
        self._case_types = tuple(_CompiledCaseType(rule) for rule in rules.case_types)

    def scores(self, text: NormalizedText) -> Dict[str, int]:
        """Match score for every case type, in table order"""
        return {compiled.rule.name: compiled.score(text) for compiled in self._case_types}

    def classify(self, text: NormalizedText) -> Tuple[str, PriorityLevel]:
        """
        Classify incident text

        Returns:
            Tuple of (case_type, priority). Unmatched text yields the
            unclassified type with low priority.
        """
        if text.is_empty:
            return self.unclassified, PriorityLevel.LOW

        best = None
        best_score = 0
        for compiled in self._case_types:
            score = compiled.score(text)
            # Strictly greater, so the earlier (more severe) type keeps a tie
            if score > best_score:
                best, best_score = compiled, score

        if best is None:
            logger.debug("No case type matched; using %s", self.unclassified)
            return self.unclassified, PriorityLevel.LOW

        priority = best.rule.base_priority
        if best.escalated(text):
            priority = priority.escalate()

        logger.debug("Classified as %s (score %d, priority %s)", best.rule.name, best_score, priority.value)
        return best.rule.name, priority
