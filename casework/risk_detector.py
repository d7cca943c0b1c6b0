"""
Risk Detection Module
Scans incident text for escalation signals independent of case type
"""

from typing import List, Optional, Pattern, Sequence, Tuple

from casework.models import PriorityLevel, RiskFactor
from casework.rules import RiskRule, RuleSet
from casework.text_normalizer import NormalizedText, compile_phrase


class RiskDetector:
    """Detects risk factors and the priority floor they imply"""

    def __init__(self, rules: RuleSet):
        """Compile every risk rule once, in table order"""
        self._rules: Tuple[Tuple[RiskRule, Tuple[Pattern, ...], Tuple[Pattern, ...]], ...] = tuple(
            (
                rule,
                tuple(compile_phrase(p) for p in rule.triggers),
                tuple(compile_phrase(p) for p in rule.requires),
            )
            for rule in rules.risk_rules
        )

    def detect_risks(self, text: NormalizedText) -> List[RiskFactor]:
        """
        Evaluate every rule against the full text

        All matching rules fire. Labels keep rule-table order and appear once.

        Args:
            text: Normalized incident text

        Returns:
            Ordered list of detected risk factors
        """
        if text.is_empty:
            return []

        risks: List[RiskFactor] = []
        seen = set()
        for rule, triggers, requires in self._rules:
            if not any(text.contains(p) for p in triggers):
                continue
            # Co-triggers: at least one must also be present
            if requires and not any(text.contains(p) for p in requires):
                continue
            if rule.label in seen:
                continue
            seen.add(rule.label)
            risks.append(RiskFactor(label=rule.label, floor=rule.floor, digital=rule.digital))

        return risks

    @staticmethod
    def floor(risks: Sequence[RiskFactor]) -> Optional[PriorityLevel]:
        """Highest priority floor among the risks, or None when there are none"""
        if not risks:
            return None
        return PriorityLevel.highest(*(risk.floor for risk in risks))
