"""
Recommendation Generator
Maps case type, priority and risk factors to next steps, questions and digital-evidence leads
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union

from casework.models import PriorityLevel, RiskFactor
from casework.rules import CaseTypeRule, DigitalDimension, RiskRule, RuleSet
from casework.text_normalizer import NormalizedText, compile_phrase

ESCALATION_THRESHOLD = PriorityLevel.HIGH


def _unique(items) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class Recommender:
    """Assembles templated recommendations from the rule table"""

    def __init__(self, rules: RuleSet):
        self.unclassified = rules.unclassified
        self.escalation_steps = rules.escalation_steps
        self._case_types: Dict[str, CaseTypeRule] = {rule.name: rule for rule in rules.case_types}
        self._risk_rules: Dict[str, RiskRule] = {}
        for rule in rules.risk_rules:
            self._risk_rules.setdefault(rule.label, rule)
        self._digital_cues = tuple(compile_phrase(cue) for cue in rules.digital_cues)

    def has_digital_cue(self, text: Optional[NormalizedText]) -> bool:
        """Whether the text mentions something implying electronic evidence"""
        if text is None:
            return False
        return any(text.contains(cue) for cue in self._digital_cues)

    def recommend(
        self,
        case_type: str,
        priority: PriorityLevel,
        risk_factors: Sequence[Union[RiskFactor, str]] = (),
        text: Optional[NormalizedText] = None,
    ) -> Tuple[List[str], List[str], List[str]]:
        """
        Build recommendations for a classified report

        Args:
            case_type: Case type name from the rule table
            priority: Final priority of the report
            risk_factors: Detected risk factors (or their labels), in detection order
            text: Normalized report text, used to look for digital-evidence cues

        Returns:
            Tuple of (next_steps, questions, digital_trails)
        """
        case_rule = self._case_types.get(case_type)
        if case_rule is None and case_type != self.unclassified.name:
            raise ValueError(f"Unknown case type: {case_type}")

        labels = [risk if isinstance(risk, str) else risk.label for risk in risk_factors]
        risk_rules = [self._risk_rules[label] for label in labels if label in self._risk_rules]

        steps: List[str] = []
        if priority >= ESCALATION_THRESHOLD:
            steps.extend(self.escalation_steps)
        for rule in risk_rules:
            steps.extend(rule.next_steps)

        if case_rule is None:
            steps.extend(self.unclassified.next_steps)
            questions = list(self.unclassified.questions)
        else:
            steps.extend(case_rule.next_steps)
            questions = list(case_rule.questions)
        for rule in risk_rules:
            questions.extend(rule.questions)

        digital_trails = self._digital_trails(case_rule, risk_factors, risk_rules, text)

        return _unique(steps), _unique(questions), digital_trails

    def _digital_trails(self, case_rule, risk_factors, risk_rules, text) -> List[str]:
        if case_rule is None or case_rule.digital == DigitalDimension.NEVER:
            return []
        if case_rule.digital == DigitalDimension.ALWAYS:
            return list(case_rule.digital_trails)

        digital_risk = any(rule.digital for rule in risk_rules) or any(
            isinstance(risk, RiskFactor) and risk.digital for risk in risk_factors
        )
        if digital_risk or self.has_digital_cue(text):
            return list(case_rule.digital_trails)
        return []
