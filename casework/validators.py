"""
Validation utilities for incident reports and case analyses
"""

from typing import Any, Optional

from casework.models import CaseAnalysis, PriorityLevel
from casework.rules import RuleSet


class AnalysisValidator:
    """Checks engine inputs and the invariants of produced analyses"""

    @staticmethod
    def validate_incident_text(text: Any) -> tuple[bool, Optional[str]]:
        """Any string is valid input, including the empty string"""
        if not isinstance(text, str):
            return False, f"Incident text must be a string, got {type(text).__name__}"
        return True, None

    @staticmethod
    def validate_case_type(case_type: str, rules: RuleSet) -> tuple[bool, Optional[str]]:
        """Validate case type against the rule table"""
        if case_type not in rules.case_type_names:
            return False, f"Invalid case type. Must be one of: {', '.join(rules.case_type_names)}"
        return True, None

    @staticmethod
    def validate_analysis(
        analysis: CaseAnalysis,
        rules: RuleSet,
        risk_floor: Optional[PriorityLevel] = None,
    ) -> tuple[bool, Optional[str]]:
        """Validate a complete analysis"""
        valid, error = AnalysisValidator.validate_case_type(analysis.case_type, rules)
        if not valid:
            return False, error

        if not analysis.next_steps:
            return False, "next_steps must not be empty"

        if risk_floor is not None and analysis.priority < risk_floor:
            return False, f"Priority {analysis.priority.value} is below risk floor {risk_floor.value}"

        if len(set(analysis.risk_factors)) != len(analysis.risk_factors):
            return False, "risk_factors must not contain duplicates"

        if analysis.case_type == rules.unclassified.name and analysis.digital_trails:
            return False, "Unclassified analyses cannot carry digital trails"

        return True, None
