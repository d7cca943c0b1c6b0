"""
Investigation Planner
Turns a classified case into a response timeline, resources and legal checklist
"""

from typing import Tuple

from pydantic import BaseModel

from casework.models import PriorityLevel
from casework.rules import RuleSet


class InvestigationPlan(BaseModel):
    timeline: str
    resources: Tuple[str, ...]
    special_units: Tuple[str, ...]
    legal_considerations: Tuple[str, ...]

    class Config:
        frozen = True


class InvestigationPlanner:
    """Builds investigation plans from the plan section of a rule table"""

    def __init__(self, rules: RuleSet):
        if rules.plan is None:
            raise ValueError(f"Rule table {rules.version} has no plan section")
        self.plan = rules.plan
        self.case_types = frozenset(rules.case_type_names)

    def plan_investigation(self, case_type: str, priority: PriorityLevel) -> InvestigationPlan:
        """
        Plan the investigation of a case

        Args:
            case_type: Case type name from the rule table
            priority: Priority level (or its string value)

        Returns:
            InvestigationPlan
        """
        if case_type not in self.case_types:
            raise ValueError(f"Unknown case type: {case_type}")
        priority = PriorityLevel(priority)

        return InvestigationPlan(
            timeline=self.plan.timelines[priority],
            resources=self.plan.resources.get(case_type, self.plan.default_resources),
            special_units=self.plan.special_units.get(case_type, ()),
            legal_considerations=self.plan.legal_considerations,
        )
