"""
Case Analysis Records
Priority levels and the immutable analysis record produced for every incident report
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Tuple

from pydantic import BaseModel, Field


class PriorityLevel(str, Enum):
    """Ordered urgency rating: low < medium < high < critical"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)

    def escalate(self) -> "PriorityLevel":
        """Raise by one level, capped at critical"""
        return _PRIORITY_ORDER[min(self.rank + 1, len(_PRIORITY_ORDER) - 1)]

    @classmethod
    def highest(cls, *levels: "PriorityLevel") -> "PriorityLevel":
        """Worst-case priority of the given levels (low when none given)"""
        return max(levels, default=cls.LOW, key=lambda level: level.rank)

    def __lt__(self, other):
        if isinstance(other, PriorityLevel):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, PriorityLevel):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, PriorityLevel):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, PriorityLevel):
            return self.rank >= other.rank
        return NotImplemented


_PRIORITY_ORDER = (
    PriorityLevel.LOW,
    PriorityLevel.MEDIUM,
    PriorityLevel.HIGH,
    PriorityLevel.CRITICAL,
)


class RiskFactor(NamedTuple):
    """A fired risk rule"""

    label: str
    floor: PriorityLevel
    digital: bool = False


class CaseAnalysis(BaseModel):
    """Structured analysis of a single incident report"""

    case_type: str = Field(..., min_length=1, description="Case type from the rule table")
    priority: PriorityLevel = Field(..., description="Worst case of classifier and risk priorities")
    risk_factors: Tuple[str, ...] = Field(default=(), description="Detected escalation signals")
    next_steps: Tuple[str, ...] = Field(..., min_length=1, description="Recommended actions, most urgent first")
    questions: Tuple[str, ...] = Field(default=(), description="Follow-up questions for the reporter")
    digital_trails: Tuple[str, ...] = Field(default=(), description="Leads implying electronic evidence")
    suspects: Tuple[str, ...] = Field(default=(), description="Best-effort suspect mentions")
    evidence: Tuple[str, ...] = Field(default=(), description="Best-effort evidence mentions")
    rules_version: str = Field(..., description="Version of the rule table used")

    class Config:
        frozen = True

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (tuples become lists, priority its string value)"""
        return self.model_dump(mode="json")
