"""
Rule Table Loading
Parses and validates the versioned YAML tables that drive classification,
risk detection, recommendations, extraction and investigation planning
"""

import logging
import os
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from casework.models import PriorityLevel
from casework.text_normalizer import compile_phrase

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "default_rules.yaml")


class RuleTableError(ValueError):
    """Raised when a rule table cannot be parsed or fails validation"""


class DigitalDimension(str, Enum):
    """Whether a case type produces digital-evidence leads"""

    ALWAYS = "always"
    CONDITIONAL = "conditional"
    NEVER = "never"


def _check_phrases(phrases):
    for phrase in phrases:
        try:
            compile_phrase(phrase)
        except ValueError as e:
            raise ValueError(f"Invalid trigger phrase {phrase!r}: {e}") from e
    return phrases


class CaseTypeRule(BaseModel):
    """Triggers and templates for one case type"""

    name: str = Field(..., min_length=1)
    base_priority: PriorityLevel
    digital: DigitalDimension = DigitalDimension.NEVER
    triggers: Mapping[str, int] = Field(..., min_length=1, description="Trigger phrase -> weight")
    escalators: Tuple[str, ...] = ()
    next_steps: Tuple[str, ...] = Field(..., min_length=1)
    questions: Tuple[str, ...] = ()
    digital_trails: Tuple[str, ...] = ()

    class Config:
        frozen = True

    @field_validator("triggers")
    @classmethod
    def weights_must_be_positive(cls, triggers):
        for phrase, weight in triggers.items():
            if weight <= 0:
                raise ValueError(f"Trigger {phrase!r} must have a positive weight, got {weight}")
        _check_phrases(triggers)
        return MappingProxyType(dict(triggers))

    @field_validator("escalators")
    @classmethod
    def escalators_must_compile(cls, escalators):
        return _check_phrases(escalators)


class RiskRule(BaseModel):
    """An independent escalation signal with its priority floor"""

    label: str = Field(..., min_length=1)
    floor: PriorityLevel
    triggers: Tuple[str, ...] = Field(..., min_length=1)
    requires: Tuple[str, ...] = Field(default=(), description="Phrases that must also appear")
    digital: bool = False
    next_steps: Tuple[str, ...] = ()
    questions: Tuple[str, ...] = ()

    class Config:
        frozen = True

    @field_validator("triggers", "requires")
    @classmethod
    def phrases_must_compile(cls, phrases):
        return _check_phrases(phrases)


class UnclassifiedRule(BaseModel):
    """Outcome when no case type matches"""

    name: str = "general"
    next_steps: Tuple[str, ...] = Field(..., min_length=1)
    questions: Tuple[str, ...] = ()

    class Config:
        frozen = True


class ExtractionRules(BaseModel):
    """Trigger words for best-effort suspect and evidence extraction"""

    suspect_triggers: Tuple[str, ...] = ()
    suspect_actions: Tuple[str, ...] = ()
    name_stopwords: Tuple[str, ...] = ()
    evidence_triggers: Tuple[str, ...] = ()
    evidence_stopwords: Tuple[str, ...] = ()
    evidence_terms: Tuple[str, ...] = ()

    class Config:
        frozen = True


class PlanRules(BaseModel):
    """Templates for investigation plans"""

    timelines: Mapping[PriorityLevel, str]
    resources: Mapping[str, Tuple[str, ...]] = Field(default_factory=lambda: MappingProxyType({}))
    default_resources: Tuple[str, ...] = Field(..., min_length=1)
    special_units: Mapping[str, Tuple[str, ...]] = Field(default_factory=lambda: MappingProxyType({}))
    legal_considerations: Tuple[str, ...] = ()

    class Config:
        frozen = True

    @field_validator("timelines")
    @classmethod
    def every_priority_has_timeline(cls, timelines):
        missing = [level.value for level in PriorityLevel if level not in timelines]
        if missing:
            raise ValueError(f"Missing timelines for priorities: {', '.join(missing)}")
        return MappingProxyType(dict(timelines))

    @field_validator("resources", "special_units")
    @classmethod
    def read_only_mappings(cls, value):
        return MappingProxyType(dict(value))


class RuleSet(BaseModel):
    """Complete, immutable rule configuration for the analysis engine"""

    version: str = Field(..., min_length=1)
    unclassified: UnclassifiedRule
    escalation_steps: Tuple[str, ...] = ()
    digital_cues: Tuple[str, ...] = ()
    case_types: Tuple[CaseTypeRule, ...] = Field(..., min_length=1, description="Ordered by severity")
    risk_rules: Tuple[RiskRule, ...] = ()
    extraction: ExtractionRules = ExtractionRules()
    plan: Optional[PlanRules] = None

    class Config:
        frozen = True

    @field_validator("digital_cues")
    @classmethod
    def cues_must_compile(cls, cues):
        return _check_phrases(cues)

    @model_validator(mode="after")
    def case_type_names_unique(self):
        names = [rule.name for rule in self.case_types]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate case types: {', '.join(duplicates)}")
        if self.unclassified.name in names:
            raise ValueError(f"Unclassified type {self.unclassified.name!r} collides with a case type")
        return self

    @property
    def case_type_names(self) -> Tuple[str, ...]:
        """All case types this table can produce, unclassified last"""
        return tuple(rule.name for rule in self.case_types) + (self.unclassified.name,)

    def get_case_type(self, name: str) -> Optional[CaseTypeRule]:
        for rule in self.case_types:
            if rule.name == name:
                return rule
        return None


def parse_rules(data) -> RuleSet:
    """Validate an already-parsed rule mapping"""
    if not isinstance(data, dict):
        raise RuleTableError("Rule table must be a mapping at the top level")
    try:
        return RuleSet.model_validate(data)
    except ValidationError as e:
        raise RuleTableError(f"Invalid rule table: {e}") from e


def load_rules(path: Optional[str] = None) -> RuleSet:
    """
    Load a rule table from YAML

    Args:
        path: Path to a YAML rule table. If None, uses CASE_RULES_PATH or the packaged default.

    Returns:
        Validated RuleSet
    """
    path = path or os.getenv("CASE_RULES_PATH") or DEFAULT_RULES_PATH

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleTableError(f"Could not parse rule table {path}: {e}") from e

    rules = parse_rules(data)
    logger.info(
        "Loaded rule table %s (version %s): %d case types, %d risk rules",
        path,
        rules.version,
        len(rules.case_types),
        len(rules.risk_rules),
    )
    return rules
