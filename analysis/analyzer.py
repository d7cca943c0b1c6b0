"""
Core Case Analyzer
Derives a structured case analysis from free-form incident text using versioned rule tables
"""

import logging
from typing import Optional

from analysis.classifier import CaseClassifier
from analysis.extractor import EntityExtractor
from casework.models import CaseAnalysis, PriorityLevel
from casework.recommender import Recommender
from casework.risk_detector import RiskDetector
from casework.rules import RuleSet, load_rules
from casework.text_normalizer import TextNormalizer
from casework.validators import AnalysisValidator

logger = logging.getLogger(__name__)


class CaseAnalyzer:
    """Main analyzer for incident reports"""

    def __init__(self, rules: Optional[RuleSet] = None):
        """
        Initialize analyzer

        Args:
            rules: Rule table to analyze with. If None, loads the default table.
        """
        self.rules = rules if rules is not None else load_rules()
        self.normalizer = TextNormalizer()
        self.classifier = CaseClassifier(self.rules)
        self.risk_detector = RiskDetector(self.rules)
        self.recommender = Recommender(self.rules)
        self.extractor = EntityExtractor(self.rules.extraction)
        self.validator = AnalysisValidator()

    def analyze(self, incident_text: str) -> CaseAnalysis:
        """
        Main analysis function

        Args:
            incident_text: Free-form text of the incident report

        Returns:
            Immutable CaseAnalysis

        Raises:
            TypeError: if incident_text is not a string
        """
        valid, error = self.validator.validate_incident_text(incident_text)
        if not valid:
            raise TypeError(error)

        text = self.normalizer.normalize(incident_text)

        case_type, priority = self.classifier.classify(text)

        risks = self.risk_detector.detect_risks(text)
        risk_floor = self.risk_detector.floor(risks)
        if risk_floor is not None:
            priority = PriorityLevel.highest(priority, risk_floor)

        next_steps, questions, digital_trails = self.recommender.recommend(case_type, priority, risks, text)

        suspects, evidence = self.extractor.extract_entities(text.text)

        result = CaseAnalysis(
            case_type=case_type,
            priority=priority,
            risk_factors=tuple(risk.label for risk in risks),
            next_steps=tuple(next_steps),
            questions=tuple(questions),
            digital_trails=tuple(digital_trails),
            suspects=tuple(suspects),
            evidence=tuple(evidence),
            rules_version=self.rules.version,
        )

        valid, error = self.validator.validate_analysis(result, self.rules, risk_floor)
        if not valid:
            logger.warning("Analysis failed validation: %s", error)

        return result


# Built at import; shared read-only by all callers
default_analyzer = CaseAnalyzer()


def analyze_case(text: str) -> CaseAnalysis:
    """Analyze an incident report with the default rule table"""
    return default_analyzer.analyze(text)
