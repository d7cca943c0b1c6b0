"""
Unit tests for the pipeline components: normalizer, classifier,
risk detector, recommender and priority ordering.
"""

import pytest

from analysis.classifier import CaseClassifier
from casework.models import PriorityLevel, RiskFactor
from casework.recommender import Recommender
from casework.risk_detector import RiskDetector
from casework.text_normalizer import TextNormalizer, compile_phrase


normalizer = TextNormalizer()


# =============================================================================
# Priority ordering
# =============================================================================

class TestPriorityLevel:

    def test_total_order(self):
        assert PriorityLevel.LOW < PriorityLevel.MEDIUM < PriorityLevel.HIGH < PriorityLevel.CRITICAL
        assert PriorityLevel.CRITICAL >= PriorityLevel.CRITICAL
        assert not PriorityLevel.HIGH <= PriorityLevel.MEDIUM

    def test_escalate_is_capped(self):
        assert PriorityLevel.LOW.escalate() == PriorityLevel.MEDIUM
        assert PriorityLevel.HIGH.escalate() == PriorityLevel.CRITICAL
        assert PriorityLevel.CRITICAL.escalate() == PriorityLevel.CRITICAL

    def test_highest(self):
        assert PriorityLevel.highest(PriorityLevel.MEDIUM, PriorityLevel.LOW) == PriorityLevel.MEDIUM
        assert PriorityLevel.highest() == PriorityLevel.LOW
        # Ordering is by rank, not alphabetical
        assert max(PriorityLevel.HIGH, PriorityLevel.MEDIUM) == PriorityLevel.HIGH


# =============================================================================
# Normalizer
# =============================================================================

class TestNormalizer:

    def test_lowercases_and_collapses_whitespace(self):
        text = normalizer.normalize("  STOLEN \n\n laptop\t ")
        assert text.lowered == "stolen laptop"
        assert text.text == "STOLEN laptop"
        assert text.original == "  STOLEN \n\n laptop\t "

    def test_empty(self):
        text = normalizer.normalize("")
        assert text.is_empty
        assert text.lowered == ""

    def test_strips_control_characters_and_tags(self):
        text = normalizer.normalize("<p>Car\x00 was <b>stolen</b></p>")
        assert text.text == "Car was stolen"

    def test_keeps_angle_bracket_prose(self):
        assert normalizer.normalize("arrived < 5 minutes later").text == "arrived < 5 minutes later"

    def test_keeps_prose_between_angle_brackets(self):
        text = normalizer.normalize("valued <500 dollars, he has a knife> then left")
        assert text.text == "valued <500 dollars, he has a knife> then left"

    def test_strips_tags_with_attributes(self):
        text = normalizer.normalize('<a href="x">wallet</a> taken<br/>today')
        assert text.text == "wallet taken today"

    @pytest.mark.parametrize("separator", ["\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\x1f"])
    def test_whitespace_controls_collapse_to_space(self, separator):
        assert normalizer.normalize("STOLEN" + separator + "laptop").lowered == "stolen laptop"

    def test_non_whitespace_controls_removed(self):
        assert normalizer.normalize("sto\x01len\x1b laptop\x7f").text == "stolen laptop"


class TestCompilePhrase:

    def test_word_boundaries(self):
        pattern = compile_phrase("attack")
        assert pattern.search("they attack at night")
        assert not pattern.search("the attacker left")

    def test_multiword_matches_any_spacing(self):
        assert compile_phrase("broke into").search("broke    into the shed")

    def test_prefix_wildcard(self):
        pattern = compile_phrase("deteriorat*")
        assert pattern.search("evidence is deteriorating")
        assert pattern.search("it deteriorated")
        assert not pattern.search("undeteriorated")

    def test_hyphenated_phrase(self):
        assert compile_phrase("break-in").search("reported a break-in yesterday")

    def test_empty_phrase_rejected(self):
        with pytest.raises(ValueError):
            compile_phrase("  * ")


# =============================================================================
# Classifier
# =============================================================================

class TestClassifier:

    def test_no_match_is_unclassified_low(self, rules):
        classifier = CaseClassifier(rules)
        assert classifier.classify(normalizer.normalize("nice weather today")) == ("general", PriorityLevel.LOW)

    def test_distinct_triggers_count_once(self, rules):
        classifier = CaseClassifier(rules)
        scores = classifier.scores(normalizer.normalize("stolen stolen stolen"))
        assert scores["theft"] == 2

    def test_scores_in_table_order(self, rules):
        classifier = CaseClassifier(rules)
        scores = classifier.scores(normalizer.normalize("anything"))
        assert list(scores) == [rule.name for rule in rules.case_types]

    def test_escalator_raises_one_level(self, rules):
        classifier = CaseClassifier(rules)
        assert classifier.classify(normalizer.normalize("my bike was stolen")) == ("theft", PriorityLevel.MEDIUM)
        assert classifier.classify(normalizer.normalize("an armed man stole my bike")) == ("theft", PriorityLevel.HIGH)

    def test_tie_goes_to_earlier_type(self, build_rules):
        classifier = CaseClassifier(build_rules())
        assert classifier.classify(normalizer.normalize("red and green"))[0] == "alpha"
        assert classifier.classify(normalizer.normalize("green and red"))[0] == "alpha"

    def test_higher_score_beats_order(self, build_rules):
        classifier = CaseClassifier(build_rules())
        assert classifier.classify(normalizer.normalize("red green yellow"))[0] == "beta"

    def test_reordered_table_changes_tie_break(self, build_rules):
        rules = build_rules(lambda d: d["case_types"].reverse())
        assert CaseClassifier(rules).classify(normalizer.normalize("red and green"))[0] == "beta"

    def test_new_case_type_is_pluggable(self, build_rules):
        def add_gamma(data):
            data["case_types"].append({
                "name": "gamma",
                "base_priority": "medium",
                "triggers": {"purple": 2},
                "next_steps": ["Gamma step"],
            })

        classifier = CaseClassifier(build_rules(add_gamma))
        assert classifier.classify(normalizer.normalize("purple")) == ("gamma", PriorityLevel.MEDIUM)
        assert classifier.classify(normalizer.normalize("red"))[0] == "alpha"

    def test_escalation_capped_at_critical(self, build_rules):
        rules = build_rules(lambda d: d["case_types"][0].update(base_priority="critical"))
        assert CaseClassifier(rules).classify(normalizer.normalize("red urgent")) == ("alpha", PriorityLevel.CRITICAL)


# =============================================================================
# Risk detector
# =============================================================================

class TestRiskDetector:

    def test_no_risks(self, rules):
        detector = RiskDetector(rules)
        risks = detector.detect_risks(normalizer.normalize("my bike was stolen"))
        assert risks == []
        assert detector.floor(risks) is None

    def test_all_matching_rules_fire(self, rules):
        detector = RiskDetector(rules)
        risks = detector.detect_risks(normalizer.normalize("he had a gun and threatened the kids"))
        labels = [risk.label for risk in risks]

        assert labels == [
            "Armed suspect - high public safety risk",
            "Threat of violence - victim safety at risk",
            "Minor involved - child safeguarding required",
        ]
        assert detector.floor(risks) == PriorityLevel.CRITICAL

    def test_requires_co_trigger(self, rules):
        detector = RiskDetector(rules)
        without = detector.detect_risks(normalizer.normalize("the paint is deteriorating"))
        with_evidence = detector.detect_risks(normalizer.normalize("the evidence is deteriorating in the rain"))

        assert without == []
        assert [r.label for r in with_evidence] == ["Evidence degradation - time-sensitive collection needed"]

    def test_duplicate_labels_suppressed(self, build_rules):
        rules = build_rules(lambda d: d["risk_rules"].append(
            {"label": "Loud noise", "floor": "high", "triggers": ["boom"]}
        ))
        risks = RiskDetector(rules).detect_risks(normalizer.normalize("bang then boom"))
        assert [r.label for r in risks] == ["Loud noise"]

    def test_digital_flag_carried(self, rules):
        risks = RiskDetector(rules).detect_risks(normalizer.normalize("he keeps texting me at night"))
        assert risks and risks[0].digital

    def test_minor_injuries_are_not_a_minor(self, rules):
        labels = [r.label for r in RiskDetector(rules).detect_risks(normalizer.normalize("only minor scratches"))]
        assert "Minor involved - child safeguarding required" not in labels


# =============================================================================
# Recommender
# =============================================================================

class TestRecommender:

    def test_escalation_block_only_for_high_priority(self, rules):
        recommender = Recommender(rules)
        steps_medium, _, _ = recommender.recommend("theft", PriorityLevel.MEDIUM)
        steps_high, _, _ = recommender.recommend("theft", PriorityLevel.HIGH)

        assert steps_medium[0] == "Secure the crime scene and preserve evidence"
        assert steps_high[: len(rules.escalation_steps)] == list(rules.escalation_steps)

    def test_risk_steps_precede_case_steps(self, rules):
        recommender = Recommender(rules)
        risk = RiskFactor("Flight risk - suspect may leave jurisdiction", PriorityLevel.MEDIUM)
        steps, questions, _ = recommender.recommend("theft", PriorityLevel.MEDIUM, [risk])

        assert steps[0] == "Circulate the suspect description to neighbouring units"
        assert "Which direction did the suspect leave in, and by what means?" in questions

    def test_accepts_risk_labels(self, rules):
        recommender = Recommender(rules)
        steps, _, _ = recommender.recommend(
            "general", PriorityLevel.HIGH, ["Armed suspect - high public safety risk"]
        )
        assert "Treat the suspect as armed and request backup" in steps

    def test_no_duplicate_steps(self, rules):
        steps, questions, _ = Recommender(rules).recommend("assault", PriorityLevel.CRITICAL, [
            "Victim injured - medical attention required",
            "Victim injured - medical attention required",
        ])
        assert len(steps) == len(set(steps))
        assert len(questions) == len(set(questions))

    def test_cybercrime_always_has_trails(self, rules):
        _, _, trails = Recommender(rules).recommend("cybercrime", PriorityLevel.MEDIUM)
        assert trails

    def test_conditional_trails_need_cue(self, rules):
        recommender = Recommender(rules)
        _, _, without = recommender.recommend("theft", PriorityLevel.MEDIUM, (), normalizer.normalize("bike stolen"))
        _, _, with_cue = recommender.recommend(
            "theft", PriorityLevel.MEDIUM, (), normalizer.normalize("wallet and bank card stolen")
        )
        assert without == []
        assert with_cue == list(rules.get_case_type("theft").digital_trails)

    def test_digital_risk_enables_trails(self, rules):
        risk = RiskFactor("Ongoing electronic contact from suspect - preserve messages", PriorityLevel.MEDIUM, True)
        _, _, trails = Recommender(rules).recommend("assault", PriorityLevel.HIGH, [risk])
        assert trails

    def test_unclassified_has_no_trails_or_questions(self, rules):
        steps, questions, trails = Recommender(rules).recommend(
            "general", PriorityLevel.LOW, (), normalizer.normalize("my phone")
        )
        assert steps == list(rules.unclassified.next_steps)
        assert questions == []
        assert trails == []

    def test_unknown_case_type(self, rules):
        with pytest.raises(ValueError):
            Recommender(rules).recommend("piracy", PriorityLevel.LOW)
