"""
Shared test fixtures for the case analysis engine.
"""

import copy
import os

import pytest
import yaml
from fastapi.testclient import TestClient

from analysis.analyzer import CaseAnalyzer
from casework.rules import DEFAULT_RULES_PATH, load_rules, parse_rules


THEFT_REPORT = "Someone broke into my house through the back window and stole my laptop and TV"
CYBER_REPORT = (
    "I received a phishing email and then ransomware locked all our files, "
    "and the attacker threatened our staff with violence"
)


@pytest.fixture(scope="session")
def raw_rules():
    """Default rule table as plain data, for building custom tables"""
    with open(DEFAULT_RULES_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture(scope="session")
def rules():
    return load_rules(DEFAULT_RULES_PATH)


@pytest.fixture(scope="session")
def analyzer(rules):
    return CaseAnalyzer(rules)


@pytest.fixture
def minimal_rules_data():
    """Small two-type table with equal weights, useful for tie-break checks"""
    return {
        "version": "test-1",
        "unclassified": {"name": "general", "next_steps": ["Gather more information"]},
        "escalation_steps": ["Notify supervisor"],
        "digital_cues": ["online"],
        "case_types": [
            {
                "name": "alpha",
                "base_priority": "high",
                "digital": "always",
                "triggers": {"red": 1, "blue": 1},
                "escalators": ["urgent"],
                "next_steps": ["Alpha step"],
                "questions": ["Alpha question?"],
                "digital_trails": ["Alpha trail"],
            },
            {
                "name": "beta",
                "base_priority": "low",
                "digital": "conditional",
                "triggers": {"green": 1, "yellow": 1},
                "next_steps": ["Beta step"],
                "digital_trails": ["Beta trail"],
            },
        ],
        "risk_rules": [
            {"label": "Loud noise", "floor": "medium", "triggers": ["bang"], "next_steps": ["Check noise"]},
            {"label": "Fire", "floor": "critical", "triggers": ["fire", "smoke"]},
        ],
    }


@pytest.fixture
def build_rules(minimal_rules_data):
    def _build(mutate=None):
        data = copy.deepcopy(minimal_rules_data)
        if mutate is not None:
            mutate(data)
        return parse_rules(data)
    return _build


@pytest.fixture(scope="session")
def client():
    os.environ.pop("CASE_RULES_PATH", None)
    from analysis.api import app
    with TestClient(app) as c:
        yield c
