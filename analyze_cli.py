"""
CLI tester for the Case Analyzer.
Lets you type an incident report and see the analysis.
"""

import logging
import os

from analysis.analyzer import CaseAnalyzer
from casework.rules import load_rules


def _print_list(title, items):
    print(f"{title:<18}: {'-' if not items else ''}")
    for item in items:
        print(f"  - {item}")


def run_cli():
    """Interactive CLI for testing the case analyzer."""
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    print("Initializing Case Analyzer...")
    analyzer = CaseAnalyzer(load_rules(os.getenv("CASE_RULES_PATH")))

    print("\n" + "=" * 80)
    print(f"Case Analysis Engine - CLI Tester (rules {analyzer.rules.version})")
    print("Type an incident report below.")
    print("Press Enter on an empty line or type 'q' to exit.")
    print("=" * 80)

    while True:
        text = input("\nIncident report:\n> ").strip()
        if not text or text.lower() in {"q", "quit", "exit"}:
            print("\nExiting tester.")
            break

        result = analyzer.analyze(text)

        print("\n--- Analysis ---")
        print(f"{'Case Type':<18}: {result.case_type}")
        print(f"{'Priority':<18}: {result.priority.value.upper()}")
        _print_list("Risk Factors", result.risk_factors)
        _print_list("Next Steps", result.next_steps)
        _print_list("Questions", result.questions)
        _print_list("Digital Trails", result.digital_trails)
        _print_list("Suspects", result.suspects)
        _print_list("Evidence", result.evidence)


if __name__ == "__main__":
    run_cli()
