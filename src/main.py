import argparse
import logging
import sys

import pandas as pd

from counterpoint_rules import lint_staves
from counterpoint_rules_base import RuleViolation, Severity
from data_preparation import ExcerptError, load_excerpt, summarize_violations
from rule_catalog import RuleCatalogError, default_rule_catalog, load_rule_catalog

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERRORS_FOUND = 1
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='counterpoint-lint',
        description="Check a two-voice first-species counterpoint excerpt against a set of rules.")
    parser.add_argument("excerpt", help="JSON excerpt with 'upper' and 'lower' staves, and optionally 'key' and 'cantus_staff'")
    parser.add_argument("--rules", help="JSON rule catalog (default: the built-in first-species rules)")
    parser.add_argument("--summary", action="store_true", help="Print counts per rule instead of each finding")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped rules and per-rule counts")
    return parser


def format_violation(violation: RuleViolation) -> str:
    location = f"[{violation.index}]" if violation.index is not None else "[-]"
    return f"{violation.severity.value:<7} {violation.rule_id:<20} {location:<5} {violation.message}"


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        catalog = load_rule_catalog(args.rules) if args.rules else default_rule_catalog()
        excerpt = load_excerpt(args.excerpt)
    except (RuleCatalogError, ExcerptError) as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT

    violations = lint_staves(excerpt.upper, excerpt.lower, excerpt.key_signature,
                             catalog, cantus_staff=excerpt.cantus_staff)

    if args.summary:
        summary = summarize_violations(violations, catalog)
        with pd.option_context('display.max_rows', None, 'display.width', 120):
            print(summary.to_string(index=False) if not summary.empty else "No findings.")
    elif not violations:
        print("No rule violations detected for enabled first-species rules.")
    else:
        for violation in violations:
            print(format_violation(violation))

    error_count = sum(1 for v in violations if v.severity == Severity.ERROR)
    logger.info("%d finding(s), %d error(s) in %s (%s)", len(violations), error_count,
                args.excerpt, excerpt.key_signature)
    return EXIT_ERRORS_FOUND if error_count else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
