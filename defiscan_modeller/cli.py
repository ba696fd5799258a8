"""
Governance Rating Report.

Rates projects from the local state cache and/or project JSON files and prints
a per-project summary plus the global rating.

Usage:
    defiscan-modeller aave.json morpho.json
    defiscan-modeller --no-cache --legacy project.json
    defiscan-modeller --check-rules
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .config.settings import CACHE_PATH, LOG_LEVEL
from .core.aggregation import summarize
from .core.enums import Impact, Severity
from .core.models import RatingRule
from .core.rating import find_rule_gaps
from .core.state import default_state, import_projects, recompute_state
from .exceptions import ConfigurationError
from .storage import LocalStateCache, load_projects_file
from .thresholds import get_rating_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="defiscan-modeller",
        description="Rate DeFi protocol governance from classified privileged functions.",
    )
    parser.add_argument("projects", nargs="*", help="Project JSON files to rate")
    parser.add_argument("--state", default=str(CACHE_PATH), help="State cache file (default: %(default)s)")
    parser.add_argument("--no-cache", action="store_true", help="Start from defaults instead of the state cache")
    parser.add_argument("--legacy", action="store_true", help="Rate with the fixed ladder instead of the rule table")
    parser.add_argument("--check-rules", action="store_true", help="List severity/impact pairs without a rating rule")
    parser.add_argument("--save", action="store_true", help="Write the recomputed state back to the cache")
    return parser


def _format_pair(pair) -> str:
    if pair is None:
        return "-"
    return f"{pair.severity.value}/{pair.impact.value}"


def print_rating_report(summary: Dict):
    """Print formatted rating report."""
    print("\n" + "=" * 90)
    print("GOVERNANCE RATING REPORT")
    print("=" * 90)

    print("\n{:<40} {:>8} {:<26} {:<8}".format("Project", "Entries", "Worst case", "Rating"))
    print("-" * 90)

    for project in summary["projects"]:
        print("{:<40} {:>8} {:<26} {:<8}".format(
            project["title"][:40],
            project["entries"],
            _format_pair(project["worst_case"]),
            project["rating"].value,
        ))

    info = get_rating_info(summary["global_rating"])
    print("\n" + "=" * 90)
    print(f"GLOBAL RATING: {info['rating']} ({info['scores']})")
    print(f"Worst case: {_format_pair(summary['global_worst_case'])}")
    print(info["description"])
    print("=" * 90)


def print_rule_gaps(gaps: List[Tuple[Severity, Impact]]):
    """Print rule table gaps."""
    print("\n" + "=" * 90)
    print("RATING RULE COVERAGE")
    print("=" * 90)

    if not gaps:
        print("Every severity/impact pair has a rating rule.")
        return

    print(f"{len(gaps)} severity/impact pairs have no rule and would be rated AAA:")
    for severity, impact in gaps:
        print(f"  - {severity.value} severity, {impact.value} impact")


def check_rules(rules: List[RatingRule]) -> List[Tuple[Severity, Impact]]:
    gaps = find_rule_gaps(rules)
    print_rule_gaps(gaps)
    return gaps


def main(argv: Optional[List[str]] = None) -> int:
    """Main report function."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    cache = LocalStateCache(args.state)
    cached = None if args.no_cache else cache.read()
    state = cached if cached is not None else default_state()

    # Files replace the default empty project rather than sitting next to it
    if args.projects:
        if cached is None:
            state = replace(state, projects=[])
        for path in args.projects:
            try:
                projects = load_projects_file(path)
            except OSError as e:
                print(f"Error loading {path}: {e}", file=sys.stderr)
                return 1
            except ConfigurationError as e:
                print(f"Invalid project file {path}: {e}", file=sys.stderr)
                return 1
            state = import_projects(state, projects)

    state = recompute_state(state)
    print_rating_report(summarize(state, legacy=args.legacy))

    if args.check_rules:
        check_rules(state.rating_rules)

    if args.save:
        path = cache.save(state)
        print(f"\nState saved to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
