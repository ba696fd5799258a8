"""
Rating Resolver.

Reduces a set of classified functions to one letter rating:
1. Worst-case selection: highest Severity, ties broken by highest Impact
2. Rule lookup: first rule matching the worst-case (severity, impact) pair

An empty set is rated AAA (immutable and autonomous) regardless of the rule
table. A non-empty set whose worst case has no rule is also rated AAA; this
fallback under-reports risk, so ``find_rule_gaps`` exists to surface rule
tables that can trigger it.
"""

from typing import Any, Iterable, List, Optional, Tuple

from .enums import FinalRating, Impact, Severity
from .models import RatingRule, SeverityImpact

EMPTY_RATING = FinalRating.AAA
UNMATCHED_RATING = FinalRating.AAA

# Fixed severity/impact ladder used before rating rules became configurable
LEGACY_RATING_LADDER = {
    Severity.INFORMATIONAL: {"default": FinalRating.AA},
    Severity.LOW: {"default": FinalRating.A},
    Severity.MEDIUM: {
        Impact.MEDIUM: FinalRating.BBB,
        Impact.HIGH: FinalRating.BB,
        Impact.CRITICAL: FinalRating.B,
        "default": FinalRating.BBB,
    },
    Severity.HIGH: {
        Impact.MEDIUM: FinalRating.CCC,
        Impact.HIGH: FinalRating.CC,
        Impact.CRITICAL: FinalRating.C,
        "default": FinalRating.CCC,
    },
    Severity.CRITICAL: {"default": FinalRating.D},
}


def worst_case(entries: Iterable[Any]) -> Optional[SeverityImpact]:
    """
    Select the riskiest (severity, impact) pair.

    Entries are any objects with ``severity`` and ``impact`` attributes.
    Severity is compared first; among entries sharing the highest severity the
    highest impact wins. Returns None when there are no entries.
    """
    worst: Optional[SeverityImpact] = None
    for entry in entries:
        candidate = SeverityImpact(entry.severity, entry.impact)
        if worst is None or (candidate.severity.rank, candidate.impact.rank) > (
            worst.severity.rank,
            worst.impact.rank,
        ):
            worst = candidate
    return worst


def find_rule(rules: Iterable[RatingRule], severity: Severity, impact: Impact) -> Optional[RatingRule]:
    """First non-placeholder rule for the pair, or None."""
    for rule in rules:
        if not rule.is_complete:
            continue
        if rule.severity == severity and rule.impact == impact:
            return rule
    return None


def resolve_rating(entries: Iterable[Any], rules: List[RatingRule]) -> FinalRating:
    """
    Rate a set of entries against a configurable rule table.

    Args:
        entries: Objects with ``severity`` and ``impact`` attributes
        rules: Rating rules; blank (placeholder) rows are never matched

    Returns:
        The matched rating; AAA for no entries or when no rule matches
    """
    pair = worst_case(entries)
    if pair is None:
        return EMPTY_RATING

    rule = find_rule(rules, pair.severity, pair.impact)
    if rule is None:
        return UNMATCHED_RATING
    return rule.rating


def resolve_rating_legacy(entries: Iterable[Any]) -> FinalRating:
    """Rate a set of entries with the fixed ladder (no rule table)."""
    pair = worst_case(entries)
    if pair is None:
        return EMPTY_RATING

    ladder = LEGACY_RATING_LADDER[pair.severity]
    return ladder.get(pair.impact, ladder["default"])


# =============================================================================
# RULE TABLE CHECKS
# =============================================================================

def has_placeholder_rule(rules: Iterable[RatingRule]) -> bool:
    """True if the table carries the (AAA, blank, blank) row."""
    return any(rule.is_placeholder and rule.rating == FinalRating.AAA for rule in rules)


def find_rule_gaps(rules: List[RatingRule]) -> List[Tuple[Severity, Impact]]:
    """Every (severity, impact) pair that no rule matches, in domain order."""
    return [
        (severity, impact)
        for severity in Severity
        for impact in Impact
        if find_rule(rules, severity, impact) is None
    ]
