"""
Unit tests for the rating resolver.

Tests worst-case selection, rule lookup, the AAA fallbacks and the legacy
fixed ladder.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from defiscan_modeller.core.enums import FinalRating, Impact, Severity
from defiscan_modeller.core.models import RatingRule, SeverityImpact
from defiscan_modeller.core.rating import (
    find_rule,
    find_rule_gaps,
    has_placeholder_rule,
    resolve_rating,
    resolve_rating_legacy,
    worst_case,
)


class TestWorstCase:
    """Tests for worst-case selection."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_empty(self):
        assert worst_case([]) is None

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_severity_beats_impact(self, pair_factory):
        entries = [
            pair_factory(Severity.LOW, Impact.HIGH),
            pair_factory(Severity.MEDIUM, Impact.LOW),
        ]
        assert worst_case(entries) == SeverityImpact(Severity.MEDIUM, Impact.LOW)

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_impact_breaks_ties(self, pair_factory):
        entries = [
            pair_factory(Severity.HIGH, Impact.MEDIUM),
            pair_factory(Severity.HIGH, Impact.CRITICAL),
        ]
        assert worst_case(entries) == SeverityImpact(Severity.HIGH, Impact.CRITICAL)

    @pytest.mark.unit
    def test_order_independent(self, pair_factory):
        entries = [
            pair_factory(Severity.HIGH, Impact.CRITICAL),
            pair_factory(Severity.LOW, Impact.LOW),
            pair_factory(Severity.HIGH, Impact.MEDIUM),
        ]
        assert worst_case(entries) == worst_case(list(reversed(entries)))


class TestResolveRating:
    """Tests for rule-table rating."""

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.smoke
    def test_empty_is_aaa(self, rating_rules):
        assert resolve_rating([], rating_rules) == FinalRating.AAA

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_empty_is_aaa_without_rules(self):
        assert resolve_rating([], []) == FinalRating.AAA

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("severity,impact,expected", [
        (Severity.INFORMATIONAL, Impact.LOW, FinalRating.AA),
        (Severity.LOW, Impact.MEDIUM, FinalRating.A),
        (Severity.MEDIUM, Impact.HIGH, FinalRating.BB),
        (Severity.MEDIUM, Impact.CRITICAL, FinalRating.B),
        (Severity.HIGH, Impact.CRITICAL, FinalRating.C),
        (Severity.CRITICAL, Impact.LOW, FinalRating.D),
    ])
    def test_default_rules(self, rating_rules, pair_factory, severity, impact, expected):
        assert resolve_rating([pair_factory(severity, impact)], rating_rules) == expected

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_rating_follows_worst_case(self, rating_rules, pair_factory):
        entries = [
            pair_factory(Severity.LOW, Impact.HIGH),
            pair_factory(Severity.MEDIUM, Impact.LOW),
        ]
        assert resolve_rating(entries, rating_rules) == FinalRating.BBB

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_rule_gap_falls_back_to_aaa(self, rating_rules, pair_factory):
        """A worst case with no rule is rated AAA, not the riskiest rating."""
        assert resolve_rating([pair_factory(Severity.LOW, Impact.HIGH)], rating_rules) == FinalRating.AAA

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_custom_table_without_high_critical(self, rating_rules, pair_factory):
        """Dropping the (High, Critical) rule leaves that worst case rated AAA."""
        rules = [rule for rule in rating_rules if (rule.severity, rule.impact) != (Severity.HIGH, Impact.CRITICAL)]
        entries = [
            pair_factory(Severity.HIGH, Impact.CRITICAL),
            pair_factory(Severity.MEDIUM, Impact.LOW),
        ]
        assert resolve_rating(entries, rating_rules) == FinalRating.C
        assert resolve_rating(entries, rules) == FinalRating.AAA
        assert (Severity.HIGH, Impact.CRITICAL) in find_rule_gaps(rules)

    @pytest.mark.unit
    def test_first_matching_rule_wins(self, pair_factory):
        rules = [
            RatingRule(FinalRating.CC, Severity.HIGH, Impact.HIGH),
            RatingRule(FinalRating.B, Severity.HIGH, Impact.HIGH),
        ]
        assert resolve_rating([pair_factory(Severity.HIGH, Impact.HIGH)], rules) == FinalRating.CC

    @pytest.mark.unit
    def test_placeholder_never_matches(self, pair_factory):
        rules = [RatingRule(FinalRating.AAA)]
        assert find_rule(rules, Severity.CRITICAL, Impact.CRITICAL) is None
        assert resolve_rating([pair_factory(Severity.CRITICAL, Impact.CRITICAL)], rules) == FinalRating.AAA

    @pytest.mark.unit
    def test_accepts_any_iterable(self, rating_rules, pair_factory):
        entries = (pair_factory(Severity.HIGH, Impact.HIGH) for _ in range(3))
        assert resolve_rating(entries, rating_rules) == FinalRating.CC


class TestLegacyRating:
    """Tests for the fixed ladder."""

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("severity,impact,expected", [
        (Severity.INFORMATIONAL, Impact.CRITICAL, FinalRating.AA),
        (Severity.LOW, Impact.HIGH, FinalRating.A),
        (Severity.MEDIUM, Impact.LOW, FinalRating.BBB),
        (Severity.MEDIUM, Impact.MEDIUM, FinalRating.BBB),
        (Severity.MEDIUM, Impact.HIGH, FinalRating.BB),
        (Severity.MEDIUM, Impact.CRITICAL, FinalRating.B),
        (Severity.HIGH, Impact.LOW, FinalRating.CCC),
        (Severity.HIGH, Impact.HIGH, FinalRating.CC),
        (Severity.HIGH, Impact.CRITICAL, FinalRating.C),
        (Severity.CRITICAL, Impact.LOW, FinalRating.D),
    ])
    def test_ladder(self, pair_factory, severity, impact, expected):
        assert resolve_rating_legacy([pair_factory(severity, impact)]) == expected

    @pytest.mark.unit
    def test_empty_is_aaa(self):
        assert resolve_rating_legacy([]) == FinalRating.AAA


class TestRuleTableChecks:
    """Tests for placeholder detection and gap listing."""

    @pytest.mark.unit
    def test_placeholder_must_be_aaa(self):
        assert has_placeholder_rule([RatingRule(FinalRating.AAA)])
        assert not has_placeholder_rule([RatingRule(FinalRating.AA)])
        assert not has_placeholder_rule([RatingRule(FinalRating.AAA, Severity.LOW, Impact.LOW)])

    @pytest.mark.unit
    def test_all_pairs_missing(self):
        assert len(find_rule_gaps([])) == len(Severity) * len(Impact)

    @pytest.mark.unit
    def test_complete_table_has_no_gaps(self):
        rules = [RatingRule(FinalRating.D, severity, impact) for severity in Severity for impact in Impact]
        assert find_rule_gaps(rules) == []
