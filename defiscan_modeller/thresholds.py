"""
Rating Thresholds and Defaults.

Shipped configuration for the governance rating pipeline:
- Rating scale (AAA to D) with the meaning of each grade
- Severity matrix (Impact x Likelihood -> Severity)
- Voting-threshold ladder and per-mechanism likelihoods
- Rating rule table (worst-case Severity x Impact -> FinalRating)

Every default is exposed both as a module constant and through a
``default_*()`` accessor that returns a fresh deep copy, so callers can edit
their configuration without touching the shipped values.
"""

import copy
from typing import List

from .core.enums import FinalRating, Impact, Likelihood, Severity
from .core.models import (
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    RatingRule,
    SeverityMatrix,
)

# =============================================================================
# RATING SCALE
# =============================================================================

RATING_SCALE = {
    FinalRating.AAA: {
        "scores": "Immutable and autonomous",
        "description": "No Admins, Dependencies or Operators identified",
    },
    FinalRating.AA: {
        "scores": "Informational Severity risks",
        "description": "Centralization risks are Informational only.",
    },
    FinalRating.A: {
        "scores": "Low Severity risks",
        "description": "Centralization risks are Low, not exposing High or Critical Impact threat vectors.",
    },
    FinalRating.BBB: {
        "scores": "Medium Severity risks with Medium Impact",
        "description": "Centralization risks are Medium based on a Medium Impact threat vector.",
    },
    FinalRating.BB: {
        "scores": "Medium Severity risks with High Impact",
        "description": "Centralization risks are Medium based on a High Impact threat vector.",
    },
    FinalRating.B: {
        "scores": "Medium Severity risks with Critical Impact",
        "description": "Centralization risks are Medium based on a Critical Impact threat vector.",
    },
    FinalRating.CCC: {
        "scores": "High Severity risks with Medium Impact",
        "description": "Centralization risks are High based on a Medium Impact threat vector.",
    },
    FinalRating.CC: {
        "scores": "High Severity risks with High Impact",
        "description": "Centralization risks are High based on a High Impact threat vector.",
    },
    FinalRating.C: {
        "scores": "High Severity risks with Critical Impact",
        "description": "Centralization risks are High based on a Critical Impact threat vector.",
    },
    FinalRating.D: {
        "scores": "Critical Severity risks",
        "description": "Centralization risks are Critical.",
    },
}

RATING_COLORS = {
    FinalRating.AAA: "#16a34a",
    FinalRating.AA: "#22c55e",
    FinalRating.A: "#4ade80",
    FinalRating.BBB: "#eab308",
    FinalRating.BB: "#ca8a04",
    FinalRating.B: "#f97316",
    FinalRating.CCC: "#ea580c",
    FinalRating.CC: "#c2410c",
    FinalRating.C: "#ef4444",
    FinalRating.D: "#b91c1c",
}

SEVERITY_COLORS = {
    Severity.INFORMATIONAL: "#3b82f6",
    Severity.LOW: "#22c55e",
    Severity.MEDIUM: "#eab308",
    Severity.HIGH: "#f97316",
    Severity.CRITICAL: "#ef4444",
}

# =============================================================================
# SEVERITY MATRIX
# =============================================================================

DEFAULT_SEVERITY_MATRIX: SeverityMatrix = {
    Impact.LOW: {
        Likelihood.MITIGATED: Severity.INFORMATIONAL,
        Likelihood.LOW: Severity.INFORMATIONAL,
        Likelihood.MEDIUM: Severity.LOW,
        Likelihood.HIGH: Severity.MEDIUM,
    },
    Impact.MEDIUM: {
        Likelihood.MITIGATED: Severity.INFORMATIONAL,
        Likelihood.LOW: Severity.LOW,
        Likelihood.MEDIUM: Severity.MEDIUM,
        Likelihood.HIGH: Severity.HIGH,
    },
    Impact.HIGH: {
        Likelihood.MITIGATED: Severity.LOW,
        Likelihood.LOW: Severity.MEDIUM,
        Likelihood.MEDIUM: Severity.HIGH,
        Likelihood.HIGH: Severity.CRITICAL,
    },
    Impact.CRITICAL: {
        Likelihood.MITIGATED: Severity.MEDIUM,
        Likelihood.LOW: Severity.HIGH,
        Likelihood.MEDIUM: Severity.CRITICAL,
        Likelihood.HIGH: Severity.CRITICAL,
    },
}

# =============================================================================
# GOVERNANCE LIKELIHOOD
# =============================================================================

DEFAULT_VOTING_LIKELIHOOD_RULES: List[LikelihoodMappingRule] = [
    LikelihoodMappingRule(
        likelihood=Likelihood.MITIGATED,
        voting_min_delay_days=7,
        voting_min_voters=20,
        description="Trustless Voting with total Delay >= 7 days and Consensus Threshold >= 20 voters",
    ),
    LikelihoodMappingRule(
        likelihood=Likelihood.LOW,
        voting_min_delay_days=4,
        voting_min_voters=10,
        description="Trustless Voting with total Delay >= 4 days and Consensus Threshold >= 10 voters",
    ),
    LikelihoodMappingRule(
        likelihood=Likelihood.MEDIUM,
        voting_min_delay_days=2,
        voting_min_voters=5,
        description="Trustless Voting with total Delay >= 2 days and Consensus Threshold >= 5 voters, "
                    "OR Security Council, OR Multisig with Delay >= 7 days",
    ),
    LikelihoodMappingRule(
        likelihood=Likelihood.HIGH,
        voting_min_delay_days=0,
        voting_min_voters=0,
        description="Insignificant Voting control",
    ),
]

DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG = GovernanceLikelihoodConfiguration(
    voting=DEFAULT_VOTING_LIKELIHOOD_RULES,
    eoa=Likelihood.HIGH,
    multisig=Likelihood.HIGH,
    multisig_delay_7d=Likelihood.MEDIUM,
    security_council=Likelihood.MEDIUM,
    dependencies={},
    operators={},
)

# =============================================================================
# RATING RULES
# =============================================================================

def _rule(rating: FinalRating, severity: Severity, impact: Impact) -> RatingRule:
    return RatingRule(
        rating=rating,
        severity=severity,
        impact=impact,
        description=RATING_SCALE[rating]["scores"],
    )


DEFAULT_RATING_RULES: List[RatingRule] = [
    # Placeholder row for projects without entries
    RatingRule(rating=FinalRating.AAA, severity=None, impact=None,
               description=RATING_SCALE[FinalRating.AAA]["scores"]),
    _rule(FinalRating.AA, Severity.INFORMATIONAL, Impact.LOW),
    _rule(FinalRating.AA, Severity.INFORMATIONAL, Impact.MEDIUM),
    _rule(FinalRating.A, Severity.LOW, Impact.LOW),
    _rule(FinalRating.A, Severity.LOW, Impact.MEDIUM),
    _rule(FinalRating.BBB, Severity.MEDIUM, Impact.LOW),
    _rule(FinalRating.BBB, Severity.MEDIUM, Impact.MEDIUM),
    _rule(FinalRating.BB, Severity.MEDIUM, Impact.HIGH),
    _rule(FinalRating.B, Severity.MEDIUM, Impact.CRITICAL),
    _rule(FinalRating.CCC, Severity.HIGH, Impact.LOW),
    _rule(FinalRating.CCC, Severity.HIGH, Impact.MEDIUM),
    _rule(FinalRating.CC, Severity.HIGH, Impact.HIGH),
    _rule(FinalRating.C, Severity.HIGH, Impact.CRITICAL),
    _rule(FinalRating.D, Severity.CRITICAL, Impact.LOW),
    _rule(FinalRating.D, Severity.CRITICAL, Impact.MEDIUM),
    _rule(FinalRating.D, Severity.CRITICAL, Impact.HIGH),
    _rule(FinalRating.D, Severity.CRITICAL, Impact.CRITICAL),
]


# =============================================================================
# ACCESSORS
# =============================================================================

def default_severity_matrix() -> SeverityMatrix:
    return copy.deepcopy(DEFAULT_SEVERITY_MATRIX)


def default_likelihood_config() -> GovernanceLikelihoodConfiguration:
    return copy.deepcopy(DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG)


def default_rating_rules() -> List[RatingRule]:
    return copy.deepcopy(DEFAULT_RATING_RULES)


def get_rating_info(rating: FinalRating) -> dict:
    """Get the scale description of a rating."""
    info = RATING_SCALE[rating]
    return {
        "rating": rating.value,
        "scores": info["scores"],
        "description": info["description"],
        "color": RATING_COLORS[rating],
    }
