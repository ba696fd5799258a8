"""
Governance Likelihood Resolver.

Maps how a function is controlled (voting, multisig, security council, EOA,
external dependency, operator role) to the Likelihood that the control can be
abused. The resolver is total: anything it cannot resolve is answered with
High, the most conservative likelihood, so missing configuration never
under-reports risk.
"""

from typing import List, Optional, Union

from .enums import Likelihood
from .models import (
    AdminGovernance,
    DependencyGovernance,
    GovernanceConfig,
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    OperatorGovernance,
)

FALLBACK_LIKELIHOOD = Likelihood.HIGH

# Fixed answers for non-voting mechanisms when only a bare voting ladder is
# configured (legacy configuration shape)
_LEGACY_MECHANISM_LIKELIHOODS = {
    "security_council": Likelihood.MEDIUM,
    "multisig_delay_7d": Likelihood.MEDIUM,
    "multisig": Likelihood.HIGH,
    "eoa": Likelihood.HIGH,
}

_MECHANISM_FIELDS = ("security_council", "multisig_delay_7d", "multisig", "eoa")


def _as_count(value) -> float:
    """Missing or non-numeric threshold inputs count as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def resolve_voting_likelihood(
    voting_delay_days: Optional[float],
    required_voters: Optional[int],
    rules: List[LikelihoodMappingRule],
) -> Likelihood:
    """
    Walk the voting ladder in list order and return the first rung met.

    The ladder's own ordering is authoritative: the resolver does not sort it
    or compare likelihoods, it trusts the configuration to list the strictest
    thresholds first.
    """
    delay = _as_count(voting_delay_days)
    voters = _as_count(required_voters)

    for rule in rules:
        if delay >= rule.voting_min_delay_days and voters >= rule.voting_min_voters:
            return rule.likelihood

    return FALLBACK_LIKELIHOOD


def _resolve_admin(
    governance: AdminGovernance,
    config: Union[GovernanceLikelihoodConfiguration, List[LikelihoodMappingRule]],
) -> Likelihood:
    legacy = isinstance(config, list)
    governance_type = governance.governance_type

    if governance_type == "voting":
        rules = config if legacy else config.voting
        return resolve_voting_likelihood(
            governance.voting_delay_days,
            governance.required_voters,
            rules,
        )

    if governance_type in _MECHANISM_FIELDS:
        if legacy:
            return _LEGACY_MECHANISM_LIKELIHOODS[governance_type]
        return getattr(config, governance_type)

    return FALLBACK_LIKELIHOOD


def resolve_likelihood(
    governance: GovernanceConfig,
    config: Union[GovernanceLikelihoodConfiguration, List[LikelihoodMappingRule]],
) -> Likelihood:
    """
    Resolve the likelihood of misuse for a governance configuration.

    Args:
        governance: Admin, Dependency or Operator governance variant
        config: Full likelihood configuration, or a bare voting ladder
            (legacy shape, non-voting mechanisms then use built-in values)

    Returns:
        The resolved Likelihood; High for anything unresolvable
    """
    if isinstance(governance, AdminGovernance):
        if isinstance(config, (list, GovernanceLikelihoodConfiguration)):
            return _resolve_admin(governance, config)
        return FALLBACK_LIKELIHOOD

    # Name lookups need the full configuration; a bare ladder has no mapping
    if not isinstance(config, GovernanceLikelihoodConfiguration):
        return FALLBACK_LIKELIHOOD

    if isinstance(governance, DependencyGovernance):
        return config.dependencies.get(governance.name, FALLBACK_LIKELIHOOD)

    if isinstance(governance, OperatorGovernance):
        return config.operators.get(governance.name, FALLBACK_LIKELIHOOD)

    return FALLBACK_LIKELIHOOD
