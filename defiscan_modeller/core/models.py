"""
Data model for governance classification and rating configuration.

The dataclasses here are the typed form of the modeller's data. Loosely-typed
persisted data (camelCase dicts, legacy shapes) is normalized into them once,
in ``defiscan_modeller.migration``; the resolvers only ever see these types.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Union

from .enums import FinalRating, FunctionType, Impact, Likelihood, Severity


# =============================================================================
# GOVERNANCE VARIANTS
# =============================================================================

GOVERNANCE_TYPES = ["voting", "multisig_delay_7d", "security_council", "eoa", "multisig"]

GOVERNANCE_TYPE_LABELS = {
    "voting": "Voting",
    "multisig_delay_7d": "Multisig with 7d delay",
    "security_council": "Security Council",
    "eoa": "EOA",
    "multisig": "Multisig",
}


@dataclass
class AdminGovernance:
    """Admin function gated by a governance mechanism."""
    function_type: ClassVar[FunctionType] = FunctionType.ADMIN

    governance_type: str = "eoa"  # One of GOVERNANCE_TYPES; other values resolve to High
    voting_delay_days: Optional[float] = None
    required_voters: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "functionType": self.function_type.value,
            "governanceType": self.governance_type,
        }
        if self.voting_delay_days is not None:
            data["votingDelayDays"] = self.voting_delay_days
        if self.required_voters is not None:
            data["requiredVoters"] = self.required_voters
        return data


@dataclass
class DependencyGovernance:
    """External protocol or oracle dependency, looked up by name."""
    function_type: ClassVar[FunctionType] = FunctionType.DEPENDENCY

    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"functionType": self.function_type.value, "name": self.name}


@dataclass
class OperatorGovernance:
    """Named operator role, looked up by name."""
    function_type: ClassVar[FunctionType] = FunctionType.OPERATOR

    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"functionType": self.function_type.value, "name": self.name}


GovernanceConfig = Union[AdminGovernance, DependencyGovernance, OperatorGovernance]


# =============================================================================
# LIKELIHOOD CONFIGURATION
# =============================================================================

@dataclass
class LikelihoodMappingRule:
    """One rung of the voting-threshold ladder."""
    likelihood: Likelihood
    voting_min_delay_days: float
    voting_min_voters: int
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "likelihood": self.likelihood.value,
            "votingMinDelayDays": self.voting_min_delay_days,
            "votingMinVoters": self.voting_min_voters,
            "description": self.description,
        }


@dataclass
class GovernanceLikelihoodConfiguration:
    """
    Likelihood assigned to each governance mechanism.

    ``voting`` is ordered strictest first; the resolver returns the first rung
    whose thresholds are met. Names missing from ``dependencies`` or
    ``operators`` resolve to High.
    """
    voting: List[LikelihoodMappingRule]
    eoa: Likelihood = Likelihood.HIGH
    multisig: Likelihood = Likelihood.HIGH
    multisig_delay_7d: Likelihood = Likelihood.MEDIUM
    security_council: Likelihood = Likelihood.MEDIUM
    dependencies: Dict[str, Likelihood] = field(default_factory=dict)
    operators: Dict[str, Likelihood] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voting": [rule.to_dict() for rule in self.voting],
            "eoa": self.eoa.value,
            "multisig": self.multisig.value,
            "multisig_delay_7d": self.multisig_delay_7d.value,
            "security_council": self.security_council.value,
            "dependencies": {name: value.value for name, value in self.dependencies.items()},
            "operators": {name: value.value for name, value in self.operators.items()},
        }


# Legacy configuration shape: the voting ladder alone
LegacyLikelihoodConfiguration = List[LikelihoodMappingRule]

SeverityMatrix = Dict[Impact, Dict[Likelihood, Severity]]


# =============================================================================
# RATING RULES
# =============================================================================

@dataclass
class RatingRule:
    """
    Maps a worst-case (severity, impact) pair to a final rating.

    ``None`` severity and impact is the blank placeholder row ("no entries")
    that must always carry AAA.
    """
    rating: FinalRating
    severity: Optional[Severity] = None
    impact: Optional[Impact] = None
    description: str = ""

    @property
    def is_placeholder(self) -> bool:
        return self.severity is None and self.impact is None

    @property
    def is_complete(self) -> bool:
        """Both severity and impact set; only complete rules can match."""
        return self.severity is not None and self.impact is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rating": self.rating.value,
            "severity": self.severity.value if self.severity else "",
            "impact": self.impact.value if self.impact else "",
            "description": self.description,
        }


class SeverityImpact(NamedTuple):
    """A (severity, impact) pair; the worst case of a set of entries."""
    severity: Severity
    impact: Impact


# =============================================================================
# PROJECTS
# =============================================================================

@dataclass
class FunctionClassificationEntry:
    """A privileged function with its impact, governance and cached severity."""
    function: str
    impact: Impact
    governance: GovernanceConfig
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "function": self.function,
            "impact": self.impact.value,
            "governance": self.governance.to_dict(),
            "severity": self.severity.value,
        }


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class FunctionClassificationTable:
    """A project: a titled, ordered list of classified functions."""
    title: str
    entries: List[FunctionClassificationEntry] = field(default_factory=list)
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass
class ModellerState:
    """Complete working set: configuration plus all projects."""
    severity_matrix: SeverityMatrix
    likelihood_config: GovernanceLikelihoodConfiguration
    rating_rules: List[RatingRule]
    projects: List[FunctionClassificationTable] = field(default_factory=list)

    @property
    def all_entries(self) -> List[FunctionClassificationEntry]:
        return [entry for project in self.projects for entry in project.entries]

    def get_project(self, project_id: str) -> Optional[FunctionClassificationTable]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None
