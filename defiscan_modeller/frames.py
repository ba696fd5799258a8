"""
DataFrame views of the modeller data.

The dashboard edits configuration and projects as tables. These helpers turn
the typed model into pandas DataFrames with display-string cells and read the
edited frames back. Reading back is lenient: cells outside a domain fall back
to the conservative value, blank rows are dropped.
"""

from typing import List, Optional

import pandas as pd

from .core.enums import FinalRating, FunctionType, Impact, Likelihood, Severity
from .core.models import (
    AdminGovernance,
    DependencyGovernance,
    FunctionClassificationEntry,
    GovernanceConfig,
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    OperatorGovernance,
    RatingRule,
    SeverityMatrix,
)
from .core.severity import resolve_severity_from_governance

ENTRY_COLUMNS = [
    "function",
    "impact",
    "function_type",
    "governance_type",
    "voting_delay_days",
    "required_voters",
    "name",
    "severity",
]

RULE_COLUMNS = ["rating", "severity", "impact", "description"]

VOTING_COLUMNS = ["likelihood", "voting_min_delay_days", "voting_min_voters", "description"]

NAMED_LIKELIHOOD_COLUMNS = ["name", "likelihood"]


def _is_missing(value) -> bool:
    """None or a pandas missing marker; strings, even empty ones, are values."""
    if value is None:
        return True
    if isinstance(value, str):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_blank(value) -> bool:
    if isinstance(value, str):
        return value.strip() == ""
    return _is_missing(value)


def _optional_number(value) -> Optional[float]:
    if _is_blank(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # Clamped like the form inputs: never negative
    number = max(number, 0.0)
    return int(number) if number.is_integer() else number


# =============================================================================
# SEVERITY MATRIX
# =============================================================================

def matrix_to_frame(matrix: SeverityMatrix) -> pd.DataFrame:
    """Impact rows x Likelihood columns of severity labels."""
    return pd.DataFrame(
        [[matrix[impact][likelihood].value for likelihood in Likelihood] for impact in Impact],
        index=[impact.value for impact in Impact],
        columns=[likelihood.value for likelihood in Likelihood],
    )


def frame_to_matrix(frame: pd.DataFrame, base: SeverityMatrix) -> SeverityMatrix:
    """Read an edited matrix frame; invalid cells keep the base value."""
    matrix = {impact: dict(base[impact]) for impact in Impact}
    for impact in Impact:
        for likelihood in Likelihood:
            try:
                cell = frame.at[impact.value, likelihood.value]
            except KeyError:
                continue
            severity = Severity.parse(cell)
            if severity is not None:
                matrix[impact][likelihood] = severity
    return matrix


# =============================================================================
# RATING RULES
# =============================================================================

def rules_to_frame(rules: List[RatingRule]) -> pd.DataFrame:
    """
    Editable rule rows.

    Rules with a blank severity or impact (the AAA placeholder row included)
    never match and are left out; ``frame_to_rules`` puts them back.
    """
    rows = [
        {
            "rating": rule.rating.value,
            "severity": rule.severity.value,
            "impact": rule.impact.value,
            "description": rule.description,
        }
        for rule in rules
        if rule.is_complete
    ]
    return pd.DataFrame(rows, columns=RULE_COLUMNS)


def frame_to_rules(frame: pd.DataFrame, rules: List[RatingRule]) -> List[RatingRule]:
    """
    Read edited rule rows back, keeping the existing incomplete rows first.

    Rows with a rating, severity or impact outside their domain are dropped.
    """
    result = [rule for rule in rules if not rule.is_complete]
    for row in frame.to_dict("records"):
        rating = FinalRating.parse(row.get("rating"))
        severity = Severity.parse(row.get("severity"))
        impact = Impact.parse(row.get("impact"))
        if rating is None or severity is None or impact is None:
            continue
        description = row.get("description")
        result.append(RatingRule(
            rating=rating,
            severity=severity,
            impact=impact,
            description="" if _is_blank(description) else str(description),
        ))
    return result


# =============================================================================
# LIKELIHOOD MAPPING
# =============================================================================

def voting_rules_to_frame(rules: List[LikelihoodMappingRule]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "likelihood": rule.likelihood.value,
                "voting_min_delay_days": rule.voting_min_delay_days,
                "voting_min_voters": rule.voting_min_voters,
                "description": rule.description,
            }
            for rule in rules
        ],
        columns=VOTING_COLUMNS,
    )


def frame_to_voting_rules(frame: pd.DataFrame) -> List[LikelihoodMappingRule]:
    """Read the voting ladder back in row order; blank thresholds count as 0."""
    rules = []
    for row in frame.to_dict("records"):
        likelihood = Likelihood.parse(row.get("likelihood"))
        if likelihood is None:
            continue
        description = row.get("description")
        rules.append(LikelihoodMappingRule(
            likelihood=likelihood,
            voting_min_delay_days=_optional_number(row.get("voting_min_delay_days")) or 0,
            voting_min_voters=_optional_number(row.get("voting_min_voters")) or 0,
            description="" if _is_blank(description) else str(description),
        ))
    return rules


def named_likelihoods_to_frame(mapping: dict) -> pd.DataFrame:
    return pd.DataFrame(
        [{"name": name, "likelihood": likelihood.value} for name, likelihood in mapping.items()],
        columns=NAMED_LIKELIHOOD_COLUMNS,
    )


def frame_to_named_likelihoods(frame: pd.DataFrame) -> dict:
    """Name -> Likelihood; blank names are dropped, invalid likelihoods read as High."""
    mapping = {}
    for row in frame.to_dict("records"):
        name = row.get("name")
        if _is_blank(name):
            continue
        mapping[str(name).strip()] = Likelihood.parse(row.get("likelihood")) or Likelihood.HIGH
    return mapping


def likelihood_config_from_frames(
    config: GovernanceLikelihoodConfiguration,
    voting: pd.DataFrame,
    dependencies: pd.DataFrame,
    operators: pd.DataFrame,
) -> GovernanceLikelihoodConfiguration:
    """New configuration from edited frames; mechanism likelihoods are kept."""
    return GovernanceLikelihoodConfiguration(
        voting=frame_to_voting_rules(voting),
        eoa=config.eoa,
        multisig=config.multisig,
        multisig_delay_7d=config.multisig_delay_7d,
        security_council=config.security_council,
        dependencies=frame_to_named_likelihoods(dependencies),
        operators=frame_to_named_likelihoods(operators),
    )


# =============================================================================
# PROJECT ENTRIES
# =============================================================================

def _governance_row(governance: GovernanceConfig) -> dict:
    row = {
        "function_type": governance.function_type.value,
        "governance_type": None,
        "voting_delay_days": None,
        "required_voters": None,
        "name": None,
    }
    if isinstance(governance, AdminGovernance):
        row["governance_type"] = governance.governance_type
        row["voting_delay_days"] = governance.voting_delay_days
        row["required_voters"] = governance.required_voters
    else:
        row["name"] = governance.name
    return row


def entries_to_frame(entries: List[FunctionClassificationEntry]) -> pd.DataFrame:
    rows = []
    for entry in entries:
        row = {"function": entry.function, "impact": entry.impact.value}
        row.update(_governance_row(entry.governance))
        row["severity"] = entry.severity.value
        rows.append(row)
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def row_to_governance(row: dict) -> GovernanceConfig:
    """
    Governance variant described by an entry row.

    Only a missing governance type (a freshly added row) defaults to EOA. An
    empty or unknown mechanism string is kept as given so it still resolves
    to High likelihood.
    """
    function_type = row.get("function_type")
    name = "" if _is_blank(row.get("name")) else str(row["name"]).strip()

    if function_type == FunctionType.DEPENDENCY.value:
        return DependencyGovernance(name=name)
    if function_type == FunctionType.OPERATOR.value:
        return OperatorGovernance(name=name)

    governance_type = row.get("governance_type")
    return AdminGovernance(
        governance_type="eoa" if _is_missing(governance_type) else str(governance_type),
        voting_delay_days=_optional_number(row.get("voting_delay_days")),
        required_voters=_optional_number(row.get("required_voters")),
    )


def frame_to_entries(
    frame: pd.DataFrame,
    previous: List[FunctionClassificationEntry],
    matrix: SeverityMatrix,
    config: GovernanceLikelihoodConfiguration,
) -> List[FunctionClassificationEntry]:
    """
    Read edited entry rows back.

    A row at the position of an existing entry keeps that entry's cached
    severity unless its impact or governance changed; new or changed rows get
    a freshly resolved severity.
    """
    entries = []
    for position, row in enumerate(frame.to_dict("records")):
        impact = Impact.parse(row.get("impact")) or Impact.LOW
        governance = row_to_governance(row)
        function = "" if _is_blank(row.get("function")) else str(row["function"])

        old = previous[position] if position < len(previous) else None
        if old is not None and old.impact == impact and old.governance == governance:
            severity = old.severity
        else:
            severity = resolve_severity_from_governance(impact, governance, matrix, config)

        entries.append(FunctionClassificationEntry(
            function=function,
            impact=impact,
            governance=governance,
            severity=severity,
        ))
    return entries
