"""
Data Migration and Normalization Layer.

Bridges loosely-typed persisted data (JSON documents written by earlier
versions of the modeller) and the typed data model:
1. Shape migration: legacy dicts -> current camelCase dict shape (idempotent)
2. Strict parsing: current dict shape -> dataclasses (raises ConfigurationError)
3. Loading: migration + parsing per section, falling back to the shipped
   defaults when a section cannot be parsed (never raises)

Resolvers only ever receive the output of step 3.
"""

import logging
from typing import Any, Dict, List, Optional

from .config.settings import DEFAULT_PROJECT_TITLE
from .core.enums import FinalRating, FunctionType, Impact, Likelihood, Severity
from .core.models import (
    AdminGovernance,
    DependencyGovernance,
    FunctionClassificationEntry,
    FunctionClassificationTable,
    GovernanceConfig,
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    OperatorGovernance,
    RatingRule,
    SeverityMatrix,
)
from .core.rating import has_placeholder_rule
from .core.severity import is_complete_matrix
from .exceptions import ConfigurationError
from .thresholds import (
    DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG,
    default_likelihood_config,
    default_rating_rules,
    default_severity_matrix,
)

logger = logging.getLogger(__name__)

# Non-voting likelihoods given to a bare voting ladder when it is upgraded
LEGACY_CONFIG_DEFAULTS = {
    "eoa": "High",
    "multisig": "High",
    "multisig_delay_7d": "Medium",
    "security_council": "Medium",
}

# Impact given to entries whose stored impact is outside the domain
FALLBACK_IMPACT = Impact.CRITICAL


# =============================================================================
# SHAPE MIGRATION (dict -> dict)
# =============================================================================

def migrate_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring one stored entry to the current governance shape.

    - ``governance.functionType`` present: unchanged
    - ``governance.type`` / ``governance.governanceType`` only: legacy Admin
      shape, rewritten with an explicit ``functionType``
    - neither: very old entry with a raw ``likelihood``; the likelihood is
      dropped and the entry becomes EOA-controlled
    """
    governance = entry.get("governance")

    if isinstance(governance, dict) and governance.get("functionType"):
        return entry

    if isinstance(governance, dict) and (governance.get("type") or governance.get("governanceType")):
        migrated = {
            "functionType": FunctionType.ADMIN.value,
            "governanceType": governance.get("type") or governance.get("governanceType"),
        }
        if governance.get("votingDelayDays") is not None:
            migrated["votingDelayDays"] = governance["votingDelayDays"]
        if governance.get("requiredVoters") is not None:
            migrated["requiredVoters"] = governance["requiredVoters"]
        return {**entry, "governance": migrated}

    result = {key: value for key, value in entry.items() if key != "likelihood"}
    result["governance"] = {"functionType": FunctionType.ADMIN.value, "governanceType": "eoa"}
    return result


def migrate_table_data(tables: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Apply ``migrate_entry`` to every entry of every stored project."""
    if not isinstance(tables, list):
        raise ConfigurationError("Projects must be a list")

    migrated = []
    for table in tables:
        if not isinstance(table, dict) or not isinstance(table.get("entries"), list):
            raise ConfigurationError("Project must be a mapping with an 'entries' list")
        entries = []
        for entry in table["entries"]:
            if not isinstance(entry, dict):
                raise ConfigurationError("Project entry must be a mapping")
            entries.append(migrate_entry(entry))
        migrated.append({**table, "entries": entries})
    return migrated


def migrate_governance_likelihood_config(data: Any) -> Dict[str, Any]:
    """
    Bring a stored likelihood configuration to the current shape.

    - mapping with ``voting``: defaults overlaid with the data, missing
      ``dependencies`` / ``operators`` filled with empty mappings
    - list: a bare voting ladder from before per-mechanism likelihoods existed
    - anything else: shipped defaults
    """
    defaults = DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG.to_dict()

    if isinstance(data, dict) and "voting" in data:
        return {
            **defaults,
            **data,
            "dependencies": data.get("dependencies") or {},
            "operators": data.get("operators") or {},
        }

    if isinstance(data, list):
        return {
            "voting": data,
            **LEGACY_CONFIG_DEFAULTS,
            "dependencies": {},
            "operators": {},
        }

    return defaults


def is_current_rating_rules(rules: Any) -> bool:
    """Stored rule tables without the (AAA, "", "") row are an obsolete format."""
    if not isinstance(rules, list):
        return False
    return any(
        isinstance(rule, dict)
        and rule.get("rating") == FinalRating.AAA.value
        and rule.get("severity") == ""
        and rule.get("impact") == ""
        for rule in rules
    )


# =============================================================================
# STRICT PARSING (dict -> model)
# =============================================================================

def _number(value: Any) -> Optional[float]:
    """Numeric input or None; numeric strings are accepted."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def _likelihood(value: Any, where: str) -> Likelihood:
    likelihood = Likelihood.parse(value)
    if likelihood is None:
        raise ConfigurationError(f"Invalid likelihood {value!r} for {where}")
    return likelihood


def parse_governance(data: Dict[str, Any]) -> GovernanceConfig:
    """
    Build the governance variant from a current-shape dict.

    Unknown function types become an Admin variant with no mechanism, which
    the resolver answers with High.
    """
    function_type = data.get("functionType")

    if function_type == FunctionType.DEPENDENCY.value:
        return DependencyGovernance(name=str(data.get("name") or ""))

    if function_type == FunctionType.OPERATOR.value:
        return OperatorGovernance(name=str(data.get("name") or ""))

    if function_type == FunctionType.ADMIN.value:
        return AdminGovernance(
            governance_type=str(data.get("governanceType") or data.get("type") or ""),
            voting_delay_days=_number(data.get("votingDelayDays")),
            required_voters=_number(data.get("requiredVoters")),
        )

    return AdminGovernance(governance_type="")


def parse_entry(data: Dict[str, Any]) -> FunctionClassificationEntry:
    """
    Build an entry from a migrated dict.

    Impacts outside the domain are read as Critical. An invalid stored severity
    is read as Critical too; loaders recompute severities right after parsing.
    """
    governance = data.get("governance")
    if not isinstance(governance, dict):
        raise ConfigurationError("Entry governance must be a mapping")

    impact = Impact.parse(data.get("impact"))
    if impact is None:
        logger.warning("Entry %r has invalid impact %r, using %s",
                       data.get("function"), data.get("impact"), FALLBACK_IMPACT.value)
        impact = FALLBACK_IMPACT

    severity = Severity.parse(data.get("severity")) or Severity.CRITICAL

    return FunctionClassificationEntry(
        function=str(data.get("function") or ""),
        impact=impact,
        governance=parse_governance(governance),
        severity=severity,
    )


def parse_table(data: Dict[str, Any]) -> FunctionClassificationTable:
    table = FunctionClassificationTable(
        title=str(data.get("title") or ""),
        entries=[parse_entry(entry) for entry in data.get("entries", [])],
    )
    if data.get("id"):
        table.id = str(data["id"])
    return table


def parse_likelihood_config(data: Dict[str, Any]) -> GovernanceLikelihoodConfiguration:
    """Build the likelihood configuration from a migrated dict."""
    voting_data = data.get("voting")
    if not isinstance(voting_data, list):
        raise ConfigurationError("Likelihood configuration 'voting' must be a list")

    voting = []
    for index, rule in enumerate(voting_data):
        if not isinstance(rule, dict):
            raise ConfigurationError(f"Voting rule {index} must be a mapping")
        min_delay = _number(rule.get("votingMinDelayDays"))
        min_voters = _number(rule.get("votingMinVoters"))
        if min_delay is None or min_voters is None:
            raise ConfigurationError(f"Voting rule {index} needs numeric thresholds")
        voting.append(LikelihoodMappingRule(
            likelihood=_likelihood(rule.get("likelihood"), f"voting rule {index}"),
            voting_min_delay_days=min_delay,
            voting_min_voters=min_voters,
            description=str(rule.get("description") or ""),
        ))

    mappings = {}
    for key in ("dependencies", "operators"):
        raw = data.get(key) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Likelihood configuration '{key}' must be a mapping")
        mappings[key] = {str(name): _likelihood(value, f"{key}[{name}]") for name, value in raw.items()}

    return GovernanceLikelihoodConfiguration(
        voting=voting,
        eoa=_likelihood(data.get("eoa"), "eoa"),
        multisig=_likelihood(data.get("multisig"), "multisig"),
        multisig_delay_7d=_likelihood(data.get("multisig_delay_7d"), "multisig_delay_7d"),
        security_council=_likelihood(data.get("security_council"), "security_council"),
        dependencies=mappings["dependencies"],
        operators=mappings["operators"],
    )


def parse_severity_matrix(data: Any) -> SeverityMatrix:
    """
    Build a severity matrix from its nested-dict or flat-list form.

    Raises ConfigurationError unless all 16 cells hold a valid Severity.
    """
    if isinstance(data, list):
        data = _flat_rows_to_nested(data)
    if not isinstance(data, dict):
        raise ConfigurationError("Severity matrix must be a mapping or a list of cells")

    matrix: Dict[Any, Dict[Any, Any]] = {}
    for impact in Impact:
        row = data.get(impact.value)
        if not isinstance(row, dict):
            raise ConfigurationError(f"Severity matrix is missing impact {impact.value}")
        matrix[impact] = {}
        for likelihood in Likelihood:
            severity = Severity.parse(row.get(likelihood.value))
            if severity is None:
                raise ConfigurationError(
                    f"Severity matrix cell {impact.value}/{likelihood.value} is invalid: "
                    f"{row.get(likelihood.value)!r}"
                )
            matrix[impact][likelihood] = severity

    if not is_complete_matrix(matrix):
        raise ConfigurationError("Severity matrix is incomplete")
    return matrix


def _flat_rows_to_nested(rows: List[Any]) -> Dict[str, Dict[str, Any]]:
    nested: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        if not isinstance(row, dict):
            raise ConfigurationError("Severity matrix cell must be a mapping")
        nested.setdefault(row.get("impact"), {})[row.get("likelihood")] = row.get("severity")
    return nested


def severity_matrix_to_dict(matrix: SeverityMatrix) -> Dict[str, Dict[str, str]]:
    return {
        impact.value: {likelihood.value: severity.value for likelihood, severity in row.items()}
        for impact, row in matrix.items()
    }


def parse_rating_rules(data: List[Any]) -> List[RatingRule]:
    """Build rating rules; blank severity/impact becomes None."""
    if not isinstance(data, list):
        raise ConfigurationError("Rating rules must be a list")

    rules = []
    for index, row in enumerate(data):
        if not isinstance(row, dict):
            raise ConfigurationError(f"Rating rule {index} must be a mapping")

        rating = FinalRating.parse(row.get("rating"))
        if rating is None:
            raise ConfigurationError(f"Rating rule {index} has invalid rating {row.get('rating')!r}")

        severity = None
        if row.get("severity", ""):
            severity = Severity.parse(row["severity"])
            if severity is None:
                raise ConfigurationError(f"Rating rule {index} has invalid severity {row['severity']!r}")

        impact = None
        if row.get("impact", ""):
            impact = Impact.parse(row["impact"])
            if impact is None:
                raise ConfigurationError(f"Rating rule {index} has invalid impact {row['impact']!r}")

        rules.append(RatingRule(
            rating=rating,
            severity=severity,
            impact=impact,
            description=str(row.get("description") or ""),
        ))
    return rules


# =============================================================================
# LOADING (never raises; defaults on failure)
# =============================================================================

def load_severity_matrix(data: Any) -> SeverityMatrix:
    if data is None:
        return default_severity_matrix()
    try:
        return parse_severity_matrix(data)
    except ConfigurationError as e:
        logger.warning("Failed to load severity matrix, using defaults: %s", e)
        return default_severity_matrix()


def load_likelihood_config(data: Any) -> GovernanceLikelihoodConfiguration:
    if data is None:
        return default_likelihood_config()
    try:
        return parse_likelihood_config(migrate_governance_likelihood_config(data))
    except ConfigurationError as e:
        logger.warning("Failed to load governance likelihood config, using defaults: %s", e)
        return default_likelihood_config()


def load_rating_rules(data: Any) -> List[RatingRule]:
    if data is None:
        return default_rating_rules()
    if not is_current_rating_rules(data):
        logger.warning("Old rating rules format detected, resetting to defaults")
        return default_rating_rules()
    try:
        rules = parse_rating_rules(data)
    except ConfigurationError as e:
        logger.warning("Failed to load rating rules, using defaults: %s", e)
        return default_rating_rules()

    # Parsed placeholder must still be the AAA row
    if not has_placeholder_rule(rules):
        return default_rating_rules()
    return rules


def load_projects(data: Any) -> List[FunctionClassificationTable]:
    """
    Migrate and parse stored projects.

    Severities are left as stored; callers recompute them against the active
    configuration. Unreadable data yields a single empty project.
    """
    if data is None:
        return [FunctionClassificationTable(title=DEFAULT_PROJECT_TITLE)]
    try:
        return [parse_table(table) for table in migrate_table_data(data)]
    except ConfigurationError as e:
        logger.warning("Failed to load function tables, starting empty: %s", e)
        return [FunctionClassificationTable(title=DEFAULT_PROJECT_TITLE)]
