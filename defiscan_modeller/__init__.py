"""
DeFiScan Modeller.

Rates DeFi protocol governance from the privileged functions of each protocol.
Every function is tagged with an Impact and the mechanism controlling it; the
pipeline derives Likelihood, Severity and finally a letter rating (AAA to D)
per project and across all projects.

Quick Start:
    from defiscan_modeller import default_state, add_entry, summarize, Impact

    state = default_state()
    project_id = state.projects[0].id
    state = add_entry(state, project_id, "setOracle", Impact.CRITICAL)

    report = summarize(state)
    print(report["global_rating"].value)  # "D": EOA-controlled critical function
"""

__version__ = "2.0.0"

# Core pipeline (imported before the modules that depend on it)
from .core import (
    # Domains
    FinalRating,
    FunctionType,
    Impact,
    Likelihood,
    Severity,
    # Models
    AdminGovernance,
    DependencyGovernance,
    OperatorGovernance,
    LikelihoodMappingRule,
    GovernanceLikelihoodConfiguration,
    RatingRule,
    SeverityImpact,
    FunctionClassificationEntry,
    FunctionClassificationTable,
    ModellerState,
    # Resolvers
    resolve_likelihood,
    resolve_severity,
    resolve_severity_from_governance,
    resolve_rating,
    resolve_rating_legacy,
    worst_case,
    find_rule_gaps,
    # Aggregation
    project_rating,
    global_rating,
    summarize,
    # State
    default_state,
    apply_configuration,
    recompute_state,
    add_project,
    remove_project,
    add_entry,
    update_entry,
    remove_entry,
)

from .thresholds import (
    RATING_SCALE,
    DEFAULT_SEVERITY_MATRIX,
    DEFAULT_RATING_RULES,
    DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG,
    get_rating_info,
)

from .exceptions import ConfigurationError

from .storage import LocalStateCache, load_projects_file, parse_projects

__all__ = [
    # Version
    "__version__",
    # Domains
    "FinalRating",
    "FunctionType",
    "Impact",
    "Likelihood",
    "Severity",
    # Models
    "AdminGovernance",
    "DependencyGovernance",
    "OperatorGovernance",
    "LikelihoodMappingRule",
    "GovernanceLikelihoodConfiguration",
    "RatingRule",
    "SeverityImpact",
    "FunctionClassificationEntry",
    "FunctionClassificationTable",
    "ModellerState",
    # Resolvers
    "resolve_likelihood",
    "resolve_severity",
    "resolve_severity_from_governance",
    "resolve_rating",
    "resolve_rating_legacy",
    "worst_case",
    "find_rule_gaps",
    # Aggregation
    "project_rating",
    "global_rating",
    "summarize",
    # State
    "default_state",
    "apply_configuration",
    "recompute_state",
    "add_project",
    "remove_project",
    "add_entry",
    "update_entry",
    "remove_entry",
    # Defaults
    "RATING_SCALE",
    "DEFAULT_SEVERITY_MATRIX",
    "DEFAULT_RATING_RULES",
    "DEFAULT_GOVERNANCE_LIKELIHOOD_CONFIG",
    "get_rating_info",
    # Errors
    "ConfigurationError",
    # Storage
    "LocalStateCache",
    "load_projects_file",
    "parse_projects",
]
