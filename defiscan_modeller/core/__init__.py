"""Core rating pipeline: likelihood -> severity -> rating, plus state reducers."""

from .enums import FinalRating, FunctionType, Impact, Likelihood, Severity

from .models import (
    GOVERNANCE_TYPES,
    GOVERNANCE_TYPE_LABELS,
    AdminGovernance,
    DependencyGovernance,
    OperatorGovernance,
    GovernanceConfig,
    LikelihoodMappingRule,
    GovernanceLikelihoodConfiguration,
    SeverityMatrix,
    RatingRule,
    SeverityImpact,
    FunctionClassificationEntry,
    FunctionClassificationTable,
    ModellerState,
)

from .likelihood import resolve_likelihood, resolve_voting_likelihood

from .severity import (
    resolve_severity,
    resolve_severity_from_governance,
    is_complete_matrix,
    matrix_to_flat,
    matrix_from_flat,
)

from .rating import (
    worst_case,
    find_rule,
    resolve_rating,
    resolve_rating_legacy,
    has_placeholder_rule,
    find_rule_gaps,
)

from .aggregation import (
    project_rating,
    global_rating,
    project_ratings,
    group_projects_by_rating,
    scale_position,
    summarize,
)

from .state import (
    default_state,
    recompute_entries,
    recompute_state,
    apply_configuration,
    add_project,
    remove_project,
    rename_project,
    import_projects,
    add_entry,
    update_entry,
    remove_entry,
    replace_entries,
)

__all__ = [
    # Domains
    "FinalRating",
    "FunctionType",
    "Impact",
    "Likelihood",
    "Severity",
    # Models
    "GOVERNANCE_TYPES",
    "GOVERNANCE_TYPE_LABELS",
    "AdminGovernance",
    "DependencyGovernance",
    "OperatorGovernance",
    "GovernanceConfig",
    "LikelihoodMappingRule",
    "GovernanceLikelihoodConfiguration",
    "SeverityMatrix",
    "RatingRule",
    "SeverityImpact",
    "FunctionClassificationEntry",
    "FunctionClassificationTable",
    "ModellerState",
    # Likelihood
    "resolve_likelihood",
    "resolve_voting_likelihood",
    # Severity
    "resolve_severity",
    "resolve_severity_from_governance",
    "is_complete_matrix",
    "matrix_to_flat",
    "matrix_from_flat",
    # Rating
    "worst_case",
    "find_rule",
    "resolve_rating",
    "resolve_rating_legacy",
    "has_placeholder_rule",
    "find_rule_gaps",
    # Aggregation
    "project_rating",
    "global_rating",
    "project_ratings",
    "group_projects_by_rating",
    "scale_position",
    "summarize",
    # State
    "default_state",
    "recompute_entries",
    "recompute_state",
    "apply_configuration",
    "add_project",
    "remove_project",
    "rename_project",
    "import_projects",
    "add_entry",
    "update_entry",
    "remove_entry",
    "replace_entries",
]
