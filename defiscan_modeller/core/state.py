"""
State reducers for the modeller.

Every function takes a ModellerState and returns a new one; inputs are never
mutated. Configuration changes that affect severity (matrix or likelihood
mapping) recompute every entry of every project in one pass, so a state never
holds a mix of stale and fresh severities.
"""

from dataclasses import replace
from typing import List, Optional, Union

from ..config.settings import DEFAULT_PROJECT_TITLE
from ..thresholds import default_likelihood_config, default_rating_rules, default_severity_matrix
from .enums import Impact
from .models import (
    AdminGovernance,
    FunctionClassificationEntry,
    FunctionClassificationTable,
    GovernanceConfig,
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    ModellerState,
    RatingRule,
    SeverityMatrix,
)
from .severity import resolve_severity_from_governance

LikelihoodConfig = Union[GovernanceLikelihoodConfiguration, List[LikelihoodMappingRule]]

# Fields whose change invalidates the cached severity
_SEVERITY_INPUTS = ("impact", "governance")
_ENTRY_FIELDS = ("function", "impact", "governance", "severity")


def default_state() -> ModellerState:
    """Shipped configuration with a single empty project."""
    return ModellerState(
        severity_matrix=default_severity_matrix(),
        likelihood_config=default_likelihood_config(),
        rating_rules=default_rating_rules(),
        projects=[FunctionClassificationTable(title=DEFAULT_PROJECT_TITLE)],
    )


# =============================================================================
# RECOMPUTATION
# =============================================================================

def recompute_entry(
    entry: FunctionClassificationEntry,
    matrix: SeverityMatrix,
    config: LikelihoodConfig,
) -> FunctionClassificationEntry:
    severity = resolve_severity_from_governance(entry.impact, entry.governance, matrix, config)
    return replace(entry, severity=severity)


def recompute_entries(
    projects: List[FunctionClassificationTable],
    matrix: SeverityMatrix,
    config: LikelihoodConfig,
) -> List[FunctionClassificationTable]:
    """Fresh projects with every entry's severity resolved again."""
    return [
        replace(project, entries=[recompute_entry(entry, matrix, config) for entry in project.entries])
        for project in projects
    ]


def apply_configuration(
    state: ModellerState,
    severity_matrix: Optional[SeverityMatrix] = None,
    likelihood_config: Optional[GovernanceLikelihoodConfiguration] = None,
    rating_rules: Optional[List[RatingRule]] = None,
) -> ModellerState:
    """
    Swap in new configuration.

    A new matrix or likelihood configuration recomputes all entries across all
    projects. Rating rules do not feed severities, so a rule-only change keeps
    the entries as they are.
    """
    matrix = severity_matrix if severity_matrix is not None else state.severity_matrix
    config = likelihood_config if likelihood_config is not None else state.likelihood_config
    rules = rating_rules if rating_rules is not None else state.rating_rules

    projects = list(state.projects)
    if severity_matrix is not None or likelihood_config is not None:
        projects = recompute_entries(projects, matrix, config)

    return ModellerState(
        severity_matrix=matrix,
        likelihood_config=config,
        rating_rules=rules,
        projects=projects,
    )


def recompute_state(state: ModellerState) -> ModellerState:
    """Recompute every entry against the state's own configuration."""
    return replace(
        state,
        projects=recompute_entries(state.projects, state.severity_matrix, state.likelihood_config),
    )


# =============================================================================
# PROJECTS
# =============================================================================

def _project_index(state: ModellerState, project_id: str) -> int:
    for index, project in enumerate(state.projects):
        if project.id == project_id:
            return index
    raise KeyError(f"Unknown project: {project_id}")


def _replace_project(state: ModellerState, index: int, project: FunctionClassificationTable) -> ModellerState:
    projects = list(state.projects)
    projects[index] = project
    return replace(state, projects=projects)


def add_project(state: ModellerState, title: Optional[str] = None) -> ModellerState:
    if title is None:
        title = f"{DEFAULT_PROJECT_TITLE} {len(state.projects) + 1}"
    return replace(state, projects=list(state.projects) + [FunctionClassificationTable(title=title)])


def remove_project(state: ModellerState, project_id: str) -> ModellerState:
    index = _project_index(state, project_id)
    projects = list(state.projects)
    del projects[index]
    return replace(state, projects=projects)


def rename_project(state: ModellerState, project_id: str, title: str) -> ModellerState:
    index = _project_index(state, project_id)
    return _replace_project(state, index, replace(state.projects[index], title=title))


def import_projects(state: ModellerState, projects: List[FunctionClassificationTable]) -> ModellerState:
    """Append projects, resolving their entries against the current configuration."""
    fresh = recompute_entries(projects, state.severity_matrix, state.likelihood_config)
    return replace(state, projects=list(state.projects) + fresh)


# =============================================================================
# ENTRIES
# =============================================================================

def add_entry(
    state: ModellerState,
    project_id: str,
    function: str = "",
    impact: Impact = Impact.LOW,
    governance: Optional[GovernanceConfig] = None,
) -> ModellerState:
    """Append an entry (default: Low impact, EOA-controlled) with its severity resolved."""
    if governance is None:
        governance = AdminGovernance(governance_type="eoa")

    severity = resolve_severity_from_governance(
        impact, governance, state.severity_matrix, state.likelihood_config
    )
    entry = FunctionClassificationEntry(function=function, impact=impact, governance=governance, severity=severity)

    index = _project_index(state, project_id)
    project = state.projects[index]
    return _replace_project(state, index, replace(project, entries=list(project.entries) + [entry]))


def update_entry(state: ModellerState, project_id: str, entry_index: int, **changes) -> ModellerState:
    """
    Edit one entry.

    The cached severity is resolved again only when ``impact`` or
    ``governance`` changes; edits such as renaming the function keep it.

    Raises:
        KeyError: unknown project id
        IndexError: entry index out of range
        TypeError: unknown entry field
    """
    unknown = set(changes) - set(_ENTRY_FIELDS)
    if unknown:
        raise TypeError(f"Unknown entry fields: {', '.join(sorted(unknown))}")

    index = _project_index(state, project_id)
    project = state.projects[index]
    entry = project.entries[entry_index]

    updated = replace(entry, **changes)
    if any(field in changes for field in _SEVERITY_INPUTS):
        updated = recompute_entry(updated, state.severity_matrix, state.likelihood_config)

    entries = list(project.entries)
    entries[entry_index] = updated
    return _replace_project(state, index, replace(project, entries=entries))


def remove_entry(state: ModellerState, project_id: str, entry_index: int) -> ModellerState:
    index = _project_index(state, project_id)
    project = state.projects[index]
    entries = list(project.entries)
    del entries[entry_index]
    return _replace_project(state, index, replace(project, entries=entries))


def replace_entries(
    state: ModellerState,
    project_id: str,
    entries: List[FunctionClassificationEntry],
) -> ModellerState:
    """Swap a project's entries wholesale; severities are taken as given."""
    index = _project_index(state, project_id)
    return _replace_project(state, index, replace(state.projects[index], entries=list(entries)))
