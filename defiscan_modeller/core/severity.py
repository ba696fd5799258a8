"""Severity Resolver: Impact x Likelihood -> Severity via the severity matrix."""

import copy
from typing import Iterable, List, Optional, Tuple, Union

from .enums import Impact, Likelihood, Severity
from .likelihood import resolve_likelihood
from .models import (
    GovernanceConfig,
    GovernanceLikelihoodConfiguration,
    LikelihoodMappingRule,
    SeverityMatrix,
)

MatrixRow = Tuple[Impact, Likelihood, Severity]


def resolve_severity(impact: Impact, likelihood: Likelihood, matrix: SeverityMatrix) -> Severity:
    """Look up ``matrix[impact][likelihood]``."""
    return matrix[impact][likelihood]


def resolve_severity_from_governance(
    impact: Impact,
    governance: GovernanceConfig,
    matrix: SeverityMatrix,
    config: Union[GovernanceLikelihoodConfiguration, List[LikelihoodMappingRule]],
    override_likelihood: Optional[Likelihood] = None,
) -> Severity:
    """
    Resolve severity straight from a governance configuration.

    ``override_likelihood`` skips governance resolution entirely when the
    caller has already settled on a likelihood.
    """
    if override_likelihood is not None:
        likelihood = override_likelihood
    else:
        likelihood = resolve_likelihood(governance, config)
    return resolve_severity(impact, likelihood, matrix)


# =============================================================================
# MATRIX HELPERS
# =============================================================================

def is_complete_matrix(matrix) -> bool:
    """True if every Impact x Likelihood cell holds a Severity."""
    if not isinstance(matrix, dict):
        return False
    for impact in Impact:
        row = matrix.get(impact)
        if not isinstance(row, dict):
            return False
        for likelihood in Likelihood:
            if not isinstance(row.get(likelihood), Severity):
                return False
    return True


def matrix_to_flat(matrix: SeverityMatrix) -> List[MatrixRow]:
    """Flatten the matrix into 16 rows, impact-major, in domain order."""
    return [
        (impact, likelihood, matrix[impact][likelihood])
        for impact in Impact
        for likelihood in Likelihood
    ]


def matrix_from_flat(rows: Iterable[MatrixRow], base: SeverityMatrix) -> SeverityMatrix:
    """
    Build a matrix by overlaying flat rows on a copy of ``base``.

    Cells not covered by ``rows`` keep the base value, so the result is always
    fully populated when the base is.
    """
    matrix = copy.deepcopy(base)
    for impact, likelihood, severity in rows:
        matrix[impact][likelihood] = severity
    return matrix
