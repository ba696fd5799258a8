"""
Rating aggregation across projects.

Per-project ratings apply the rating resolver to one project's entries; the
global rating applies it to every entry of every project at once (flatten,
then worst case), not to the per-project ratings.
"""

from typing import Any, Dict, List, Optional, Tuple

from .enums import FinalRating
from .models import FunctionClassificationTable, ModellerState, RatingRule
from .rating import resolve_rating, resolve_rating_legacy, worst_case

UNTITLED_PROJECT = "Untitled Project"


def _rate(entries, rules: Optional[List[RatingRule]]) -> FinalRating:
    # No rule table means the fixed legacy ladder
    if rules is None:
        return resolve_rating_legacy(entries)
    return resolve_rating(entries, rules)


def project_rating(project: FunctionClassificationTable, rules: Optional[List[RatingRule]]) -> FinalRating:
    return _rate(project.entries, rules)


def global_rating(projects: List[FunctionClassificationTable], rules: Optional[List[RatingRule]]) -> FinalRating:
    all_entries = [entry for project in projects for entry in project.entries]
    return _rate(all_entries, rules)


def project_ratings(
    projects: List[FunctionClassificationTable],
    rules: Optional[List[RatingRule]],
) -> List[Tuple[str, FinalRating]]:
    """(title, rating) per project, in project order."""
    return [(project.title or UNTITLED_PROJECT, project_rating(project, rules)) for project in projects]


def group_projects_by_rating(
    projects: List[FunctionClassificationTable],
    rules: Optional[List[RatingRule]],
) -> Dict[FinalRating, List[str]]:
    """Project titles grouped by rating, ratings in scale order (AAA first)."""
    grouped: Dict[FinalRating, List[str]] = {}
    for title, rating in project_ratings(projects, rules):
        grouped.setdefault(rating, []).append(title)
    return {rating: grouped[rating] for rating in FinalRating if rating in grouped}


def scale_position(rating: FinalRating) -> float:
    """Position of a rating on the AAA..D scale, 0 (AAA) to 100 (D)."""
    return rating.rank / (len(FinalRating) - 1) * 100


def summarize(state: ModellerState, legacy: bool = False) -> Dict[str, Any]:
    """
    Build the rating report for a whole modeller state.

    Args:
        state: Configuration and projects, with severities already recomputed
        legacy: Rate with the fixed ladder instead of the rule table

    Returns:
        Dictionary with:
        - projects: list of {id, title, entries, worst_case, rating}
        - global_rating: rating over all entries combined
        - global_worst_case: worst (severity, impact) over all entries, or None
    """
    rules = None if legacy else state.rating_rules

    projects = []
    for project in state.projects:
        projects.append({
            "id": project.id,
            "title": project.title or UNTITLED_PROJECT,
            "entries": len(project.entries),
            "worst_case": worst_case(project.entries),
            "rating": project_rating(project, rules),
        })

    return {
        "projects": projects,
        "global_rating": global_rating(state.projects, rules),
        "global_worst_case": worst_case(state.all_entries),
    }
