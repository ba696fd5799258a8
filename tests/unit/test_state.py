"""
Unit tests for state reducers.

Reducers return new states; the input state must never change. Severities are
recomputed only when their inputs change.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from defiscan_modeller.config.settings import DEFAULT_PROJECT_TITLE
from defiscan_modeller.core.enums import Impact, Likelihood, Severity
from defiscan_modeller.core.models import AdminGovernance, DependencyGovernance, FunctionClassificationTable
from defiscan_modeller.core.state import (
    add_entry,
    add_project,
    apply_configuration,
    default_state,
    import_projects,
    recompute_state,
    remove_entry,
    remove_project,
    rename_project,
    replace_entries,
    update_entry,
)


@pytest.fixture
def state():
    """Default state whose single project holds two EOA entries."""
    state = default_state()
    project_id = state.projects[0].id
    state = add_entry(state, project_id, "setOracle", Impact.CRITICAL)
    state = add_entry(state, project_id, "setFee", Impact.LOW)
    return state


def project_id(state):
    return state.projects[0].id


class TestDefaultState:
    """Tests for the initial state."""

    @pytest.mark.unit
    @pytest.mark.smoke
    def test_single_empty_project(self):
        state = default_state()
        assert len(state.projects) == 1
        assert state.projects[0].title == DEFAULT_PROJECT_TITLE
        assert state.projects[0].entries == []

    @pytest.mark.unit
    def test_states_do_not_share_configuration(self):
        first = default_state()
        second = default_state()
        first.severity_matrix[Impact.LOW][Likelihood.LOW] = Severity.CRITICAL
        assert second.severity_matrix[Impact.LOW][Likelihood.LOW] == Severity.INFORMATIONAL


class TestEntries:
    """Tests for entry reducers."""

    @pytest.mark.unit
    def test_add_entry_resolves_severity(self, state):
        entries = state.projects[0].entries
        assert [entry.severity for entry in entries] == [Severity.CRITICAL, Severity.MEDIUM]
        assert entries[0].governance == AdminGovernance("eoa")

    @pytest.mark.unit
    def test_add_entry_defaults(self):
        state = default_state()
        state = add_entry(state, project_id(state))
        entry = state.projects[0].entries[0]
        assert (entry.function, entry.impact) == ("", Impact.LOW)
        assert entry.governance.governance_type == "eoa"

    @pytest.mark.unit
    def test_reducers_do_not_mutate(self, state):
        before = state.projects[0].entries[0]
        new_state = update_entry(state, project_id(state), 0, impact=Impact.LOW)
        assert state.projects[0].entries[0] is before
        assert state.projects[0].entries[0].impact == Impact.CRITICAL
        assert new_state.projects[0].entries[0].impact == Impact.LOW

    @pytest.mark.unit
    def test_governance_change_recomputes(self, state):
        governance = AdminGovernance("voting", voting_delay_days=7, required_voters=20)
        state = update_entry(state, project_id(state), 0, governance=governance)
        assert state.projects[0].entries[0].severity == Severity.MEDIUM

    @pytest.mark.unit
    def test_label_change_keeps_cached_severity(self, state):
        """Renaming a function does not recompute, even if the cache is stale."""
        state = update_entry(state, project_id(state), 0, severity=Severity.LOW)
        state = update_entry(state, project_id(state), 0, function="setPriceOracle")
        entry = state.projects[0].entries[0]
        assert entry.function == "setPriceOracle"
        assert entry.severity == Severity.LOW

    @pytest.mark.unit
    def test_unknown_field_rejected(self, state):
        with pytest.raises(TypeError):
            update_entry(state, project_id(state), 0, likelihood=Likelihood.LOW)

    @pytest.mark.unit
    def test_bad_index_and_project(self, state):
        with pytest.raises(IndexError):
            update_entry(state, project_id(state), 5, function="x")
        with pytest.raises(KeyError):
            remove_entry(state, "missing", 0)

    @pytest.mark.unit
    def test_remove_entry(self, state):
        state = remove_entry(state, project_id(state), 0)
        assert [entry.function for entry in state.projects[0].entries] == ["setFee"]

    @pytest.mark.unit
    def test_replace_entries_keeps_given_severities(self, state, pair_factory):
        state = replace_entries(state, project_id(state), [pair_factory(Severity.LOW, Impact.CRITICAL)])
        assert [entry.severity for entry in state.projects[0].entries] == [Severity.LOW]


class TestProjects:
    """Tests for project reducers."""

    @pytest.mark.unit
    def test_add_project_numbering(self, state):
        state = add_project(state)
        assert state.projects[1].title == f"{DEFAULT_PROJECT_TITLE} 2"
        state = add_project(state, "Bridge")
        assert state.projects[2].title == "Bridge"

    @pytest.mark.unit
    def test_project_ids_unique(self, state):
        state = add_project(add_project(state))
        assert len({project.id for project in state.projects}) == 3

    @pytest.mark.unit
    def test_remove_and_rename(self, state):
        state = add_project(state, "Bridge")
        bridge_id = state.projects[1].id
        state = rename_project(state, bridge_id, "Canonical Bridge")
        assert state.get_project(bridge_id).title == "Canonical Bridge"

        state = remove_project(state, bridge_id)
        assert state.get_project(bridge_id) is None
        with pytest.raises(KeyError):
            remove_project(state, bridge_id)

    @pytest.mark.unit
    def test_import_recomputes(self, state, pair_factory):
        imported = FunctionClassificationTable(
            title="Imported",
            entries=[pair_factory(Severity.INFORMATIONAL, Impact.CRITICAL)],
        )
        state = import_projects(state, [imported])
        assert state.projects[1].entries[0].severity == Severity.CRITICAL
        assert imported.entries[0].severity == Severity.INFORMATIONAL


class TestConfiguration:
    """Tests for configuration changes."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_matrix_change_recomputes_all_projects(self, state):
        state = add_project(state)
        state = add_entry(state, state.projects[1].id, "pause", Impact.LOW)

        matrix = {impact: dict(row) for impact, row in state.severity_matrix.items()}
        matrix[Impact.LOW][Likelihood.HIGH] = Severity.HIGH
        new_state = apply_configuration(state, severity_matrix=matrix)

        assert new_state.projects[0].entries[1].severity == Severity.HIGH
        assert new_state.projects[1].entries[0].severity == Severity.HIGH
        assert state.projects[1].entries[0].severity == Severity.MEDIUM

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_likelihood_change_recomputes(self, state):
        config = state.likelihood_config
        config = type(config)(voting=config.voting, eoa=Likelihood.MITIGATED)
        state = apply_configuration(state, likelihood_config=config)
        assert [entry.severity for entry in state.projects[0].entries] == [Severity.MEDIUM, Severity.INFORMATIONAL]

    @pytest.mark.unit
    def test_dependency_mapping_change(self):
        state = default_state()
        state = add_entry(state, project_id(state), "latestAnswer", Impact.HIGH, DependencyGovernance("Chainlink"))
        assert state.projects[0].entries[0].severity == Severity.CRITICAL

        config = type(state.likelihood_config)(
            voting=state.likelihood_config.voting,
            dependencies={"Chainlink": Likelihood.LOW},
        )
        state = apply_configuration(state, likelihood_config=config)
        assert state.projects[0].entries[0].severity == Severity.MEDIUM

    @pytest.mark.unit
    def test_rules_change_keeps_entries(self, state):
        state = update_entry(state, project_id(state), 0, severity=Severity.LOW)
        new_state = apply_configuration(state, rating_rules=[])
        assert new_state.rating_rules == []
        assert new_state.projects[0].entries[0].severity == Severity.LOW

    @pytest.mark.unit
    def test_recompute_state_refreshes_stale_cache(self, state):
        state = update_entry(state, project_id(state), 0, severity=Severity.LOW)
        assert recompute_state(state).projects[0].entries[0].severity == Severity.CRITICAL
