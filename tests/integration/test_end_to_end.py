"""
Integration tests for the full rating pipeline and the report CLI.

Governance configuration flows through likelihood, severity, worst-case
selection and the rule table, then out through the cache and the CLI report.
"""

import json

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from defiscan_modeller import (
    AdminGovernance,
    DependencyGovernance,
    FinalRating,
    Impact,
    Likelihood,
    LocalStateCache,
    add_entry,
    add_project,
    apply_configuration,
    default_state,
    summarize,
)
from defiscan_modeller.cli import main


class TestPipeline:
    """End-to-end rating of projects built through the reducers."""

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_eoa_critical_is_d(self):
        state = default_state()
        state = add_entry(state, state.projects[0].id, "setOracle", Impact.CRITICAL, AdminGovernance("eoa"))
        assert summarize(state)["global_rating"] == FinalRating.D

    @pytest.mark.integration
    @pytest.mark.scoring
    def test_strong_voting_protocol(self):
        """Well-governed critical functions land on B (Medium severity, Critical impact)."""
        state = default_state()
        project_id = state.projects[0].id
        governance = AdminGovernance("voting", voting_delay_days=7, required_voters=20)
        state = add_entry(state, project_id, "upgradeTo", Impact.CRITICAL, governance)
        state = add_entry(state, project_id, "setFee", Impact.LOW, governance)
        assert summarize(state)["global_rating"] == FinalRating.B

    @pytest.mark.integration
    @pytest.mark.scoring
    def test_global_takes_worst_project(self):
        state = default_state()
        state = add_entry(state, state.projects[0].id, "setFee", Impact.LOW, AdminGovernance("security_council"))
        state = add_project(state, "Oracle Layer")
        state = add_entry(state, state.projects[1].id, "latestAnswer", Impact.HIGH, DependencyGovernance("Chainlink"))

        summary = summarize(state)
        assert [p["rating"] for p in summary["projects"]] == [FinalRating.A, FinalRating.D]
        assert summary["global_rating"] == FinalRating.D

        config = state.likelihood_config
        config = type(config)(voting=config.voting, dependencies={"Chainlink": Likelihood.MITIGATED})
        summary = summarize(apply_configuration(state, likelihood_config=config))
        # High impact at Low severity has no default rule
        assert [p["rating"] for p in summary["projects"]] == [FinalRating.A, FinalRating.AAA]
        assert summary["global_rating"] == FinalRating.AAA

    @pytest.mark.integration
    def test_cache_round_trip_keeps_rating(self, state_cache):
        state = default_state()
        state = add_entry(state, state.projects[0].id, "pause", Impact.HIGH, AdminGovernance("multisig_delay_7d"))
        state_cache.save(state)
        assert summarize(state_cache.load())["global_rating"] == FinalRating.CC


class TestCli:
    """Tests for the report command."""

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_report_from_project_file(self, write_json, tmp_path, capsys):
        project = {
            "title": "Admin Keys",
            "entries": [{
                "function": "setOracle",
                "impact": "Critical",
                "governance": {"functionType": "Admin", "governanceType": "eoa"},
            }],
        }
        path = write_json("admin.json", project)

        exit_code = main([str(path), "--state", str(tmp_path / "state.json")])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "GOVERNANCE RATING REPORT" in out
        assert "Admin Keys" in out
        assert "Function Classifications" not in out
        assert "GLOBAL RATING: D" in out

    @pytest.mark.integration
    def test_legacy_entries_and_ladder(self, write_json, legacy_project_data, tmp_path, capsys):
        path = write_json("vault.json", legacy_project_data)
        exit_code = main(["--no-cache", "--legacy", str(path)])
        assert exit_code == 0
        # pause: multisig (High likelihood) on High impact -> Critical
        assert "GLOBAL RATING: D" in capsys.readouterr().out

    @pytest.mark.integration
    def test_check_rules(self, tmp_path, capsys):
        exit_code = main(["--no-cache", "--check-rules"])
        out = capsys.readouterr().out
        assert exit_code == 0
        assert "GLOBAL RATING: AAA" in out
        assert "4 severity/impact pairs have no rule" in out
        assert "Low severity, High impact" in out

    @pytest.mark.integration
    def test_save_writes_cache(self, write_json, current_project_data, tmp_path, capsys):
        state_path = tmp_path / "state.json"
        path = write_json("lending.json", current_project_data)

        assert main([str(path), "--state", str(state_path), "--save"]) == 0
        assert "State saved to" in capsys.readouterr().out

        document = json.loads(state_path.read_text())
        titles = [table["title"] for table in document["defiscan_function_tables"]]
        assert titles == ["Lending Core"]
        assert len(LocalStateCache(state_path).load().projects[0].entries) == 3

    @pytest.mark.integration
    def test_cached_projects_kept(self, write_json, current_project_data, legacy_project_data, tmp_path, capsys):
        state_path = tmp_path / "state.json"
        main([str(write_json("lending.json", current_project_data)), "--state", str(state_path), "--save"])
        main([str(write_json("vault.json", legacy_project_data)), "--state", str(state_path), "--save"])

        titles = [p.title for p in LocalStateCache(state_path).load().projects]
        assert titles == ["Lending Core", "Old Vault"]

    @pytest.mark.integration
    def test_corrupt_cache_replaced_by_files(self, write_json, current_project_data, tmp_path, capsys):
        state_path = tmp_path / "state.json"
        state_path.write_text("{not json")
        path = write_json("lending.json", current_project_data)

        assert main([str(path), "--state", str(state_path)]) == 0
        out = capsys.readouterr().out
        assert "Lending Core" in out
        assert "Function Classifications" not in out

    @pytest.mark.integration
    def test_invalid_file(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{")
        assert main(["--no-cache", str(path)]) == 1
        assert "Invalid project file" in capsys.readouterr().err

    @pytest.mark.integration
    def test_missing_file(self, tmp_path, capsys):
        assert main(["--no-cache", str(tmp_path / "missing.json")]) == 1
        assert "Error loading" in capsys.readouterr().err
