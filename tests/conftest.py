"""
Pytest configuration and fixtures for the DeFiScan governance modeller.

This file contains shared fixtures used across all test modules.
Fixtures follow the pattern: factory functions returning fresh objects.
"""

import pytest
import json
import sys
from pathlib import Path
from typing import Dict, Any, List

sys.path.insert(0, str(Path(__file__).parent.parent))

from defiscan_modeller.core.enums import Impact, Likelihood, Severity
from defiscan_modeller.core.models import (
    AdminGovernance,
    FunctionClassificationEntry,
    GovernanceLikelihoodConfiguration,
    RatingRule,
)
from defiscan_modeller.core.severity import resolve_severity_from_governance
from defiscan_modeller.storage import LocalStateCache
from defiscan_modeller.thresholds import (
    default_likelihood_config,
    default_rating_rules,
    default_severity_matrix,
)


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def state_cache(tmp_path: Path) -> LocalStateCache:
    """State cache backed by a temporary file."""
    return LocalStateCache(tmp_path / "cache" / "state.json")


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def severity_matrix():
    return default_severity_matrix()


@pytest.fixture
def likelihood_config() -> GovernanceLikelihoodConfiguration:
    """Default likelihood configuration with one dependency and one operator."""
    config = default_likelihood_config()
    config.dependencies = {"Chainlink": Likelihood.LOW}
    config.operators = {"Keeper": Likelihood.MEDIUM}
    return config


@pytest.fixture
def rating_rules() -> List[RatingRule]:
    return default_rating_rules()


# =============================================================================
# ENTRY FIXTURES
# =============================================================================

@pytest.fixture
def entry_factory(severity_matrix, likelihood_config):
    """
    Factory fixture for entries with their severity resolved.

    Usage:
        def test_something(entry_factory):
            entry = entry_factory(impact=Impact.HIGH, governance=AdminGovernance("multisig"))
    """
    def _create_entry(function: str = "setFee", impact: Impact = Impact.LOW, governance=None, severity=None):
        if governance is None:
            governance = AdminGovernance(governance_type="eoa")
        if severity is None:
            severity = resolve_severity_from_governance(impact, governance, severity_matrix, likelihood_config)
        return FunctionClassificationEntry(
            function=function,
            impact=impact,
            governance=governance,
            severity=severity,
        )

    return _create_entry


@pytest.fixture
def pair_factory():
    """Entries with a fixed (severity, impact) pair and no governance meaning."""
    def _create_pair(severity: Severity, impact: Impact):
        return FunctionClassificationEntry(
            function=f"{severity.value}_{impact.value}",
            impact=impact,
            governance=AdminGovernance(governance_type="eoa"),
            severity=severity,
        )

    return _create_pair


# =============================================================================
# PERSISTED DATA FIXTURES
# =============================================================================

@pytest.fixture
def current_project_data() -> Dict[str, Any]:
    """A project in the current persisted shape."""
    return {
        "id": "lending-core",
        "title": "Lending Core",
        "entries": [
            {
                "function": "upgradeTo",
                "impact": "Critical",
                "governance": {
                    "functionType": "Admin",
                    "governanceType": "voting",
                    "votingDelayDays": 7,
                    "requiredVoters": 25,
                },
                "severity": "Medium",
            },
            {
                "function": "latestAnswer",
                "impact": "High",
                "governance": {"functionType": "Dependency", "name": "Chainlink"},
                "severity": "Medium",
            },
            {
                "function": "liquidate",
                "impact": "Medium",
                "governance": {"functionType": "Operator", "name": "Keeper"},
                "severity": "Medium",
            },
        ],
    }


@pytest.fixture
def legacy_project_data() -> Dict[str, Any]:
    """A project mixing the two legacy entry shapes."""
    return {
        "title": "Old Vault",
        "entries": [
            {
                "function": "pause",
                "impact": "High",
                "governance": {"type": "multisig"},
                "severity": "Critical",
            },
            {
                "function": "setRewards",
                "impact": "Low",
                "likelihood": "Low",
                "severity": "Informational",
            },
        ],
    }


@pytest.fixture
def legacy_voting_ladder() -> List[Dict[str, Any]]:
    """Likelihood configuration stored as a bare voting ladder."""
    return [
        {"likelihood": "Mitigated", "votingMinDelayDays": 10, "votingMinVoters": 30, "description": ""},
        {"likelihood": "High", "votingMinDelayDays": 0, "votingMinVoters": 0, "description": ""},
    ]


@pytest.fixture
def obsolete_rating_rules() -> List[Dict[str, Any]]:
    """Stored rule table from before the AAA placeholder row existed."""
    return [
        {"rating": "AA", "severity": "Informational", "impact": "Low", "description": ""},
        {"rating": "D", "severity": "Critical", "impact": "Critical", "description": ""},
    ]


@pytest.fixture
def write_json(tmp_path: Path):
    """Write data to a JSON file under tmp_path and return its path."""
    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            json.dump(data, f)
        return path

    return _write
