"""
Local State Cache - best-effort persistence of the modeller state.

The state is stored as one JSON document with four independent sections
(severity matrix, projects, rating rules, likelihood mapping). Each section is
migrated and validated on its own when loading; a section that cannot be read
falls back to its defaults without affecting the others. Severities are always
recomputed after loading, so a cache written under another configuration can
never leave stale values behind.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config.settings import CACHE_PATH, STORAGE_KEYS
from .core.models import FunctionClassificationTable, ModellerState
from .core.state import default_state, recompute_state
from .exceptions import ConfigurationError
from .migration import (
    load_likelihood_config,
    load_projects,
    load_rating_rules,
    load_severity_matrix,
    migrate_table_data,
    parse_table,
    severity_matrix_to_dict,
)

logger = logging.getLogger(__name__)


def state_to_dict(state: ModellerState) -> Dict[str, Any]:
    """Serialize a state to the cache document shape."""
    return {
        STORAGE_KEYS["severity_matrix"]: severity_matrix_to_dict(state.severity_matrix),
        STORAGE_KEYS["projects"]: [project.to_dict() for project in state.projects],
        STORAGE_KEYS["rating_rules"]: [rule.to_dict() for rule in state.rating_rules],
        STORAGE_KEYS["likelihood_mapping"]: state.likelihood_config.to_dict(),
    }


def state_from_dict(data: Dict[str, Any]) -> ModellerState:
    """
    Rebuild a state from a cache document.

    Missing or unreadable sections use their defaults; every entry's severity is
    recomputed against the loaded configuration.
    """
    if not isinstance(data, dict):
        logger.warning("Cached state is not a mapping, using defaults")
        return default_state()

    state = ModellerState(
        severity_matrix=load_severity_matrix(data.get(STORAGE_KEYS["severity_matrix"])),
        likelihood_config=load_likelihood_config(data.get(STORAGE_KEYS["likelihood_mapping"])),
        rating_rules=load_rating_rules(data.get(STORAGE_KEYS["rating_rules"])),
        projects=load_projects(data.get(STORAGE_KEYS["projects"])),
    )
    return recompute_state(state)


class LocalStateCache:
    """
    JSON file cache for the modeller state.

    Reads never fail: a missing, unreadable or malformed file yields the
    default state.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else CACHE_PATH

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[ModellerState]:
        """Cached state, or None when the file is missing or cannot be decoded."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read state cache %s, using defaults: %s", self.path, e)
            return None

        if not isinstance(data, dict):
            logger.warning("State cache %s is not a mapping, using defaults", self.path)
            return None

        return state_from_dict(data)

    def load(self) -> ModellerState:
        state = self.read()
        return state if state is not None else default_state()

    def save(self, state: ModellerState) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(state_to_dict(state), f, indent=2)
        return self.path

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


def parse_projects(data: Any, fallback_title: str = "") -> List[FunctionClassificationTable]:
    """
    Projects from decoded JSON: a single project ``{"title": ..., "entries": [...]}``
    or a list of them.

    Entries are migrated like cached data and every project gets a fresh id.
    Severities still need resolving against the active configuration (see
    ``core.state.import_projects``).

    Raises:
        ConfigurationError: the data does not describe projects
    """
    tables = data if isinstance(data, list) else [data]
    projects = [parse_table(table) for table in migrate_table_data(tables)]

    for project in projects:
        project.id = uuid.uuid4().hex
        if not project.title:
            project.title = fallback_title
    return projects


def load_projects_file(file_path: Union[str, Path]) -> List[FunctionClassificationTable]:
    """
    Read projects from a JSON file; untitled projects take the file name.

    Raises:
        ConfigurationError: the file is not JSON or does not describe projects
        OSError: the file cannot be read
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise ConfigurationError(f"{file_path} is not valid JSON: {e}") from e

    return parse_projects(data, fallback_title=Path(file_path).stem)
