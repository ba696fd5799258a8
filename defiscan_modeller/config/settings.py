"""
Modeller configuration.

Local cache location, logging and storage layout settings.
"""

import os
from pathlib import Path

# Best-effort local cache for the modeller state (configuration + projects)
CACHE_PATH = Path(
    os.getenv("DEFISCAN_CACHE_PATH", str(Path.home() / ".defiscan_modeller" / "state.json"))
).expanduser()

LOG_LEVEL = os.getenv("DEFISCAN_LOG_LEVEL", "WARNING").upper()

# Section names inside the cache document
STORAGE_KEYS = {
    "severity_matrix": "defiscan_severity_matrix",
    "projects": "defiscan_function_tables",
    "rating_rules": "defiscan_rating_rules",
    "likelihood_mapping": "defiscan_likelihood_mapping",
}

DEFAULT_PROJECT_TITLE = "Function Classifications"
