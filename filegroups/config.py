"""Persistent JSON config helpers.

Stores the default view scope, workspace exclude globs, and the per-group
file limit. Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

logger = logging.getLogger(__name__)

APP_NAME = "filegroups"
CONFIG_FILENAME = "config.json"
DATA_FILENAME = "groups.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DATA_PATH = Path(user_data_dir(APP_NAME, appauthor=False)) / DATA_FILENAME

VIEW_SCOPES = ("workspace", "global")
DEFAULT_VIEW_SCOPE = "workspace"
DEFAULT_EXCLUDE_GLOBS = ("**/node_modules/**", "**/.git/**")
DEFAULT_MAX_FILES_PER_GROUP = 1000


def load_config() -> dict[str, object]:
    """Read the filegroups settings file as a dict (``{}`` when absent or not an object)."""
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable config at %s", CONFIG_PATH)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Write the settings dict back; a failed write only logs a warning."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        logger.warning("Could not write config to %s", CONFIG_PATH, exc_info=True)


def default_data_path() -> Path:
    """Return the group store path, honoring a ``data_path`` override."""
    value = load_config().get("data_path")
    if isinstance(value, str) and value.strip():
        return Path(value.strip()).expanduser()
    return DATA_PATH


def load_view_scope() -> str:
    value = load_config().get("view_scope")
    return value if isinstance(value, str) and value in VIEW_SCOPES else DEFAULT_VIEW_SCOPE


def save_view_scope(scope: str) -> None:
    if scope not in VIEW_SCOPES:
        return
    config = load_config()
    config["view_scope"] = scope
    save_config(config)


def load_exclude_globs() -> list[str]:
    """Return workspace enumeration excludes; non-string entries are dropped."""
    value = load_config().get("exclude_globs")
    if not isinstance(value, list):
        return list(DEFAULT_EXCLUDE_GLOBS)
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def load_max_files_per_group() -> int:
    """Return the per-group file limit; booleans and non-positive values are invalid."""
    value = load_config().get("max_files_per_group")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_MAX_FILES_PER_GROUP
    return value
