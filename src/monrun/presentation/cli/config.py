"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List

_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_TEAM = ("fire_pup", "water_cat", "grass_bunny")

logger = logging.getLogger(__name__)


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "MonRun"
        return Path.home() / "MonRun"
    return Path.home() / ".config" / "monrun"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_stats_path() -> Path:
    """Return the per-user lifetime stats path."""
    return get_user_data_dir() / "stats.json"


def default_config() -> Dict[str, object]:
    return {"log_level": _DEFAULT_LOG_LEVEL, "default_team": list(DEFAULT_TEAM)}


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize_team(value: object) -> List[str]:
    if not isinstance(value, list) or not value:
        return list(DEFAULT_TEAM)
    team = [entry for entry in value if isinstance(entry, str) and entry]
    return team or list(DEFAULT_TEAM)


def load_config(path: Path | None = None) -> Dict[str, object]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return {
        "log_level": _normalize_log_level(raw.get("log_level")),
        "default_team": _normalize_team(raw.get("default_team")),
    }


def save_config(config: Dict[str, object], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "log_level": _normalize_log_level(config.get("log_level")),
        "default_team": _normalize_team(config.get("default_team")),
    }
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
