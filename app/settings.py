"""Season settings loaded from ``data/settings.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Tuple

# Data directory lives at the project root under ``data``.
DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _build_lookup(entries: List[Dict], key_field: str, value_field: str) -> Tuple[Dict[int, float], float]:
    """Build lookup dict and default value from settings entries."""
    lookup: Dict[int, float] = {}
    default = 0.0
    for item in entries:
        key = item[key_field]
        value = item[value_field]
        if isinstance(key, int):
            lookup[int(key)] = value
        elif key == "default_or_higher":
            default = value
    return lookup, default


def load_settings(path: Path | None = None) -> Dict:
    with (path or DATA_DIR / "settings.json").open() as f:
        return json.load(f)


SETTINGS = load_settings()

# 1-based finishing position -> base points
POINTS_BY_POSITION, POINTS_DEFAULT = _build_lookup(
    SETTINGS["points_by_position"], "position", "points"
)
SMALL_FIELD_THRESHOLD: int = int(SETTINGS.get("small_field_threshold", 4))
BONUS_POSITIONS: int = int(SETTINGS.get("bonus_positions", 3))
LEADERBOARD_INCLUDES_SEASON_POINTS: bool = bool(
    SETTINGS.get("leaderboard_includes_season_points", True)
)
WEEK_BINNING_YEAR: int = int(SETTINGS.get("week_binning_year", 2025))
ROSTER: List[str] = list(SETTINGS.get("roster", []))
PLAYER_COLORS: Dict[str, str] = dict(SETTINGS.get("player_colors", {}))
JOIN_DATES: Dict[str, str] = dict(SETTINGS.get("join_dates", {}))

__all__ = [
    "DATA_DIR",
    "SETTINGS",
    "load_settings",
    "POINTS_BY_POSITION",
    "POINTS_DEFAULT",
    "SMALL_FIELD_THRESHOLD",
    "BONUS_POSITIONS",
    "LEADERBOARD_INCLUDES_SEASON_POINTS",
    "WEEK_BINNING_YEAR",
    "ROSTER",
    "PLAYER_COLORS",
    "JOIN_DATES",
]
