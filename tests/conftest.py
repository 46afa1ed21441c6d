import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from app import settings as app_settings  # noqa: E402
from app.models import Player, Playlist  # noqa: E402


def make_playlist(date, scores, name="Playlist", length=6, last_event=None):
    """Build a Playlist from ``[(name, points), ...]`` sorted by points.

    ``last_event`` optionally maps player name -> final event points.
    """
    last_event = last_event or {}
    players = tuple(
        Player(n, pts, last_event.get(n))
        for n, pts in sorted(scores, key=lambda s: s[1], reverse=True)
    )
    return Playlist(name=name, date=date, length=length, players=players)


@pytest.fixture()
def playlist_factory():
    return make_playlist


@pytest.fixture(autouse=True)
def fixed_settings(monkeypatch):
    # Keep roster, palette and join dates deterministic for tests
    monkeypatch.setattr(app_settings, "ROSTER", ["A", "B", "C", "D"])
    monkeypatch.setattr(app_settings, "PLAYER_COLORS", {"A": "red", "B": "blue", "C": "green"})
    monkeypatch.setattr(app_settings, "JOIN_DATES", {})
    monkeypatch.setattr(app_settings, "WEEK_BINNING_YEAR", 2025)
    monkeypatch.setattr(app_settings, "LEADERBOARD_INCLUDES_SEASON_POINTS", True)
    monkeypatch.setattr(
        app_settings,
        "POINTS_BY_POSITION",
        {1: 25, 2: 18, 3: 15, 4: 12, 5: 10, 6: 8, 7: 6, 8: 4},
    )
    monkeypatch.setattr(app_settings, "POINTS_DEFAULT", 0)
    monkeypatch.setattr(app_settings, "SMALL_FIELD_THRESHOLD", 4)
    monkeypatch.setattr(app_settings, "BONUS_POSITIONS", 3)
    yield


@pytest.fixture()
def three_playlist_season():
    """A wins, B and A draw, B wins."""
    return [
        make_playlist("2025-03-03", [("A", 100), ("B", 80)], name="P1"),
        make_playlist("2025-03-04", [("A", 80), ("B", 80)], name="P2"),
        make_playlist("2025-03-05", [("B", 100), ("A", 60)], name="P3"),
    ]
