"""Position-based points and season leaderboard."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from . import settings as _settings
from .models import PlayerResult, Playlist, RaceResult, RaceResults
from .utils import sort_chronologically


def _base_points(position: int) -> float:
    """Return the base points for a 0-based finishing position."""
    return _settings.POINTS_BY_POSITION.get(position + 1, _settings.POINTS_DEFAULT)


def _small_field_bonus(position: int, number_of_players: int) -> int:
    """Extra points for the top finishers of a field larger than the threshold."""
    threshold = _settings.SMALL_FIELD_THRESHOLD
    if number_of_players > threshold and position < _settings.BONUS_POSITIONS:
        return number_of_players - threshold
    return 0


def calculate_points(position: int, number_of_players: int) -> float:
    """Return the points for a 0-based finishing position.

    Args:
        position: Index in the score-sorted player list (0 is first).
        number_of_players: Players in the playlist.

    Returns:
        Base points from the position table plus the field-size bonus.
    """
    return _base_points(position) + _small_field_bonus(position, number_of_players)


def generate_race_breakdown(
    playlists: Iterable[Playlist],
    roster: Optional[Sequence[str]] = None,
) -> RaceResults:
    """Points per player for every playlist in date order.

    Each race lists the players present, scored by position, followed by
    every roster member who was absent with 0 points, so the table is
    rectangular across races.
    """
    if roster is None:
        roster = _settings.ROSTER
    races: List[RaceResult] = []
    for playlist in sort_chronologically(playlists):
        number_of_players = len(playlist.players)
        present = {p.name for p in playlist.players}
        results = [
            PlayerResult(player.name, calculate_points(index, number_of_players))
            for index, player in enumerate(playlist.players)
        ]
        results.extend(PlayerResult(name, 0) for name in roster if name not in present)
        races.append(RaceResult(date=playlist.date, players=tuple(results)))
    return RaceResults(races=tuple(races))


def generate_overall_leaderboard(
    playlists: Iterable[Playlist],
    include_season_points: Optional[bool] = None,
) -> List[PlayerResult]:
    """Aggregate position points to produce the overall leaderboard.

    Each appearance adds the freshly derived position points and, when
    ``include_season_points`` is on (the deployed behaviour), the player's
    ``total_points`` for that playlist as well. Absent players are not
    scored.

    Returns:
        List of results sorted by points (high points wins), then name.
    """
    if include_season_points is None:
        include_season_points = _settings.LEADERBOARD_INCLUDES_SEASON_POINTS
    totals: Dict[str, float] = {}
    for playlist in playlists:
        number_of_players = len(playlist.players)
        for index, player in enumerate(playlist.players):
            points = calculate_points(index, number_of_players)
            if include_season_points:
                points += player.total_points
            totals[player.name] = totals.get(player.name, 0) + points

    standings = [PlayerResult(name, points) for name, points in totals.items()]
    standings.sort(key=lambda r: (-r.points, r.player_name))
    return standings


__all__ = [
    "calculate_points",
    "generate_race_breakdown",
    "generate_overall_leaderboard",
]
