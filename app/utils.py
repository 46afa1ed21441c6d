"""Draw detection, tie handling and rounding helpers shared by the calculators."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Sequence

from .models import Player, Playlist


def is_contested(playlist: Playlist) -> bool:
    """Return True when the playlist has enough players for a draw check."""
    return len(playlist.players) >= 2


def is_draw(playlist: Playlist) -> bool:
    """Return True if first place is shared.

    Raises:
        ValueError: if the playlist has fewer than two players.
    """
    if not is_contested(playlist):
        raise ValueError(f"playlist {playlist.name!r} on {playlist.date} has fewer than two players")
    return playlist.players[0].total_points == playlist.players[1].total_points


def round_display(value: float) -> float:
    """Round to two decimal places, keeping integral values as ``int``."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if float(value).is_integer():
        return int(value)
    rounded = round(float(value), 2)
    if rounded.is_integer():
        return int(rounded)
    return rounded


def players_with_score(score: float, players: Iterable[Player]) -> List[Player]:
    return [p for p in players if p.total_points == score]


def competition_ranks(players: Sequence[Player]) -> List[int]:
    """Return 1-based standard competition ranks for score-sorted players.

    ``[100, 80, 80, 50]`` ranks as ``[1, 2, 2, 4]``.
    """
    ranks: List[int] = []
    for idx, player in enumerate(players):
        if idx > 0 and player.total_points == players[idx - 1].total_points:
            ranks.append(ranks[-1])
        else:
            ranks.append(idx + 1)
    return ranks


def players_at_rank(playlist: Playlist, rank: int) -> List[Player]:
    """Return every player whose competition rank equals ``rank``."""
    ranks = competition_ranks(playlist.players)
    return [p for p, r in zip(playlist.players, ranks) if r == rank]


def parse_date(value: str) -> date:
    """Parse the ``YYYY-MM-DD`` prefix of a playlist date."""
    return date.fromisoformat(str(value).strip()[:10])


def sort_chronologically(playlists: Iterable[Playlist]) -> List[Playlist]:
    # Stable, so same-day playlists keep source order
    return sorted(playlists, key=lambda p: parse_date(p.date))


__all__ = [
    "is_contested",
    "is_draw",
    "round_display",
    "players_with_score",
    "competition_ranks",
    "players_at_rank",
    "parse_date",
    "sort_chronologically",
]
