"""Immutable records for playlists and the results derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Player:
    """One participant's result within a playlist."""
    name: str
    total_points: float
    last_event_points: Optional[float] = None


@dataclass(frozen=True)
class Playlist:
    """A scored multiplayer session.

    ``players`` arrives sorted by ``total_points`` descending; ties are
    equal adjacent scores.
    """
    name: str
    date: str
    length: int
    players: Tuple[Player, ...] = ()


@dataclass(frozen=True)
class PodiumEntry:
    name: str
    total_points: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "totalPoints": self.total_points}


@dataclass(frozen=True)
class RankingResult:
    """Top or bottom three players for one metric."""
    title: str
    players: Tuple[PodiumEntry, ...] = ()
    subtitle: Optional[str] = None
    is_negative: bool = False
    invert_order: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "ranking",
            "title": self.title,
            "subtitle": self.subtitle,
            "players": [p.to_dict() for p in self.players],
            "isNegative": self.is_negative,
            "invertOrder": self.invert_order,
        }


@dataclass(frozen=True)
class ScalarResult:
    """A single fact about the season."""
    title: str
    subtitle: Optional[str] = None
    value: Optional[float] = None
    player: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "scalar",
            "title": self.title,
            "subtitle": self.subtitle,
            "value": self.value,
            "player": self.player,
        }


@dataclass(frozen=True)
class ChartSeries:
    label: str
    data: Tuple[float, ...]
    border_color: str
    background_color: str
    fill: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "data": list(self.data),
            "borderColor": self.border_color,
            "backgroundColor": self.background_color,
            "fill": self.fill,
        }


@dataclass(frozen=True)
class ChartResult:
    title: str
    labels: Tuple[str, ...]
    series: Tuple[ChartSeries, ...]
    options: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "chartData": {
                "labels": list(self.labels),
                "datasets": [s.to_dict() for s in self.series],
            },
            "chartOptions": self.options,
        }


@dataclass(frozen=True)
class PlayerResult:
    player_name: str
    points: float

    def to_dict(self) -> Dict[str, Any]:
        return {"playerName": self.player_name, "points": self.points}


@dataclass(frozen=True)
class RaceResult:
    date: str
    players: Tuple[PlayerResult, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "players": [p.to_dict() for p in self.players]}


@dataclass(frozen=True)
class RaceResults:
    races: Tuple[RaceResult, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"races": [r.to_dict() for r in self.races]}


StatResult = Union[RankingResult, ScalarResult]


@dataclass(frozen=True)
class SeasonStats:
    """Everything derived from one season snapshot."""
    podiums: Tuple[RankingResult, ...]
    individual: Tuple[ScalarResult, ...]
    charts: Tuple[ChartResult, ...]
    race_breakdown: RaceResults
    leaderboard: Tuple[PlayerResult, ...]
    playlist_count: int
    computed_at: datetime

    @property
    def computed_at_iso(self) -> str:
        """UTC ``computed_at`` as ISO 8601 with a ``Z`` suffix."""
        return self.computed_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "podiums": [p.to_dict() for p in self.podiums],
            "individual": [s.to_dict() for s in self.individual],
            "charts": [c.to_dict() for c in self.charts],
            "raceBreakdown": self.race_breakdown.to_dict(),
            "leaderboard": [r.to_dict() for r in self.leaderboard],
            "playlistCount": self.playlist_count,
            "computedAt": self.computed_at_iso,
        }


__all__: List[str] = [
    "Player",
    "Playlist",
    "PodiumEntry",
    "RankingResult",
    "ScalarResult",
    "StatResult",
    "ChartSeries",
    "ChartResult",
    "PlayerResult",
    "RaceResult",
    "RaceResults",
    "SeasonStats",
]
