"""Recompute every season statistic whenever the snapshot changes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from .charts import generate_all_charts
from .datastore import PlaylistStore
from .individual import calculate_all_individual_stats
from .models import (
    ChartResult,
    PlayerResult,
    Playlist,
    RaceResults,
    RankingResult,
    ScalarResult,
    SeasonStats,
)
from .scoring import generate_overall_leaderboard, generate_race_breakdown
from .stats import calculate_all_podiums

logger = logging.getLogger(__name__)

StatsListener = Callable[[SeasonStats], None]


def _guarded(label: str, fn: Callable, playlists: Sequence[Playlist], default):
    try:
        return fn(playlists)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Error computing %s; using empty result", label)
        return default


def compute_season_stats(playlists: Sequence[Playlist]) -> SeasonStats:
    """Derive every result collection from one snapshot."""
    playlists = tuple(playlists)
    return SeasonStats(
        podiums=tuple(_guarded("podiums", calculate_all_podiums, playlists, [])),
        individual=tuple(_guarded("individual stats", calculate_all_individual_stats, playlists, [])),
        charts=tuple(_guarded("charts", generate_all_charts, playlists, [])),
        race_breakdown=_guarded("race breakdown", generate_race_breakdown, playlists, RaceResults()),
        leaderboard=tuple(_guarded("leaderboard", generate_overall_leaderboard, playlists, [])),
        playlist_count=len(playlists),
        computed_at=datetime.now(timezone.utc),
    )


class StatsEngine:
    """Holds the most recently computed :class:`SeasonStats`.

    ``latest`` is None until the first snapshot has been processed, which
    lets callers tell "not yet computed" apart from "computed as empty".
    """

    def __init__(self, store: Optional[PlaylistStore] = None):
        self._latest: Optional[SeasonStats] = None
        self._listeners: List[StatsListener] = []
        if store is not None:
            store.subscribe(self.recompute)

    @property
    def latest(self) -> Optional[SeasonStats]:
        return self._latest

    def subscribe(self, listener: StatsListener) -> None:
        self._listeners.append(listener)
        if self._latest is not None:
            listener(self._latest)

    def recompute(self, playlists: Sequence[Playlist]) -> SeasonStats:
        stats = compute_season_stats(playlists)
        self._latest = stats
        logger.debug(
            "Recomputed season stats: playlists=%d podiums=%d individual=%d charts=%d",
            stats.playlist_count, len(stats.podiums), len(stats.individual), len(stats.charts),
        )
        for listener in list(self._listeners):
            listener(stats)
        return stats

    def get_all_podiums(self) -> Tuple[RankingResult, ...]:
        return self._latest.podiums if self._latest else ()

    def get_all_individual_stats(self) -> Tuple[ScalarResult, ...]:
        return self._latest.individual if self._latest else ()

    def get_chart_series(self) -> Tuple[ChartResult, ...]:
        return self._latest.charts if self._latest else ()

    def get_race_breakdown(self) -> RaceResults:
        return self._latest.race_breakdown if self._latest else RaceResults()

    def get_overall_leaderboard(self) -> Tuple[PlayerResult, ...]:
        return self._latest.leaderboard if self._latest else ()


__all__ = ["compute_season_stats", "StatsEngine"]
