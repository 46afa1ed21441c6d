"""Per-player cumulative chart series aligned to playlist dates."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from . import settings as _settings
from .models import ChartResult, ChartSeries, Playlist
from .utils import is_contested, parse_date, players_with_score, round_display, sort_chronologically

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#aaa"


def player_color(name: str) -> str:
    return _settings.PLAYER_COLORS.get(name, FALLBACK_COLOR)


def date_label(value: str) -> str:
    """``YYYY-MM-DD`` -> ``DD-MM``."""
    parsed = parse_date(value)
    return f"{parsed.day:02d}-{parsed.month:02d}"


def outright_winner(playlist: Playlist) -> Optional[str]:
    """Return the sole top scorer, or None for a draw or an uncontested playlist."""
    if not is_contested(playlist):
        return None
    top_score = max(p.total_points for p in playlist.players)
    leaders = players_with_score(top_score, playlist.players)
    return leaders[0].name if len(leaders) == 1 else None


def _chart_options(y_title: str, hide_zero_tooltips: bool = False, percentage: bool = False) -> Dict:
    y_axis: Dict = {
        "beginAtZero": True,
        "ticks": {"stepSize": 10 if percentage else 1},
        "title": {"display": True, "text": y_title},
    }
    if percentage:
        y_axis.update({"min": 0, "max": 100})
    return {
        "responsive": True,
        "maintainAspectRatio": False,
        "interaction": {"mode": "index", "intersect": False},
        "elements": {"point": {"radius": 0}},
        "scales": {
            "x": {"ticks": {"autoSkip": False}, "title": {"display": True, "text": "Playlist Date"}},
            "y": y_axis,
        },
        "plugins": {
            "tooltip": {
                "labelColors": dict(_settings.PLAYER_COLORS),
                "hideZeroValues": hide_zero_tooltips,
                "valueSuffix": "%" if percentage else "",
            }
        },
    }


def _build_chart(
    title: str,
    playlists: Sequence[Playlist],
    roster: Sequence[str],
    step: Callable[[Playlist, str, Dict[str, float]], float],
    options: Dict,
) -> ChartResult:
    """Walk playlists in date order and record ``step`` for every roster player.

    ``step`` receives the playlist, a player name and that player's running
    state dict and returns the value to plot for this playlist.
    """
    ordered = sort_chronologically(playlists)
    labels = [date_label(p.date) for p in ordered]
    state: Dict[str, Dict[str, float]] = {name: {} for name in roster}
    values: Dict[str, List[float]] = {name: [] for name in roster}
    for playlist in ordered:
        for name in roster:
            values[name].append(step(playlist, name, state[name]))

    series = tuple(
        ChartSeries(
            label=name,
            data=tuple(values[name]),
            border_color=player_color(name),
            background_color=player_color(name),
        )
        for name in roster
    )
    return ChartResult(title=title, labels=tuple(labels), series=series, options=options)


def _roster(roster: Optional[Sequence[str]]) -> List[str]:
    return list(_settings.ROSTER if roster is None else roster)


def generate_total_wins_chart(
    playlists: Sequence[Playlist],
    roster: Optional[Sequence[str]] = None,
) -> ChartResult:
    """Cumulative outright wins; draws credit nobody."""
    def step(playlist: Playlist, name: str, state: Dict[str, float]) -> float:
        if outright_winner(playlist) == name:
            state["wins"] = state.get("wins", 0) + 1
        return state.get("wins", 0)

    return _build_chart("Total Wins", playlists, _roster(roster), step, _chart_options("Total Wins"))


def generate_total_appearances_chart(
    playlists: Sequence[Playlist],
    roster: Optional[Sequence[str]] = None,
) -> ChartResult:
    def step(playlist: Playlist, name: str, state: Dict[str, float]) -> float:
        if any(p.name == name for p in playlist.players):
            state["appearances"] = state.get("appearances", 0) + 1
        return state.get("appearances", 0)

    return _build_chart(
        "Total Appearances",
        playlists,
        _roster(roster),
        step,
        _chart_options("Total Appearances", hide_zero_tooltips=True),
    )


def generate_win_rate_chart(
    playlists: Sequence[Playlist],
    roster: Optional[Sequence[str]] = None,
) -> ChartResult:
    """Running win percentage; absent players carry their previous rate."""
    def step(playlist: Playlist, name: str, state: Dict[str, float]) -> float:
        if any(p.name == name for p in playlist.players):
            state["played"] = state.get("played", 0) + 1
            if outright_winner(playlist) == name:
                state["wins"] = state.get("wins", 0) + 1
            state["rate"] = round_display(state.get("wins", 0) / state["played"] * 100)
        return state.get("rate", 0)

    return _build_chart(
        "Win Rate Over Time",
        playlists,
        _roster(roster),
        step,
        _chart_options("Win Rate", percentage=True),
    )


CHART_GENERATORS = (
    generate_total_wins_chart,
    generate_total_appearances_chart,
    generate_win_rate_chart,
)


def generate_all_charts(
    playlists: Sequence[Playlist],
    roster: Optional[Sequence[str]] = None,
) -> List[ChartResult]:
    charts: List[ChartResult] = []
    for generator in CHART_GENERATORS:
        try:
            charts.append(generator(playlists, roster))
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error generating %s", generator.__name__)
    return charts


__all__ = [
    "FALLBACK_COLOR",
    "player_color",
    "date_label",
    "outright_winner",
    "generate_total_wins_chart",
    "generate_total_appearances_chart",
    "generate_win_rate_chart",
    "CHART_GENERATORS",
    "generate_all_charts",
]
