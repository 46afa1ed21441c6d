"""Podium metric calculators.

Every calculator is a pure function over a sequence of playlists. Each
builds a per-player accumulator, walks the playlists once and hands the
projected ``{name: value}`` mapping to :mod:`app.podium`.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from . import settings as _settings
from .models import Player, Playlist, RankingResult
from .podium import bottom_three, top_three
from .utils import (
    competition_ranks,
    is_contested,
    is_draw,
    parse_date,
    players_at_rank,
    players_with_score,
)

logger = logging.getLogger(__name__)

WIN_MARGIN_SUBTITLE = "points finished ahead of second place"
DEDICATION_SUBTITLE = "total participation in playlists since joining"


def _contested(playlists: Iterable[Playlist], metric: str) -> List[Playlist]:
    """Return playlists with at least two players, logging the ones skipped."""
    kept: List[Playlist] = []
    for playlist in playlists:
        if is_contested(playlist):
            kept.append(playlist)
        else:
            logger.debug("%s: skipping playlist %r on %s with %d player(s)",
                         metric, playlist.name, playlist.date, len(playlist.players))
    return kept


def _credit(counts: Dict[str, int], players: Iterable[Player]) -> None:
    for player in players:
        counts[player.name] = counts.get(player.name, 0) + 1


def _averages(totals: Mapping[str, float], counts: Mapping[str, int]) -> Dict[str, float]:
    return {name: totals[name] / counts[name] for name in totals if counts.get(name)}


def calculate_most_wins(playlists: Sequence[Playlist]) -> RankingResult:
    """Count outright wins; a draw at the top credits nobody."""
    win_counts: Dict[str, int] = {}
    for playlist in _contested(playlists, "most_wins"):
        if is_draw(playlist):
            continue
        _credit(win_counts, [playlist.players[0]])
    return top_three("Most Wins", win_counts, subtitle="wachow")


def second_place_finishers(playlist: Playlist) -> List[Player]:
    """Return the players credited with second place.

    When first place is shared there is no clean runner-up, so every player
    tied for first is credited. Otherwise every player on the next score
    down is credited.
    """
    winners = players_at_rank(playlist, 1)
    if len(winners) > 1:
        return winners
    return players_at_rank(playlist, 2)


def calculate_most_second_places(playlists: Sequence[Playlist]) -> RankingResult:
    counts: Dict[str, int] = {}
    for playlist in _contested(playlists, "most_second_places"):
        _credit(counts, second_place_finishers(playlist))
    return top_three("Most Second Place Finishes", counts)


def calculate_most_last_places(playlists: Sequence[Playlist]) -> RankingResult:
    counts: Dict[str, int] = {}
    for playlist in playlists:
        if not playlist.players:
            continue
        _credit(counts, [playlist.players[-1]])
    return top_three(
        "Most Last Place Finishes",
        counts,
        subtitle="king of the sewers",
        is_negative=True,
    )


def calculate_most_draws(playlists: Sequence[Playlist]) -> RankingResult:
    counts: Dict[str, int] = {}
    for playlist in playlists:
        if not playlist.players:
            continue
        top_score = max(p.total_points for p in playlist.players)
        leaders = players_with_score(top_score, playlist.players)
        if len(leaders) > 1:
            _credit(counts, leaders)
    return top_three("Most Draws", counts, is_negative=True)


def calculate_win_ratios(playlists: Sequence[Playlist]) -> List[RankingResult]:
    """Win percentage over non-draw playlists only."""
    wins: Dict[str, int] = {}
    appearances: Dict[str, int] = {}
    for playlist in _contested(playlists, "win_ratios"):
        if is_draw(playlist):
            continue
        _credit(appearances, playlist.players)
        winner = playlist.players[0].name
        wins[winner] = wins.get(winner, 0) + 1

    ratios = {
        name: wins.get(name, 0) / count * 100
        for name, count in appearances.items()
    }
    return [
        top_three("Highest Win Ratio", ratios),
        bottom_three("Lowest Win Ratio", ratios),
    ]


def calculate_average_finishing_positions(playlists: Sequence[Playlist]) -> List[RankingResult]:
    """Mean 1-based competition rank; lower is better."""
    position_totals: Dict[str, float] = {}
    appearances: Dict[str, int] = {}
    for playlist in playlists:
        for player, rank in zip(playlist.players, competition_ranks(playlist.players)):
            position_totals[player.name] = position_totals.get(player.name, 0) + rank
            appearances[player.name] = appearances.get(player.name, 0) + 1

    averages = _averages(position_totals, appearances)
    best = bottom_three(
        "Highest Average Finishing Position",
        averages,
        invert_order=True,
        is_negative=False,
    )
    worst = top_three("Lowest Average Finishing Position", averages, is_negative=True)
    return [best, worst]


def calculate_average_scores(playlists: Sequence[Playlist]) -> List[RankingResult]:
    point_totals: Dict[str, float] = {}
    appearances: Dict[str, int] = {}
    for playlist in playlists:
        for player in playlist.players:
            point_totals[player.name] = point_totals.get(player.name, 0) + player.total_points
            appearances[player.name] = appearances.get(player.name, 0) + 1

    averages = _averages(point_totals, appearances)
    return [
        top_three("Highest Average Points", averages),
        bottom_three("Lowest Average Points", averages),
    ]


def calculate_average_win_margins(playlists: Sequence[Playlist]) -> List[RankingResult]:
    """Mean gap between winner and runner-up, attributed to the winner."""
    margin_totals: Dict[str, float] = {}
    wins: Dict[str, int] = {}
    for playlist in _contested(playlists, "average_win_margins"):
        if is_draw(playlist):
            continue
        winner, runner_up = playlist.players[0], playlist.players[1]
        margin_totals[winner.name] = margin_totals.get(winner.name, 0) + (
            winner.total_points - runner_up.total_points
        )
        wins[winner.name] = wins.get(winner.name, 0) + 1

    averages = _averages(margin_totals, wins)
    return [
        top_three("Best Average Win Margin", averages, subtitle=WIN_MARGIN_SUBTITLE),
        bottom_three("Worst Average Win Margin", averages, subtitle=WIN_MARGIN_SUBTITLE),
    ]


def calculate_average_loss_margins(playlists: Sequence[Playlist]) -> RankingResult:
    """Mean gap to the winner for every losing appearance; draws excluded."""
    margin_totals: Dict[str, float] = {}
    losses: Dict[str, int] = {}
    for playlist in _contested(playlists, "average_loss_margins"):
        if is_draw(playlist):
            continue
        winning_points = playlist.players[0].total_points
        for player in playlist.players[1:]:
            margin_totals[player.name] = margin_totals.get(player.name, 0) + (
                winning_points - player.total_points
            )
            losses[player.name] = losses.get(player.name, 0) + 1

    return top_three(
        "Highest Average Loss Margin",
        _averages(margin_totals, losses),
        subtitle="points difference to playlist winner",
        is_negative=True,
    )


def calculate_dedication_rates(
    playlists: Sequence[Playlist],
    join_dates: Optional[Mapping[str, str]] = None,
) -> List[RankingResult]:
    """Percentage of eligible playlists each player appeared in.

    A player with a join date is only measured against playlists on or
    after that date; everyone else is measured against the whole season.
    """
    if join_dates is None:
        join_dates = _settings.JOIN_DATES
    joined = {name: parse_date(value) for name, value in join_dates.items()}
    dated = [(parse_date(p.date), p) for p in playlists]

    attendance: Dict[str, int] = {}
    for played_on, playlist in dated:
        for player in playlist.players:
            since = joined.get(player.name)
            if since is not None and played_on < since:
                continue
            attendance[player.name] = attendance.get(player.name, 0) + 1

    rates: Dict[str, float] = {}
    for name, count in attendance.items():
        since = joined.get(name)
        if since is None:
            eligible = len(dated)
        else:
            eligible = sum(1 for played_on, _ in dated if played_on >= since)
        if eligible:
            rates[name] = count / eligible * 100

    return [
        top_three("Most Dedicated", rates, subtitle=DEDICATION_SUBTITLE),
        bottom_three("Least Dedicated", rates, subtitle=DEDICATION_SUBTITLE),
    ]


def exceeded_points_to_beat(leader_before: float, available: Sequence[float], winner_total: float) -> bool:
    """Return True if the leader's best final-event outcome beats ``points_to_beat``.

    ``points_to_beat`` is the winner's total less the spread of final-event
    points available. Landing exactly on it does not count.
    """
    max_available = max(available)
    points_to_beat = winner_total - max_available + min(available)
    return leader_before + max_available > points_to_beat


def bottled_leader(playlist: Playlist) -> Optional[str]:
    """Return the name of the player who led into the final event and lost.

    The standings before the final event are rebuilt by subtracting each
    player's ``last_event_points``. The pre-final leader is credited when
    they did not win and, even with the best final-event score available,
    would have cleared ``points_to_beat``. Returns None when the playlist
    cannot be evaluated or nobody bottled it.
    """
    players = playlist.players
    if len(players) < 2 or any(p.last_event_points is None for p in players):
        return None

    # 0 and 1 point finishes are non-scoring and do not count as available
    available = [p.last_event_points for p in players if p.last_event_points > 1]
    if not available:
        return None

    before_final = sorted(
        ((p.total_points - p.last_event_points, p) for p in players),
        key=lambda item: item[0],
        reverse=True,
    )
    if before_final[0][0] == before_final[1][0]:
        return None
    leader_before, leader = before_final[0]

    winner = players[0]
    if leader.name == winner.name or leader.total_points == winner.total_points:
        return None

    if exceeded_points_to_beat(leader_before, available, winner.total_points):
        return leader.name
    return None


def calculate_most_playlists_bottled(playlists: Sequence[Playlist]) -> RankingResult:
    counts: Dict[str, int] = {}
    for playlist in playlists:
        name = bottled_leader(playlist)
        if name is not None:
            counts[name] = counts.get(name, 0) + 1
    return top_three(
        "Most playlists bottled",
        counts,
        subtitle="leading the playlist in final event and lost",
        is_negative=True,
    )


PODIUM_CALCULATORS = (
    calculate_most_wins,
    calculate_most_draws,
    calculate_most_second_places,
    calculate_most_last_places,
    calculate_average_loss_margins,
    calculate_most_playlists_bottled,
    calculate_win_ratios,
    calculate_average_finishing_positions,
    calculate_average_scores,
    calculate_average_win_margins,
    calculate_dedication_rates,
)


def calculate_all_podiums(playlists: Sequence[Playlist]) -> List[RankingResult]:
    """Run every podium calculator in display order.

    A calculator that raises is logged and left out so one bad metric
    never takes down the rest.
    """
    podiums: List[RankingResult] = []
    for calculator in PODIUM_CALCULATORS:
        try:
            result = calculator(playlists)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error calculating %s", calculator.__name__)
            continue
        if isinstance(result, list):
            podiums.extend(result)
        else:
            podiums.append(result)
    return podiums


__all__ = [
    "calculate_most_wins",
    "second_place_finishers",
    "calculate_most_second_places",
    "calculate_most_last_places",
    "calculate_most_draws",
    "calculate_win_ratios",
    "calculate_average_finishing_positions",
    "calculate_average_scores",
    "calculate_average_win_margins",
    "calculate_average_loss_margins",
    "calculate_dedication_rates",
    "exceeded_points_to_beat",
    "bottled_leader",
    "calculate_most_playlists_bottled",
    "PODIUM_CALCULATORS",
    "calculate_all_podiums",
]
