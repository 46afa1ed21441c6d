"""Single-value season facts."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from . import settings as _settings
from .models import Playlist, ScalarResult
from .utils import is_contested, is_draw, parse_date, round_display, sort_chronologically

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def calculate_total_playlists(playlists: Sequence[Playlist]) -> ScalarResult:
    return ScalarResult(title="Total Playlists", value=len(playlists))


def calculate_average_playlist_length(playlists: Sequence[Playlist]) -> ScalarResult:
    if not playlists:
        return ScalarResult(title="Average Playlist Length", value=0)
    average = sum(p.length for p in playlists) / len(playlists)
    return ScalarResult(title="Average Playlist Length", value=round_display(average))


def calculate_average_squad_size(playlists: Sequence[Playlist]) -> ScalarResult:
    if not playlists:
        return ScalarResult(title="Average Squad Size", value=0)
    average = sum(len(p.players) for p in playlists) / len(playlists)
    return ScalarResult(title="Average Squad Size", value=round_display(average))


def calculate_most_popular_days(playlists: Sequence[Playlist]) -> List[ScalarResult]:
    """Most and least common weekday among playlist dates.

    Ties go to the earlier weekday (Monday first). Only weekdays that
    hosted at least one playlist are candidates for least popular.
    """
    counts: Dict[int, int] = {}
    for playlist in playlists:
        weekday = parse_date(playlist.date).weekday()
        counts[weekday] = counts.get(weekday, 0) + 1

    if not counts:
        return [ScalarResult(title="Most Popular Day"), ScalarResult(title="Least Popular Day")]

    ordered = sorted(counts.items())
    most = max(ordered, key=lambda item: item[1])
    least = min(ordered, key=lambda item: item[1])
    return [
        ScalarResult(title="Most Popular Day", subtitle=WEEKDAYS[most[0]], value=most[1]),
        ScalarResult(title="Least Popular Day", subtitle=WEEKDAYS[least[0]], value=least[1]),
    ]


def _week_bins(year: int) -> List[Tuple[date, date]]:
    """Monday-to-Sunday weeks starting on the first Monday of ``year``."""
    week_start = date(year, 1, 1)
    while week_start.weekday() != 0:
        week_start += timedelta(days=1)
    end_of_year = date(year, 12, 31)
    bins: List[Tuple[date, date]] = []
    while week_start <= end_of_year:
        bins.append((week_start, week_start + timedelta(days=6)))
        week_start += timedelta(days=7)
    return bins


def _month_day(value: date) -> str:
    return f"{value:%B} {value.day}"


def calculate_most_playlists_in_one_week(
    playlists: Sequence[Playlist],
    year: Optional[int] = None,
) -> ScalarResult:
    """Busiest Monday-Sunday week of ``year``; the earliest week wins ties."""
    if year is None:
        year = _settings.WEEK_BINNING_YEAR
    dates = [parse_date(p.date) for p in playlists]

    best: Optional[Tuple[date, date]] = None
    best_count = 0
    for week_start, week_end in _week_bins(year):
        count = sum(1 for d in dates if week_start <= d <= week_end)
        if count > best_count:
            best, best_count = (week_start, week_end), count

    if best is None:
        return ScalarResult(title="Most Playlists in One Week", value=0)
    return ScalarResult(
        title="Most Playlists in One Week",
        subtitle=f"{_month_day(best[0])} - {_month_day(best[1])}",
        value=best_count,
    )


def calculate_longest_winning_streak(playlists: Sequence[Playlist]) -> ScalarResult:
    """Longest run of consecutive outright wins by one player.

    Playlists are taken in date order and a draw resets the run. Everyone
    sharing the longest run is listed alphabetically.
    """
    longest = 0
    current = 0
    current_winner: Optional[str] = None
    holders: List[str] = []

    for playlist in sort_chronologically(playlists):
        if not is_contested(playlist):
            logger.debug("longest_winning_streak: skipping playlist %r on %s",
                         playlist.name, playlist.date)
            continue
        if is_draw(playlist):
            current = 0
            current_winner = None
            continue

        winner = playlist.players[0].name
        if winner == current_winner:
            current += 1
        else:
            current_winner = winner
            current = 1

        if current > longest:
            longest = current
            holders = [winner]
        elif current == longest and winner not in holders:
            holders.append(winner)

    subtitle = ", ".join(sorted(holders)) if holders else None
    player = holders[0] if len(holders) == 1 else None
    return ScalarResult(title="Longest Winning Streak", subtitle=subtitle, value=longest, player=player)


def calculate_last_playlist_date(playlists: Sequence[Playlist]) -> ScalarResult:
    if not playlists:
        return ScalarResult(title="Last Playlist")
    latest = max(parse_date(p.date) for p in playlists)
    return ScalarResult(title="Last Playlist", subtitle=latest.isoformat())


INDIVIDUAL_CALCULATORS = (
    calculate_total_playlists,
    calculate_average_playlist_length,
    calculate_average_squad_size,
    calculate_most_popular_days,
    calculate_most_playlists_in_one_week,
    calculate_longest_winning_streak,
    calculate_last_playlist_date,
)


def calculate_all_individual_stats(playlists: Sequence[Playlist]) -> List[ScalarResult]:
    stats: List[ScalarResult] = []
    for calculator in INDIVIDUAL_CALCULATORS:
        try:
            result = calculator(playlists)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error calculating %s", calculator.__name__)
            continue
        if isinstance(result, list):
            stats.extend(result)
        else:
            stats.append(result)
    return stats


__all__ = [
    "WEEKDAYS",
    "calculate_total_playlists",
    "calculate_average_playlist_length",
    "calculate_average_squad_size",
    "calculate_most_popular_days",
    "calculate_most_playlists_in_one_week",
    "calculate_longest_winning_streak",
    "calculate_last_playlist_date",
    "INDIVIDUAL_CALCULATORS",
    "calculate_all_individual_stats",
]
