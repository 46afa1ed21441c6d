"""Podium generation: reduce a per-player metric to a top or bottom three."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from .models import PodiumEntry, RankingResult
from .utils import round_display

PODIUM_SIZE = 3


def _entries(scores: Mapping[str, float], descending: bool) -> List[PodiumEntry]:
    rounded = [PodiumEntry(name, round_display(score)) for name, score in scores.items()]
    # Name first so equal scores come out in a stable, alphabetical order
    rounded.sort(key=lambda e: e.name)
    rounded.sort(key=lambda e: e.total_points, reverse=descending)
    return rounded[:PODIUM_SIZE]


def top_three(
    title: str,
    scores: Mapping[str, float],
    subtitle: Optional[str] = None,
    invert_order: bool = False,
    is_negative: bool = False,
) -> RankingResult:
    """Return the three highest scores in ``scores`` (name -> metric value)."""
    return RankingResult(
        title=title,
        players=tuple(_entries(scores, descending=True)),
        subtitle=subtitle,
        is_negative=is_negative,
        invert_order=invert_order,
    )


def bottom_three(
    title: str,
    scores: Mapping[str, float],
    subtitle: Optional[str] = None,
    invert_order: bool = False,
    is_negative: bool = True,
) -> RankingResult:
    """Return the three lowest scores in ``scores``.

    Bottom podiums highlight an undesirable trait, so ``is_negative``
    defaults to True. Callers ranking a metric where low is good (average
    finishing position) pass ``is_negative=False`` and ``invert_order=True``.
    """
    return RankingResult(
        title=title,
        players=tuple(_entries(scores, descending=False)),
        subtitle=subtitle,
        is_negative=is_negative,
        invert_order=invert_order,
    )


def podium_positions(result: RankingResult) -> List[Dict]:
    """Assign display ranks to podium entries; equal scores share a rank."""
    positions: List[Dict] = []
    for idx, entry in enumerate(result.players):
        if idx > 0 and entry.total_points == result.players[idx - 1].total_points:
            rank = positions[-1]["rank"]
        else:
            rank = idx + 1
        positions.append({
            "name": entry.name,
            "shortName": short_name(entry.name),
            "totalPoints": entry.total_points,
            "rank": rank,
        })
    return positions


def podium_type(title: str) -> str:
    """Classify how a podium's values should be displayed."""
    lowered = title.lower()
    if "points" in lowered or "margin" in lowered:
        return "points"
    if "position" in lowered:
        return "ordinal"
    if "ratio" in lowered or "percentage" in lowered or "dedicated" in lowered:
        return "percentage"
    return "default"


def short_name(name: str) -> str:
    return (name or "")[:3].upper()


__all__ = [
    "PODIUM_SIZE",
    "top_three",
    "bottom_three",
    "podium_positions",
    "podium_type",
    "short_name",
]
