"""In-memory season snapshot with change notification.

The store holds the current list of playlists and calls every subscriber
synchronously whenever the snapshot is replaced. Snapshots can be loaded
from a JSON file shaped like ``data/season.json``.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .models import Player, Playlist
from .utils import parse_date

logger = logging.getLogger(__name__)

Listener = Callable[[Tuple[Playlist, ...]], None]


class SnapshotError(ValueError):
    """Raised when a snapshot payload cannot be turned into playlists."""


def _number(value: Any, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise SnapshotError(f"{field} must be a number, got {value!r}")
    try:
        num = float(value)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"{field} must be a number, got {value!r}") from exc
    return int(num) if num.is_integer() else num


def player_from_dict(data: Dict[str, Any]) -> Player:
    """Build a Player from ``{"name", "totalPoints", "lastEventPoints"}``.

    Snake-case keys are accepted as well.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"player must be an object, got {data!r}")
    name = data.get("name")
    if not name:
        raise SnapshotError(f"player is missing a name: {data!r}")
    total = data.get("totalPoints", data.get("total_points"))
    last = data.get("lastEventPoints", data.get("last_event_points"))
    return Player(
        name=str(name),
        total_points=_number(total, f"{name}.totalPoints"),
        last_event_points=None if last is None else _number(last, f"{name}.lastEventPoints"),
    )


def playlist_from_dict(data: Dict[str, Any]) -> Playlist:
    if not isinstance(data, dict):
        raise SnapshotError(f"playlist must be an object, got {data!r}")
    date_value = data.get("date")
    if not date_value:
        raise SnapshotError(f"playlist is missing a date: {data.get('name')!r}")
    try:
        parse_date(date_value)
    except ValueError as exc:
        raise SnapshotError(f"playlist date {date_value!r} is not YYYY-MM-DD") from exc
    raw_players = data.get("players") or []
    if not isinstance(raw_players, list):
        raise SnapshotError(f"players of {data.get('name')!r} must be a list")
    players = tuple(player_from_dict(p) for p in raw_players)
    return Playlist(
        name=str(data.get("name") or ""),
        date=str(date_value)[:10],
        length=int(_number(data.get("length", 0), "length")),
        players=players,
    )


def parse_snapshot(payload: Any) -> List[Playlist]:
    """Accept either a bare list of playlists or ``{"playlists": [...]}``."""
    if isinstance(payload, dict):
        payload = payload.get("playlists", [])
    if not isinstance(payload, list):
        raise SnapshotError("snapshot must be a list of playlists")
    return [playlist_from_dict(item) for item in payload]


class PlaylistStore:
    """Current season snapshot plus a subscriber list."""

    def __init__(self, source: Optional[Path] = None, refresh_seconds: int = 12 * 60 * 60):
        self.source = Path(source) if source else None
        self.refresh_seconds = refresh_seconds
        self._playlists: Tuple[Playlist, ...] = ()
        self._listeners: List[Listener] = []
        self._loaded_at: Optional[float] = None
        self._has_snapshot = False

    def snapshot(self) -> Tuple[Playlist, ...]:
        return self._playlists

    @property
    def has_snapshot(self) -> bool:
        return self._has_snapshot

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener``; if a snapshot is already loaded it is called at once."""
        self._listeners.append(listener)
        if self._has_snapshot:
            listener(self._playlists)

    def replace(self, playlists: Sequence[Playlist]) -> None:
        self._playlists = tuple(playlists)
        self._loaded_at = time.time()
        self._has_snapshot = True
        logger.info("Season snapshot replaced: %d playlists", len(self._playlists))
        for listener in list(self._listeners):
            listener(self._playlists)

    def load_file(self, path: Optional[Path] = None) -> None:
        """Replace the snapshot with the playlists stored at ``path``.

        Raises:
            OSError: if the file cannot be read.
            SnapshotError: if the content is not a valid snapshot.
        """
        target = Path(path) if path else self.source
        if target is None:
            raise SnapshotError("no snapshot file configured")
        with target.open(encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise SnapshotError(f"{target} is not valid UTF-8 JSON: {exc}") from exc
        self.replace(parse_snapshot(payload))

    def refresh(self) -> bool:
        """Reload from ``source``, keeping the last snapshot on failure."""
        if self.source is None:
            return False
        try:
            self.load_file(self.source)
        except (OSError, SnapshotError):
            logger.exception("Error refreshing season snapshot from %s", self.source)
            self._loaded_at = time.time()
            return False
        return True

    def is_stale(self) -> bool:
        if self._loaded_at is None:
            return True
        return time.time() - self._loaded_at >= self.refresh_seconds

    def refresh_if_stale(self) -> bool:
        if self.source is None or not self.is_stale():
            return False
        return self.refresh()

    def last_playlist_date(self) -> Optional[str]:
        if not self._playlists:
            return None
        return max(parse_date(p.date) for p in self._playlists).isoformat()


__all__ = [
    "SnapshotError",
    "player_from_dict",
    "playlist_from_dict",
    "parse_snapshot",
    "PlaylistStore",
]
