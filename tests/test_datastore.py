import json

import pytest

from app import datastore
from app.datastore import (
    PlaylistStore,
    SnapshotError,
    parse_snapshot,
    player_from_dict,
    playlist_from_dict,
)
from app.models import Player


SNAPSHOT = {
    "playlists": [
        {
            "name": "Opening night",
            "date": "2025-03-03",
            "length": 6,
            "players": [
                {"name": "A", "totalPoints": 100, "lastEventPoints": 25},
                {"name": "B", "totalPoints": 80.5},
            ],
        },
        {
            "name": "Second",
            "date": "2025-03-10T19:00:00Z",
            "length": 4,
            "players": [{"name": "B", "total_points": 60, "last_event_points": 10}],
        },
    ]
}


def _write(tmp_path, payload, name="season.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return path


def test_player_from_dict_accepts_both_key_styles():
    assert player_from_dict({"name": "A", "totalPoints": 10}) == Player("A", 10)
    assert player_from_dict({"name": "A", "total_points": 1.5, "last_event_points": 2}) == Player("A", 1.5, 2)


@pytest.mark.parametrize(
    "data",
    [
        {"totalPoints": 10},
        {"name": "A"},
        {"name": "A", "totalPoints": "lots"},
        {"name": "A", "totalPoints": True},
    ],
)
def test_player_from_dict_rejects_bad_players(data):
    with pytest.raises(SnapshotError):
        player_from_dict(data)


def test_playlist_date_is_trimmed_and_validated():
    playlist = playlist_from_dict(SNAPSHOT["playlists"][1])
    assert playlist.date == "2025-03-10"
    with pytest.raises(SnapshotError):
        playlist_from_dict({"name": "X", "date": "10/03/2025", "length": 1})
    with pytest.raises(SnapshotError):
        playlist_from_dict({"name": "X", "length": 1})


def test_parse_snapshot_accepts_list_or_wrapper():
    wrapped = parse_snapshot(SNAPSHOT)
    bare = parse_snapshot(SNAPSHOT["playlists"])
    assert wrapped == bare
    assert [p.name for p in wrapped] == ["Opening night", "Second"]
    assert wrapped[0].players[1] == Player("B", 80.5)
    with pytest.raises(SnapshotError):
        parse_snapshot("nope")


def test_subscribe_waits_for_first_snapshot(three_playlist_season):
    store = PlaylistStore()
    seen = []
    store.subscribe(seen.append)
    assert seen == []
    assert store.has_snapshot is False

    store.replace(three_playlist_season)
    assert seen == [tuple(three_playlist_season)]

    late = []
    store.subscribe(late.append)
    assert late == [tuple(three_playlist_season)]


def test_replace_with_empty_season_still_notifies():
    store = PlaylistStore()
    seen = []
    store.subscribe(seen.append)
    store.replace([])
    assert seen == [()]
    assert store.has_snapshot is True
    assert store.last_playlist_date() is None


def test_load_file(tmp_path):
    store = PlaylistStore(source=_write(tmp_path, SNAPSHOT))
    assert store.refresh() is True
    assert len(store.snapshot()) == 2
    assert store.last_playlist_date() == "2025-03-10"


def test_load_file_without_source():
    with pytest.raises(SnapshotError):
        PlaylistStore().load_file()


def test_failed_refresh_keeps_previous_snapshot(tmp_path, caplog):
    path = _write(tmp_path, SNAPSHOT)
    store = PlaylistStore(source=path)
    store.refresh()
    seen = []
    store.subscribe(seen.append)
    seen.clear()

    path.write_text("{not json")
    caplog.set_level("ERROR")
    assert store.refresh() is False
    assert len(store.snapshot()) == 2
    assert seen == []
    assert any("Error refreshing season snapshot" in r.getMessage() for r in caplog.records)


def test_missing_file_refresh_fails(tmp_path):
    store = PlaylistStore(source=tmp_path / "missing.json")
    assert store.refresh() is False
    assert store.has_snapshot is False


def test_refresh_if_stale(tmp_path, monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(datastore.time, "time", lambda: now[0])
    store = PlaylistStore(source=_write(tmp_path, SNAPSHOT), refresh_seconds=60)
    assert store.is_stale() is True
    assert store.refresh_if_stale() is True

    now[0] += 30
    assert store.refresh_if_stale() is False
    now[0] += 30
    assert store.is_stale() is True
    assert store.refresh_if_stale() is True


def test_refresh_if_stale_without_source():
    assert PlaylistStore().refresh_if_stale() is False


@pytest.mark.parametrize(
    "payload",
    [
        [1, 2],
        [{"players": ["A"]}],
        [{"name": "P", "date": "2025-03-03", "length": 1, "players": ["A"]}],
        [{"name": "P", "date": "2025-03-03", "length": 1, "players": {"A": 10}}],
        {"playlists": "P1"},
    ],
)
def test_structurally_bad_snapshot_raises_snapshot_error(payload):
    with pytest.raises(SnapshotError):
        parse_snapshot(payload)


@pytest.mark.parametrize(
    "content",
    [b"[1]", b'[{"players": ["A"]}]', b"\xff\xfe[]", b'{"playlists": [null]}'],
)
def test_refresh_survives_bad_files(tmp_path, caplog, content):
    path = _write(tmp_path, SNAPSHOT)
    store = PlaylistStore(source=path)
    assert store.refresh() is True

    path.write_bytes(content)
    caplog.set_level("ERROR")
    assert store.refresh() is False
    assert len(store.snapshot()) == 2
    assert store.is_stale() is False
    assert any("Error refreshing season snapshot" in r.getMessage() for r in caplog.records)
