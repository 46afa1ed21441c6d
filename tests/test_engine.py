from app import engine
from app.datastore import PlaylistStore
from app.engine import StatsEngine, compute_season_stats
from app.models import RaceResults


def _podium(stats, title):
    return next(p for p in stats.podiums if p.title == title)


def _scalar(stats, title):
    return next(s for s in stats.individual if s.title == title)


def test_latest_is_none_until_first_snapshot():
    store = PlaylistStore()
    stats_engine = StatsEngine(store)
    assert stats_engine.latest is None
    assert stats_engine.get_all_podiums() == ()
    assert stats_engine.get_race_breakdown() == RaceResults()
    assert stats_engine.get_overall_leaderboard() == ()


def test_empty_snapshot_is_computed_not_missing():
    store = PlaylistStore()
    stats_engine = StatsEngine(store)
    store.replace([])
    assert stats_engine.latest is not None
    assert stats_engine.latest.playlist_count == 0
    assert len(stats_engine.get_all_podiums()) == 16
    assert all(p.players == () for p in stats_engine.get_all_podiums())


def test_recomputes_on_every_replace(three_playlist_season):
    store = PlaylistStore()
    stats_engine = StatsEngine(store)
    store.replace(three_playlist_season[:1])
    first = stats_engine.latest
    store.replace(three_playlist_season)
    assert stats_engine.latest is not first
    assert stats_engine.latest.playlist_count == 3
    assert len(stats_engine.get_race_breakdown().races) == 3


def test_engine_attached_after_load_computes_immediately(three_playlist_season):
    store = PlaylistStore()
    store.replace(three_playlist_season)
    stats_engine = StatsEngine(store)
    assert stats_engine.latest.playlist_count == 3


def test_listeners_receive_each_result(three_playlist_season):
    store = PlaylistStore()
    stats_engine = StatsEngine(store)
    received = []
    stats_engine.subscribe(received.append)
    assert received == []
    store.replace(three_playlist_season)
    store.replace([])
    assert [s.playlist_count for s in received] == [3, 0]


def test_failing_component_degrades_to_empty(monkeypatch, caplog, three_playlist_season):
    def broken(playlists):
        raise RuntimeError("boom")

    monkeypatch.setattr(engine, "calculate_all_podiums", broken)
    caplog.set_level("ERROR")
    stats = compute_season_stats(three_playlist_season)
    assert stats.podiums == ()
    assert len(stats.leaderboard) == 2
    assert any("Error computing podiums" in r.getMessage() for r in caplog.records)


def test_three_playlist_season_end_to_end(three_playlist_season):
    stats = compute_season_stats(three_playlist_season)

    wins = _podium(stats, "Most Wins")
    assert [(e.name, e.total_points) for e in wins.players] == [("A", 1), ("B", 1)]
    draws = _podium(stats, "Most Draws")
    assert [(e.name, e.total_points) for e in draws.players] == [("A", 1), ("B", 1)]
    assert _scalar(stats, "Longest Winning Streak").value == 1

    payload = stats.to_dict()
    assert payload["playlistCount"] == 3
    assert payload["computedAt"].endswith("Z")
    assert payload["podiums"][0]["kind"] == "ranking"
    assert payload["individual"][0]["kind"] == "scalar"
    assert [r["playerName"] for r in payload["leaderboard"]] == ["B", "A"]


def test_computed_at_is_utc(three_playlist_season):
    stats = compute_season_stats(three_playlist_season)
    assert stats.computed_at.utcoffset().total_seconds() == 0
    assert stats.computed_at_iso.endswith("Z")
    assert "+00:00" not in stats.computed_at_iso
