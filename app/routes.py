from flask import Blueprint, current_app

from .engine import StatsEngine
from .datastore import PlaylistStore
from .podium import podium_positions, podium_type


bp = Blueprint('main', __name__)


def _store() -> PlaylistStore:
    return current_app.extensions['season_stats']['store']


def _engine() -> StatsEngine:
    return current_app.extensions['season_stats']['engine']


@bp.before_app_request
def _refresh_snapshot():
    """Reload the season file once the refresh interval has passed."""
    store = _store()
    if store.refresh_if_stale():
        current_app.logger.info("Season snapshot refreshed from %s", store.source)


def _not_computed():
    return {'error': 'not computed'}, 503


@bp.route('/health')
def health():
    store = _store()
    latest = _engine().latest
    return {
        'status': 'ok' if latest is not None else 'waiting',
        'source': str(store.source) if store.source else None,
        'playlists': len(store.snapshot()),
        'computed_at': latest.computed_at_iso if latest else None,
    }


@bp.route('/api/podiums')
def podiums():
    """Ranking results with display ranks for the podium view."""
    if _engine().latest is None:
        return _not_computed()
    out = []
    for result in _engine().get_all_podiums():
        item = result.to_dict()
        item['positions'] = podium_positions(result)
        item['type'] = podium_type(result.title)
        out.append(item)
    return {'podiums': out}


@bp.route('/api/individual')
def individual():
    if _engine().latest is None:
        return _not_computed()
    return {'stats': [s.to_dict() for s in _engine().get_all_individual_stats()]}


@bp.route('/api/charts')
def charts():
    if _engine().latest is None:
        return _not_computed()
    return {'charts': [c.to_dict() for c in _engine().get_chart_series()]}


@bp.route('/api/races')
def races():
    if _engine().latest is None:
        return _not_computed()
    return _engine().get_race_breakdown().to_dict()


@bp.route('/api/leaderboard')
def leaderboard():
    if _engine().latest is None:
        return _not_computed()
    return {'leaderboard': [r.to_dict() for r in _engine().get_overall_leaderboard()]}


@bp.route('/api/last-updated')
def last_updated():
    return {'date': _store().last_playlist_date()}


@bp.route('/api/refresh', methods=['POST'])
def refresh():
    """Reload the season snapshot from its source file."""
    store = _store()
    if store.source is None:
        return {'error': 'no snapshot source configured'}, 400
    if not store.refresh():
        return {'error': 'refresh failed; keeping previous snapshot'}, 502
    return {'status': 'ok', 'playlists': len(store.snapshot())}
