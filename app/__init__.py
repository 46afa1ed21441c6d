import os
from pathlib import Path

from flask import Flask

from .settings import DATA_DIR


def create_app(source=None):
    app = Flask(__name__)

    # Snapshot file and refresh interval come from the environment
    if source is None:
        source = os.environ.get("SEASON_DATA_PATH") or DATA_DIR / "season.json"
    try:
        refresh_seconds = int(os.environ.get("SEASON_REFRESH_SECONDS", str(12 * 60 * 60)))
    except ValueError:
        refresh_seconds = 12 * 60 * 60

    from .datastore import PlaylistStore
    from .engine import StatsEngine

    store = PlaylistStore(Path(source), refresh_seconds=refresh_seconds)
    engine = StatsEngine(store)
    app.extensions["season_stats"] = {"store": store, "engine": engine}

    from . import routes  # type: ignore
    app.register_blueprint(routes.bp)

    app.logger.info("Loading season snapshot from %s", store.source)
    if not store.refresh():
        app.logger.warning("No season snapshot loaded; statistics will be empty until a refresh succeeds")

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    create_app().run(host='0.0.0.0', port=port)
