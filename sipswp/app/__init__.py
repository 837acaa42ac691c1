"""Application factory and app-wide configuration."""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from sipswp.app.api.routes import api_bp
from sipswp.config import Settings, settings as default_settings
from sipswp.core.history import HistoryStore
from sipswp.storage.kv import KeyValueStorage, SQLiteStorage

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("sipswp").setLevel(level.upper())


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
) -> Flask:
    """Build the Flask app instance.

    `storage` defaults to the sqlite file named by HISTORY_DB_PATH; tests pass
    an in-memory backend instead.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = Flask(__name__)
    app.config["PROJECT_NAME"] = settings.PROJECT_NAME

    CORS(
        app,
        resources={rf"{settings.API_PREFIX}/*": {"origins": settings.CORS_ORIGIN_URLS}},
        supports_credentials=True,
    )

    backend = storage if storage is not None else SQLiteStorage(settings.HISTORY_DB_PATH)
    app.extensions["history_store"] = HistoryStore(backend, key=settings.HISTORY_KEY)

    app.register_blueprint(api_bp, url_prefix=settings.API_PREFIX)
    return app
