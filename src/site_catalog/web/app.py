"""Flask application factory."""

import atexit
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..catalog.service import SiteCatalog
from ..config import Config
from ..fetching.fetcher import MetadataFetcher
from ..storage.base import SiteStore
from ..storage.database import Database

logger = logging.getLogger(__name__)


def create_app(
    config_path: str | None = "config.yaml",
    store: SiteStore | None = None,
    fetcher: MetadataFetcher | None = None,
) -> Flask:
    """Create and configure the Flask application.

    The store is created once here and closed at interpreter exit; pass
    *store* and *fetcher* to override them (tests do).
    """
    app = Flask(__name__)

    cfg = Config.from_yaml(config_path)
    if store is None:
        store = Database(cfg.database_path)
        atexit.register(store.close)
    if fetcher is None:
        fetcher = MetadataFetcher(
            timeout_ms=cfg.metadata_timeout_ms,
            user_agent=cfg.metadata_user_agent,
            max_redirects=cfg.max_redirects,
            max_content_length=cfg.max_content_length,
        )

    app.config["APP_CONFIG"] = cfg
    app.config["CATALOG"] = SiteCatalog(store, fetcher, default_page_size=cfg.default_page_size)

    # Register routes
    from . import routes

    app.register_blueprint(routes.bp)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({"error": "Internal server error"}), 500

    return app
