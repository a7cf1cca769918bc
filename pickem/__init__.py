import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Storage is read from RATELIMIT_STORAGE_URI at init_app time
limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Setup logging first so extension start-up messages are captured
    from pickem.utils.logging_config import setup_logging

    setup_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Token based API authentication
    from pickem.auth import load_user_from_request, unauthorized

    login_manager.request_loader(load_user_from_request)
    login_manager.unauthorized_handler(unauthorized)

    # Import and register blueprints
    from pickem.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")

    from pickem.routes.leagues import bp as leagues_bp

    app.register_blueprint(leagues_bp, url_prefix="/api/v1/leagues")

    from pickem.routes.games import bp as games_bp

    app.register_blueprint(games_bp, url_prefix="/api/v1/games")

    from pickem.routes.picks import bp as picks_bp

    app.register_blueprint(picks_bp, url_prefix="/api/v1/picks")

    @app.route("/health")
    def health():
        return jsonify(
            {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
        )

    # Register error handlers
    from pickem.errors import register_error_handlers

    register_error_handlers(app)

    show_config_warnings(app, config_name)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def show_config_warnings(app, config_name):
    """Log configuration status"""
    import warnings

    logger.info(f"League Pick'em starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        warnings.warn("DEBUG mode is enabled in production!", UserWarning)

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if "sqlite" in db_url:
        if "memory" in db_url:
            logger.info("Using SQLite database (in-memory)")
        else:
            logger.info("Using SQLite database (development mode)")
    elif "postgresql" in db_url:
        logger.info("Using PostgreSQL database")
    else:
        logger.info(
            f"Using database: {db_url.split('://')[0] if '://' in db_url else 'Unknown'}"
        )

    logger.info(f"Cache backend: {app.config.get('CACHE_TYPE')}")


from pickem import models  # noqa: F401, E402 - imported for model registration
