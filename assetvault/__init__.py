import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import AssetImageError
from .extensions import csrf, db, limiter, login_manager, migrate
from .storage import EXTENSION_KEY, build_storage

logger = logging.getLogger(__name__)


def _configure_logging(app: Flask):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    app.logger.setLevel(level)


def _register_error_handlers(app: Flask):
    @app.errorhandler(AssetImageError)
    def asset_image_error(error: AssetImageError):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error}", exc_info=error)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        code = (error.name or "error").upper().replace(" ", "_")
        return jsonify({"error": error.description, "code": code}), error.code

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        message = str(error) if app.config.get("DEBUG") else "An unexpected error occurred"
        return jsonify({"error": message, "code": "INTERNAL_ERROR"}), 500


def create_app(test_config=None, storage=None):
    load_dotenv()
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(Config())
    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    if storage is None:
        if app.config.get("STORAGE_BACKEND") == "local":
            os.makedirs(app.config.get("STORAGE_ROOT", "./storage/uploads"), exist_ok=True)
        storage = build_storage(app.config)
    app.extensions[EXTENSION_KEY] = storage

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    from .routes.images import images_bp

    app.register_blueprint(images_bp)

    _register_error_handlers(app)

    @app.shell_context_processor
    def make_shell_context():
        from . import models
        return {"db": db, "storage": app.extensions[EXTENSION_KEY], **{name: getattr(models, name) for name in dir(models) if name[0].isupper()}}

    app.permanent_session_lifetime = timedelta(days=30)

    return app
