import logging

from flask import Flask, jsonify
from flask_cors import CORS
from pydantic import ValidationError

import config
from config import validate_api_keys
from db import init_db
from routes.auth import auth_bp
from routes.games import games_bp
from routes.health import health_bp
from routes.questionnaire import questionnaire_bp
from routes.rag import rag_bp
from utils.api_response import failure, respond

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

BLUEPRINTS = [auth_bp, games_bp, questionnaire_bp, health_bp, rag_bp]


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return respond(failure(e, 400))

    @app.errorhandler(404)
    def handle_not_found(e):
        return respond(failure("Not found", 404))

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return respond(failure("Method not allowed", 405))

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"Unhandled error: {str(getattr(e, 'original_exception', e))}")
        return respond(failure("Something went wrong", 500))


def create_app(testing=False, database=None, config_overrides=None):
    """
    Build the Flask application.

    Args:
        testing: Skip the startup secret check and enable Flask testing mode.
        database: Ready pymongo-compatible database handle (tests pass a mongomock one).
        config_overrides: Extra values merged into ``app.config``.
    """
    api_errors = validate_api_keys()
    for error in api_errors:
        logger.warning(error)
    if not testing and (not config.JWT_SECRET or not config.REFRESH_TOKEN_SECRET):
        raise RuntimeError("JWT_SECRET and REFRESH_TOKEN_SECRET must be set")

    app = Flask(__name__)
    app.config.update(
        TESTING=testing,
        MONGO_URI=config.MONGO_URI,
        MONGO_DB_NAME=config.MONGO_DB_NAME,
    )
    if config_overrides:
        app.config.update(config_overrides)

    CORS(
        app,
        origins=config.ALLOWED_ORIGINS,
        supports_credentials="*" not in config.ALLOWED_ORIGINS,
    )

    init_db(app, database)

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
    register_error_handlers(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Liveness probe."""
        return jsonify({
            "status": "healthy",
            "service": "HealthAI Guardian API",
            "version": "1.0.0",
        })

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=False)
