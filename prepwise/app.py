import atexit
import logging
import os
import traceback
from datetime import datetime

from bson import ObjectId
from flask import Flask, current_app, jsonify, request, send_from_directory
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from prepwise.config import Config
from prepwise.database import Database
from prepwise.routes.analytics_routes import analytics_bp
from prepwise.routes.auth_routes import auth
from prepwise.routes.note_routes import notes
from prepwise.routes.quiz_routes import quiz
from prepwise.utils.errors import ApiError, validation_message
from prepwise.utils.uploads import URL_PREFIX

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


class MongoJSONProvider(DefaultJSONProvider):
    """ObjectIds as hex strings, datetimes as ISO-8601 UTC."""

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat() + ("Z" if o.tzinfo is None else "")
        return DefaultJSONProvider.default(o)


def _error(message, status, exc=None):
    body = {"success": False, "message": message}
    if exc is not None:
        production = current_app.config["APP_ENV"] == "production"
        body["stack"] = None if production else traceback.format_exc()
    return jsonify(body), status


# =====================================================
# ERROR HANDLERS
# =====================================================
def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return _error(e.message, e.status_code)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return _error(validation_message(e), 400)

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate(e):
        logger.info(f"Duplicate key rejected: {e.details}")
        return _error("Duplicate value for a unique field", 400)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        limit = current_app.config["MAX_UPLOAD_BYTES"] // (1024 * 1024)
        return _error(f"File too large. Maximum size is {limit}MB", 400)

    @app.errorhandler(HTTPException)
    def handle_http(e):
        if e.code == 404:
            return _error(f"Route not found: {request.method} {request.path}", 404)
        return _error(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return _error(str(e) or "Server Error", 500, exc=e)


# =====================================================
# APP FACTORY
# =====================================================
def create_app(overrides=None, database=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.json = MongoJSONProvider(app)
    CORS(app, origins=app.config["CLIENT_URL"], supports_credentials=True)

    # DATABASE
    if database is None:
        if not app.config["MONGO_URI"]:
            raise RuntimeError("MONGO_URI environment variable not set")
        database = Database(app.config["MONGO_URI"], app.config["MONGO_DB_NAME"])
        atexit.register(database.close)
    app.extensions["mongo"] = database.connect()

    # RUNTIME FOLDERS
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # BLUEPRINTS
    app.register_blueprint(auth, url_prefix="/api/auth")
    app.register_blueprint(notes, url_prefix="/api/notes")
    app.register_blueprint(quiz, url_prefix="/api/quizzes")
    app.register_blueprint(analytics_bp, url_prefix="/api/quizzes")

    register_error_handlers(app)

    @app.route("/")
    def index():
        return jsonify({
            "success": True,
            "message": "PrepWise API is running",
            "version": VERSION,
        })

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route(f"/{URL_PREFIX}/<path:filename>")
    def serve_upload(filename):
        return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)

    return app


# =====================================================
# LOCAL RUN ONLY (PRODUCTION USES prepwise.wsgi)
# =====================================================
if __name__ == "__main__":
    application = create_app()
    logger.info(f"Environment: {application.config['APP_ENV']}")
    application.run(host="0.0.0.0", port=application.config["PORT"])
