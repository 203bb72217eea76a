import logging
import os

from flask import Flask, current_app
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .config import CONFIGS
from .extensions import db, migrate, jwt, ma, cors
from .services.submission_service import SubmissionService
from .utils.exceptions import ServiceError
from .utils.response_formatter import error_response


def create_app(config_name=None, overrides=None):
    app = Flask(__name__, instance_relative_config=False)
    env = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIGS.get(env, CONFIGS["development"]))
    if overrides:
        app.config.from_mapping(overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",")]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    # one service graph per app, handed to the blueprints through app.extensions
    app.extensions["virtual_museum"] = SubmissionService.from_config(db, app.config)

    # register blueprints
    from virtual_museum.routes.submission_routes import bp as submission_bp
    from virtual_museum.routes.admin_review_routes import bp as admin_review_bp
    from virtual_museum.routes.public_routes import bp as public_bp

    app.register_blueprint(submission_bp)
    app.register_blueprint(admin_review_bp)
    app.register_blueprint(public_bp)

    register_error_handlers(app)
    register_jwt_handlers()

    return app


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def service_error(e):
        if e.status >= 500:
            current_app.logger.error("%s: %s", e.code, e.message)
        return error_response(e.code, e.message, e.details, status=e.status)

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return error_response("VALIDATION_ERROR", "Invalid request payload", e.messages, status=422)

    @app.errorhandler(SQLAlchemyError)
    def storage_error(e):
        db.session.rollback()
        current_app.logger.error("Storage failure: %s", e)
        return error_response("SERVER_ERROR", "Internal server error", status=500)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response("BAD_REQUEST", str(e), status=400)

    @app.errorhandler(401)
    def unauthorized(e):
        return error_response("UNAUTHORIZED", str(e), status=401)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", str(e), status=405)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("SERVER_ERROR", "Internal server error", status=500)


def register_jwt_handlers():
    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response("UNAUTHORIZED", "Token has expired", status=401)
