import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.account_store import AccountStore
from utils.auth_flow import AuthenticationFlow
from utils.security import TokenConfig, TokenService

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Run Tracker API",
        "version": "1.0.0",
        "description": "REST API for accounts, authentication and running sessions.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    The token service is built here exactly once from the loaded config and
    shared through app.extensions; a missing JWT_SECRET stops startup.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET is not set; refusing to start")

    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    tokens = TokenService(TokenConfig.from_mapping(app.config))
    app.extensions["token_service"] = tokens
    app.extensions["auth_flow"] = AuthenticationFlow(AccountStore(storage), tokens)

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .accounts import bp as accounts_bp
    from .runs import bp as runs_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(accounts_bp, url_prefix="/api/v1")
    app.register_blueprint(runs_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Run Tracker API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
