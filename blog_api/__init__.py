import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session), bound per app below

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Blog API",
        "version": "1.0.0",
        "description": "REST API for accounts, authentication, blogs, comments and likes.",
    },
    "basePath": "/",  # Blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the access token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
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

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in ("blog_api", "utils", "models"):
        logging.getLogger(name).setLevel(level)


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` are applied on top of the selected config class (tests use this).
    """
    from utils.security import TokenCodec
    from utils.rate_limit import init_rate_limiting

    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    app.config.update(overrides)

    configure_logging(app)

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}}, supports_credentials=True)

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform error envelope for every failure
    register_error_handlers(app)

    storage.init_app(app)
    app.extensions["token_codec"] = TokenCodec.from_config(app.config)
    init_rate_limiting(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .blogs import bp as blogs_bp
    from .comments import bp as comments_bp
    from .likes import bp as likes_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(blogs_bp, url_prefix="/api/v1/blogs")
    app.register_blueprint(comments_bp, url_prefix="/api/v1/comments")
    app.register_blueprint(likes_bp, url_prefix="/api/v1/likes")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    return app
