# backend/slabdesk/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from .tasks import init_celery
    init_celery(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.buying_desk_sessions import sessions_bp
    from .routes.buying_desk_assets import assets_bp
    from .routes.buying_desk_checkout import checkout_bp
    from .routes.buying_desk_sellers import sellers_bp
    from .routes.buying_desk_bulk import bulk_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(sessions_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(checkout_bp)
    app.register_blueprint(sellers_bp)
    app.register_blueprint(bulk_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ALLOWED_ORIGINS", set()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
