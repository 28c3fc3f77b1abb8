# backend/tindahan/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.inventory import inventory_bp
    from .routes.sales import sales_bp
    from .routes.ledger import ledger_bp
    from .routes.wallet import wallet_bp
    from .routes.receipts import receipts_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(ledger_bp)
    app.register_blueprint(wallet_bp)
    app.register_blueprint(receipts_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
