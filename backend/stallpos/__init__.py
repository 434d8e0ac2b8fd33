# backend/stallpos/__init__.py
import logging

from flask import Flask

from .config import Config
from .errors import StallError
from .extensions import db, migrate


def create_app(test_config=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes import error_response
    from .routes.system import system_bp
    from .routes.items import items_bp, employees_bp, stock_logs_bp
    from .routes.sales import sales_bp
    from .routes.costs import costs_bp
    from .routes.reports import reports_bp
    from .routes.queues import queues_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(stock_logs_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(costs_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(queues_bp)

    @app.errorhandler(StallError)
    def handle_stall_error(error: StallError):
        return error_response(error)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
