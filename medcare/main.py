"""Application factory: configuration, logging, extensions, blueprints and JSON error handlers."""
import logging
import os
import traceback

import click
from flask import Flask, jsonify
from flask.logging import default_handler
from werkzeug.exceptions import HTTPException

from medcare.extensions import db, bcrypt, login_manager, migrate
from medcare.errors import ApiError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_SECRET_KEY = "dev_secret_key_123!@#"


def load_config(app, overrides=None):
    env = os.environ
    app.config["SECRET_KEY"] = env.get("FLASK_SECRET_KEY", DEFAULT_SECRET_KEY)
    db_path = os.path.join(app.instance_path, "medcare.db")
    app.config["SQLALCHEMY_DATABASE_URI"] = env.get("DATABASE_URL", f"sqlite:///{db_path}")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["JWT_SECRET"] = env.get("JWT_SECRET")
    app.config["JWT_EXPIRES_DAYS"] = int(env.get("JWT_EXPIRES_DAYS", 30))
    app.config["ENV"] = env.get("APP_ENV", "development")
    app.config["LOG_LEVEL"] = env.get("LOG_LEVEL", "INFO")
    app.config["LOW_STOCK_THRESHOLD"] = int(env.get("LOW_STOCK_THRESHOLD", 10))
    app.config["EXPIRY_WARNING_DAYS"] = int(env.get("EXPIRY_WARNING_DAYS", 30))
    app.config["DASHBOARD_EXPIRY_DAYS"] = int(env.get("DASHBOARD_EXPIRY_DAYS", 10))
    app.config["PRODUCT_IMAGE_DIR"] = env.get("PRODUCT_IMAGE_DIR")
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # Product images
    if overrides:
        app.config.update(overrides)
    if not app.config.get("JWT_SECRET"):
        app.config["JWT_SECRET"] = app.config["SECRET_KEY"]
    if app.config["ENV"] == "production" and DEFAULT_SECRET_KEY in (app.config["SECRET_KEY"], app.config["JWT_SECRET"]):
        raise RuntimeError("Refusing to start in production with the default secret key")


def configure_logging(app):
    default_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app.logger.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())


def register_error_handlers(app):
    def error_response(message, status_code):
        body = {"success": False, "message": message}
        if app.config.get("ENV") != "production":
            body["stack"] = traceback.format_exc()
        return jsonify(body), status_code

    @app.errorhandler(ApiError)
    def api_error_handler(e):
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}", exc_info=True)
        return error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def http_error_handler(e):
        db.session.rollback()
        return error_response(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def internal_server_error_handler(e):
        db.session.rollback()
        app.logger.error(f"Internal Server Error: {e}", exc_info=True)
        return error_response(str(e) or "Internal Server Error", 500)


def create_app(config=None):
    app = Flask(__name__)
    load_config(app, config)
    configure_logging(app)

    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported for migrations; security registers the token loader
    from medcare import models, security  # noqa: F401

    from medcare.routes.auth_api import auth_bp
    from medcare.routes.supplier_api import supplier_bp
    from medcare.routes.product_api import product_bp
    from medcare.routes.order_api import order_bp
    from medcare.routes.payment_api import payment_bp
    from medcare.routes.api_routes import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(supplier_bp)
    app.register_blueprint(product_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(api_bp)

    register_error_handlers(app)

    @app.cli.command("seed")
    @click.option("--admin-email", default="admin@medcare.io", show_default=True)
    @click.option("--admin-password", default="admin123", show_default=True)
    def seed_command(admin_email, admin_password):
        """Create the tables and load sample users, suppliers and products."""
        from medcare.seed import seed_database
        seed_database(admin_email, admin_password)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="0.0.0.0")
