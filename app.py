import logging
from datetime import timedelta

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from models import db
from routes import admin_auth_bp, health_bp
from security.auth import build_authenticator
from security.credentials import SqlAlchemyCredentialStore
from security.errors import AuthError, StoreUnavailable
from security.rate_limit import RateLimiter
from utils.auth_context import auth_error_response
from utils.clock import utcnow

logger = logging.getLogger(__name__)


def create_app(overrides=None, clock=utcnow):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(admin_auth_bp)

    # Database is optional: without it only ADMIN_USER/ADMIN_PASS can log in
    store = None
    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        db.init_app(app)
        Migrate(app, db)
        store = SqlAlchemyCredentialStore(db.session)

    rate_limiter = RateLimiter(
        max_attempts=app.config["LOGIN_RATE_MAX_ATTEMPTS"],
        window=timedelta(seconds=app.config["LOGIN_RATE_WINDOW_SECONDS"]),
        clock=clock,
    )
    app.extensions["admin_auth"] = build_authenticator(app.config, store, rate_limiter, clock=clock)

    @app.errorhandler(AuthError)
    def _auth_error(err):
        return auth_error_response(err)

    @app.errorhandler(StoreUnavailable)
    def _store_error(err):
        logger.error("Credential store failure: %s", err)
        return jsonify(error="Request failed. Please try again."), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Cache-Control"] = "no-store"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
from security.accounts import create_admin, unlock_admin

def register_cli(app):
    @app.cli.command("create-admin")
    @click.argument("username")
    @click.password_option()
    def create_admin_command(username, password):
        """Create the first admin account (bootstrap)."""
        auth = app.extensions["admin_auth"]
        if not auth.uses_database:
            raise click.ClickException("DATABASE_URL is not set")
        try:
            account = create_admin(auth.store, username, password, rounds=app.config["BCRYPT_ROUNDS"])
        except AuthError as err:
            details = err.payload.get("details") or []
            raise click.ClickException("; ".join([err.message, *details]))
        click.echo(f"Admin {account.username} created")

    @app.cli.command("unlock-admin")
    @click.argument("username")
    def unlock_admin_command(username):
        """Clear the failed-login counter and lock of an admin account."""
        auth = app.extensions["admin_auth"]
        if not auth.uses_database:
            raise click.ClickException("DATABASE_URL is not set")
        if not unlock_admin(auth.store, username):
            raise click.ClickException("Admin not found")
        click.echo(f"{username} unlocked")

#-------------------------


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
