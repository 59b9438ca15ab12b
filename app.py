import logging
import os

from flask import Flask, jsonify
from config import Config
from routes import health_bp, calls_bp, refunds_bp, admin_calls_bp, admin_refunds_bp

from models import db
from flask_migrate import Migrate
from services.errors import CallBookingError
from utils.call_config import load_call_config
from utils.calls_context import CallsContext, current_calls, init_calls
from utils.emailer import EmailSettings
from utils.notifier import BookingNotifier
from utils.razorpay import PaymentProviderError, RazorpayClient

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(test_config=None, calls_context=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(calls_bp)
    app.register_blueprint(refunds_bp)
    app.register_blueprint(admin_calls_bp)
    app.register_blueprint(admin_refunds_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Scheduling config is resolved once here and injected from then on
    if calls_context is None:
        calls_context = CallsContext(
            config=load_call_config(os.environ),
            gateway=RazorpayClient.from_app_config(app.config),
            notifier=BookingNotifier(EmailSettings.from_app_config(app.config)),
            checkout_retention_days=app.config.get("CHECKOUT_RETENTION_DAYS", 30),
        )
    init_calls(app, calls_context)
    logger.info("Call scheduling config: %s", calls_context.config)

    @app.errorhandler(CallBookingError)
    def _call_booking_error(err):
        return jsonify(error=err.message), err.status_code

    @app.errorhandler(PaymentProviderError)
    def _payment_provider_error(err):
        db.session.rollback()
        return jsonify(error="Payment provider error"), 502

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from services.maintenance import sweep_calls

def register_cli(app):
    @app.cli.command("sweep-calls")
    def sweep_calls_command():
        """Delete lapsed holds and checkouts past retention."""
        stats = sweep_calls(current_calls().clock())
        click.echo(
            f"holds removed: {stats['holds']}, checkouts expired: {stats['expired_checkouts']}, "
            f"checkouts purged: {stats['purged_checkouts']}"
        )

    @app.cli.command("call-config")
    def show_call_config():
        """Print the resolved call scheduling config."""
        for key, value in vars(current_calls().config).items():
            click.echo(f"{key}={value}")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
