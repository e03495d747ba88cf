import logging

import stripe
from flask import Flask, jsonify

from .config import Config
from .extensions import db, jwt, cors, migrate
from .utils.api import api_error, utc_iso


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    config_object = config_object or Config
    app.config.from_object(config_object)
    config_object.init_app(app)

    if not app.debug and not app.testing:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
        max_age=86400,
    )
    migrate.init_app(app, db)
    stripe.api_key = app.config.get("STRIPE_SECRET_KEY")

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify(api_error(reason)), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify(api_error(reason)), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify(api_error("Token has expired")), 401

    # Register blueprints
    from .receipt import bp as receipt_bp; app.register_blueprint(receipt_bp)
    from .notification import bp as notification_bp; app.register_blueprint(notification_bp)
    from .payment import bp as payment_bp; app.register_blueprint(payment_bp)

    # Receipt insert events -> buyer copy trigger
    from .receipt import events
    events.init_app(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def index():
        return jsonify(status="Server is running!", timestamp=utc_iso(), service="Lokal Storefront API")

    @app.get("/health")
    def health():
        return jsonify(status="OK", timestamp=utc_iso())

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()

    return app
