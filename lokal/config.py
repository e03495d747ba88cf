import os
from datetime import timedelta


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")

    # deep links in push notifications are resolved against this
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "https://lokalshops.co.uk/")
    CORS_ORIGINS = [o for o in (
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "https://lokalshops.co.uk",
        "https://www.lokalshops.co.uk",
        os.getenv("FRONTEND_URL"),
    ) if o]

    # deliver receipt insert events at the end of every request
    RECEIPT_TRIGGER_INLINE = _env_bool("RECEIPT_TRIGGER_INLINE", True)

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_test_dummy"
    RECEIPT_TRIGGER_INLINE = True

    @staticmethod
    def init_app(app):
        pass
