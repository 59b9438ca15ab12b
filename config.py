import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this module as callslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "callslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Bearer token for the admin blueprints (admin login lives outside this service)
    ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

    # Razorpay
    RAZORPAY_KEY_ID = (os.getenv("RAZORPAY_KEY_ID") or "").strip()
    RAZORPAY_KEY_SECRET = (os.getenv("RAZORPAY_KEY_SECRET") or "").strip()
    RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")
    # unset means the provider call lives as long as the request does
    RAZORPAY_TIMEOUT_SECONDS = float(os.getenv("RAZORPAY_TIMEOUT_SECONDS") or 0) or None

    # Paid checkouts are kept this long for reconciliation, then swept
    CHECKOUT_RETENTION_DAYS = int(os.getenv("CHECKOUT_RETENTION_DAYS", "30"))

    # Email: "log" writes to the logger, "smtp" delivers
    EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "log").strip().lower()
    EMAIL_TO = os.getenv("EMAIL_TO") or os.getenv("ADMIN_EMAIL") or ""
    EMAIL_SUBJECT_PREFIX = os.getenv("EMAIL_SUBJECT_PREFIX", "Portfolio")
    EMAIL_SEND_CUSTOMERS = os.getenv("EMAIL_SEND_CUSTOMERS", "true").lower() == "true"

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Basic app settings
    DEBUG = False
