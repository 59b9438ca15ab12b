from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow() -> datetime:
    # naive UTC, the storage format for every DateTime column
    return datetime.now(timezone.utc).replace(tzinfo=None)
