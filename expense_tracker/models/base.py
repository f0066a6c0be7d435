# File: expense_tracker/models/base.py

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Tables are owned by the migration scripts in ``expense_tracker.db.versions``;
    the mappings here must stay in step with them.
    """
    pass
