import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Note: Models are imported in init_db() function to avoid circular imports
# All models must import Base from this module


def generate_id() -> str:
    """Primary keys are uuid4 strings so ids can be joined into chat keys."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC now; every timestamp column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to naive UTC.
    
    Postgres loads timestamptz columns as aware values while SQLite returns
    naive ones, so compare loaded values only after passing them through here.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
