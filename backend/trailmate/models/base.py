from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime
from sqlmodel import Field


def utc_now() -> datetime:
    """Current time, timezone-aware in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to datetimes read back without an offset (SQLite drops it)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def TimestampField(**kwargs: Any) -> Any:
    """A ``Field`` stored as a timezone-aware timestamp column."""
    return Field(sa_type=DateTime(timezone=True), **kwargs)
