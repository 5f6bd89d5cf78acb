"""Types shared across schemas."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# SQLite hands timestamps back naive; responses always carry the UTC offset
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
