"""Shared utilities for schema validation."""

from datetime import datetime
from typing import Any

from qlive.shared.utils.time import as_utc


def parse_mongo_datetime(v: Any) -> Any:
    """Normalize datetimes read back from MongoDB.

    Handles the Extended JSON form ``{'$date': '2024-11-01T08:00:00Z'}`` (left
    by mongoimport and similar tools) and the naive datetimes the driver
    returns, which are always UTC.
    """
    if isinstance(v, datetime):
        return as_utc(v)
    if isinstance(v, dict) and "$date" in v:
        return datetime.fromisoformat(v["$date"].replace("Z", "+00:00"))
    # Return as-is and let Pydantic handle validation
    return v
