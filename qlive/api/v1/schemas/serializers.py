"""Shared serialization utilities for API schemas."""

from datetime import datetime

from qlive.shared.utils.time import as_utc


def serialize_utc_datetime(dt: datetime) -> str:
    """Serialize datetime as ISO 8601 string with UTC timezone.

    Output format: 2025-12-03T10:30:00+00:00
    """
    return as_utc(dt).isoformat()
