from datetime import datetime, timezone

utc_now = lambda: datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """MongoDB returns naive datetimes; treat them as UTC."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
