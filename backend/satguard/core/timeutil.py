from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; all timestamps are stored naive in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
