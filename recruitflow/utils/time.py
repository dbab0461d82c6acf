from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def expires_at(ttl_seconds: int, now: datetime | None = None) -> datetime:
    """Return the instant ttl_seconds after now."""
    return (now or utc_now()) + timedelta(seconds=ttl_seconds)


def is_expired(deadline: datetime, now: datetime | None = None) -> bool:
    return ensure_aware(deadline) <= (now or utc_now())
