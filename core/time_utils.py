from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime | None, fmt: str = "%d %b %Y, %H:%M") -> str:
    """Render a stored timestamp for display; '—' when missing."""
    if dt is None:
        return "—"
    return dt.strftime(fmt)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite hands them back without tzinfo)."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
