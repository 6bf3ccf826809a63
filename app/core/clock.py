from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time. Services take this as an injectable clock."""
    return datetime.now(timezone.utc)


def month_key(now: datetime) -> str:
    """Calendar month identifier used by the monthly usage counters, e.g. '2026-03'."""
    return f"{now.year}-{now.month:02d}"
