from datetime import datetime, timezone


def isoformat_utc(moment: datetime) -> str:
    """Format as ISO 8601 in UTC with millisecond precision, e.g. 2025-11-16T11:35:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return isoformat_utc(datetime.now(timezone.utc))
