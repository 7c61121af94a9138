"""Datetime helper functions"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalise a datetime to aware UTC

    Args:
        dt: datetime (naive values are treated as UTC, as Supabase returns them)

    Returns:
        UTC datetime (timezone.utc)
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def seconds_between(start: datetime, end: datetime) -> float:
    """Seconds from start to end (negative if end precedes start)"""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds()


def format_countdown(seconds: int) -> str:
    """
    Format a countdown as m:ss

    Returns:
        str: "29:05" style string; minutes are not capped at 59
    """
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"
