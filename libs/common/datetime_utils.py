"""Datetime helpers for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp_ms() -> int:
    """Milliseconds since the epoch, used to build unique storage paths."""
    return int(utc_now().timestamp() * 1000)
