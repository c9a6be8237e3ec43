"""Release cycle arithmetic.

A cycle starts on Monday. The release branch is named after that Monday, and
the version lookback window reaches one day past it.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta


def cycle_start(day: date) -> date:
    """Most recent Monday on or before day."""
    return day - timedelta(days=day.weekday())


def release_branch_name(prefix: str, now: datetime | date) -> str:
    day = now.date() if isinstance(now, datetime) else now
    return f"{prefix}{cycle_start(day):%Y%m%d}"


def lookback_days(now: datetime) -> int:
    """Days back to, and one past, the start of the cycle."""
    return 1 + now.weekday()


def lookback_window(now: datetime) -> tuple[datetime, datetime]:
    return (now - timedelta(days=lookback_days(now)), now)
