"""Tests for release cycle date arithmetic."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from reltrain.release.cycle import cycle_start, lookback_days, lookback_window, release_branch_name


@pytest.mark.parametrize(
    ("day", "monday"),
    [
        (date(2026, 10, 19), date(2026, 10, 19)),  # Monday
        (date(2026, 10, 20), date(2026, 10, 19)),  # Tuesday
        (date(2026, 10, 25), date(2026, 10, 19)),  # Sunday
        (date(2026, 11, 1), date(2026, 10, 26)),  # across a month
        (date(2027, 1, 1), date(2026, 12, 28)),  # across a year
    ],
)
def test_cycle_start(day: date, monday: date) -> None:
    assert cycle_start(day) == monday


def test_branch_name_on_tuesday_uses_monday() -> None:
    now = datetime(2026, 10, 20, 15, 30, tzinfo=UTC)
    assert release_branch_name("rel", now) == "rel20261019"


def test_branch_name_on_monday_is_same_day() -> None:
    assert release_branch_name("release/rel", date(2026, 10, 19)) == "release/rel20261019"


@pytest.mark.parametrize(
    ("now", "days"),
    [
        (datetime(2026, 10, 19, 9, tzinfo=UTC), 1),  # Monday
        (datetime(2026, 10, 21, 9, tzinfo=UTC), 3),  # Wednesday
        (datetime(2026, 10, 25, 9, tzinfo=UTC), 7),  # Sunday
    ],
)
def test_lookback_days(now: datetime, days: int) -> None:
    assert lookback_days(now) == days


def test_lookback_window_reaches_past_cycle_start() -> None:
    now = datetime(2026, 10, 21, 9, tzinfo=UTC)
    start, end = lookback_window(now)
    assert end == now
    assert start == now - timedelta(days=3)
    assert start.date() < cycle_start(now.date())
