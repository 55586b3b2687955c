"""Monthly scheduler that triggers report generation for the previous month."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable


def next_month_start(reference: datetime) -> datetime:
    """Return the timestamp for the start of the month after ``reference``."""

    tz = reference.tzinfo or timezone.utc
    year = reference.year + (1 if reference.month == 12 else 0)
    month = 1 if reference.month == 12 else reference.month + 1
    return datetime(year, month, 1, tzinfo=tz)


def previous_period(reference: datetime) -> tuple[int, int]:
    """Return ``(year, month)`` of the month before ``reference``."""

    if reference.month == 1:
        return reference.year - 1, 12
    return reference.year, reference.month - 1


async def run_monthly_scheduler(
    callback: Callable[[int, int], Awaitable[None]],
    *,
    now_fn: Callable[[], datetime] | None = None,
    sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
    iterations: int | None = None,
) -> None:
    """Sleep until each month starts, then call ``callback`` with the month just closed."""

    now_provider = now_fn or (lambda: datetime.now(timezone.utc))
    executed = 0

    while iterations is None or executed < iterations:
        now = now_provider()
        target = next_month_start(now)
        delay = max((target - now).total_seconds(), 0.0)
        await sleep_fn(delay)
        year, month = previous_period(target)
        await callback(year, month)
        executed += 1
