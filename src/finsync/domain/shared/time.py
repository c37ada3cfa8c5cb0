"""Time utilities for the domain layer."""

import time
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def today_local() -> date:
    """Return today's date on the machine running the sync.

    Vendor sites report transactions in local calendar days, so checkpoints
    are clamped against the local date rather than the UTC one.
    """
    return date.today()


def monotonic_seconds() -> float:
    """Monotonic clock for measuring waits and durations."""
    return time.monotonic()
