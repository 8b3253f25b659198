"""Human-readable local timestamps for submission and sync records."""

from __future__ import annotations

import pendulum

# Shown to users next to "last synced" and submission provenance.
TIMESTAMP_FORMAT = "YYYY-MM-DD HH:mm:ss"
TIME_FORMAT = "HH:mm:ss"


def now_local() -> pendulum.DateTime:
    """Return the current time in the local timezone."""
    return pendulum.now()


def format_timestamp(dt: pendulum.DateTime | None = None) -> str:
    """Format a date and time for submission metadata."""
    return (dt or now_local()).format(TIMESTAMP_FORMAT)


def format_time(dt: pendulum.DateTime | None = None) -> str:
    """Format a wall-clock time for the last-synced indicator."""
    return (dt or now_local()).format(TIME_FORMAT)
