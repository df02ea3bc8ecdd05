"""
Core Utilities.

Shared utility functions used across the application.
All modules should import utilities from this module.
"""

import time
import uuid
from datetime import datetime


def now_ms() -> int:
    """
    Return the current time as integer milliseconds since the epoch.

    Note timestamps are stored in this unit so persisted files stay
    compatible with notes exported from the browser version.
    """
    return time.time_ns() // 1_000_000


def new_note_id() -> str:
    """Generate a fresh opaque note identifier."""
    return str(uuid.uuid4())


def format_timestamp(timestamp_ms: int) -> str:
    """
    Format a millisecond timestamp in the local timezone.

    Args:
        timestamp_ms: Milliseconds since the epoch

    Returns:
        Human-readable local date and time, e.g. "2026-10-17 14:03"
    """
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")
