"""Wall-clock helpers.

Timestamps are stored naive and in UTC, so every expiry comparison goes
through ``utcnow`` here. Tests patch ``blogspace.clock.utcnow`` to move time.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(UTC).replace(tzinfo=None)
