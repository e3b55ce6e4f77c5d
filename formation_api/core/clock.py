"""Current time for everything the service stamps.

Call through the module (``clock.utcnow()``) so tests can freeze time with
a single ``monkeypatch.setattr(clock, "utcnow", ...)``.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
