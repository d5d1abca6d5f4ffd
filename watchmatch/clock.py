"""Time helpers: an injectable clock and lenient ISO-8601 parsing."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Convert a datetime or ISO-8601 string into an aware UTC datetime.

    Naive values are assumed to be UTC. A trailing ``Z`` is accepted.
    Unparseable or empty values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialise a datetime (or None) to an ISO-8601 string."""
    return value.isoformat() if value is not None else None
