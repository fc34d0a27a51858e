from datetime import datetime, timedelta, timezone
import re

from marshmallow import ValidationError

# "MM:SS" or "HH:MM:SS"
DURATION_RE = re.compile(r"^(\d{1,3}:)?[0-5]?\d:[0-5]\d$")

DAY = timedelta(days=1)


def normalize_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def validate_non_negative(value) -> None:
    if value is not None and value < 0:
        raise ValidationError("Must be greater than or equal to 0.")


def validate_duration(value: str) -> None:
    if value is None:
        return
    if not DURATION_RE.match(value.strip()):
        raise ValidationError("Time must look like MM:SS or HH:MM:SS.")


def day_window(raw_ms):
    """
    Turn an epoch-milliseconds string into the [start, start + 24h) window
    that begins at that instant.
    """
    try:
        ms = int(raw_ms)
    except (TypeError, ValueError):
        raise ValidationError("date must be an epoch timestamp in milliseconds.")
    if ms < 0:
        raise ValidationError("date must be an epoch timestamp in milliseconds.")
    start = datetime.fromtimestamp(ms // 1000, tz=timezone.utc)
    return start, start + DAY
