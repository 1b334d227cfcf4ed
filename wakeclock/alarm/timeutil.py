import datetime
import re

MINUTES_PER_DAY = 24 * 60

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class InvalidTimeFormat(ValueError):
    """Raised when an alarm time cannot be read as an hour/minute pair."""
    pass


def parse_alarm_time(value) -> datetime.time:
    """
    Converts user input into an alarm time with minute resolution.

    Args:
        value: A datetime.time (seconds are dropped) or an "H:MM" / "HH:MM" string.

    Returns:
        datetime.time: The parsed time, seconds and microseconds set to zero.

    Raises:
        InvalidTimeFormat: If the value is not a valid 24-hour hour/minute pair.
    """
    if isinstance(value, datetime.time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Unsupported alarm time type: {type(value).__name__}")

    match = _HHMM_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(f"Invalid time format '{value}'. Use HH:MM.")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(f"Time '{value}' is out of range. Use 00:00 to 23:59.")
    return datetime.time(hour, minute)


def format_alarm_time(alarm_time: datetime.time) -> str:
    return alarm_time.strftime("%H:%M")


def add_minutes(alarm_time: datetime.time, delta: int) -> datetime.time:
    """Adds minutes to a time of day, carrying into hours and wrapping at midnight."""
    total = (alarm_time.hour * 60 + alarm_time.minute + delta) % MINUTES_PER_DAY
    return datetime.time(total // 60, total % 60)


def minute_key(instant) -> tuple:
    """(hour, minute) of a time or datetime, for minute-resolution comparisons."""
    return (instant.hour, instant.minute)
