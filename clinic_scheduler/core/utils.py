import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from clinic_scheduler.core.exceptions import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def to_minutes(hhmm: str) -> int:
    # Unparseable hour/minute parts count as zero
    parts = str(hhmm).split(":")
    values = []
    for part in parts[:2]:
        try:
            values.append(int(part))
        except ValueError:
            values.append(0)
    while len(values) < 2:
        values.append(0)
    return values[0] * 60 + values[1]


def from_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlap(start_a: str, duration_a: int, start_b: str, duration_b: int) -> bool:
    """Half-open interval test: touching boundaries do not overlap."""
    a0 = to_minutes(start_a)
    a1 = a0 + duration_a
    b0 = to_minutes(start_b)
    b1 = b0 + duration_b
    return a0 < b1 and b0 < a1


def between(t: str, start: str, end: str) -> bool:
    return to_minutes(start) <= to_minutes(t) < to_minutes(end)


def template_weekday(day: date) -> int:
    # Templates store day_of_week as 0=Sunday..6=Saturday
    # Python date.weekday() is 0=Monday..6=Sunday
    python_day = day.weekday()
    return 0 if python_day == 6 else python_day + 1


def parse_date(value: str, field: str = "date") -> date:
    if not value or not DATE_RE.match(str(value)):
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD")


def parse_time(value: str, field: str = "time") -> str:
    if not value or not TIME_RE.match(str(value)):
        raise ValidationError(f"Invalid {field}. Use HH:MM")
    hours, minutes = (int(x) for x in value.split(":"))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid {field}. Use HH:MM")
    return value


def date_range(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
