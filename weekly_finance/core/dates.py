import re
from datetime import date, datetime, timezone

from .errors import InvalidDateFormat, ValidationError


INPUT_FORMAT = "%Y-%m-%d"
DISPLAY_FORMAT = "%d-%m-%Y"

# strptime accepts unpadded day/month fields, so the shape is checked first
_INPUT_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DISPLAY_RE = re.compile(r"[0-9]{2}-[0-9]{2}-[0-9]{4}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_week(value: date) -> int:
    """ISO-8601 week number (1-53) of the week containing ``value``.

    Dates at the edges of a year can belong to week 52/53 of the previous
    ISO year or week 1 of the next one, e.g. 2023-01-01 is in week 52.
    """
    return value.isocalendar()[1]


def format_for_display(value: date) -> str:
    # strftime("%Y") does not pad years below 1000 on glibc
    return f"{value.day:02d}-{value.month:02d}-{value.year:04d}"


def parse_input(raw: str) -> date:
    """Parse ``YYYY-MM-DD``, falling back to the ``DD-MM-YYYY`` display form."""
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidDateFormat("Invalid date format, use YYYY-MM-DD")

    text = raw.strip()
    for pattern, fmt in ((_INPUT_RE, INPUT_FORMAT), (_DISPLAY_RE, DISPLAY_FORMAT)):
        if not pattern.fullmatch(text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidDateFormat("Invalid date format, use YYYY-MM-DD")


def validate_week(week: int) -> int:
    if week < 1 or week > 53:
        raise ValidationError("Invalid week number, expected 1-53")
    return week
