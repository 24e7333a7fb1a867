import re
from datetime import datetime, timezone

from utils.errors import ValidationError

_SLUG_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_SEPARATORS = re.compile(r"[\s_-]+", re.ASCII)

_TIME_12H = re.compile(r"^(\d{1,2}):?(\d{2})?\s*(AM|PM)$", re.IGNORECASE)
_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})$")

# Accepted in addition to anything datetime.fromisoformat understands
_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def slugify(title: str) -> str:
    """
    URL-safe slug: lowercase, drop anything that is not a word character,
    space or hyphen, collapse separator runs into one hyphen, trim hyphens.
    """
    slug = (title or "").lower().strip()
    slug = _SLUG_STRIP.sub("", slug)
    slug = _SLUG_SEPARATORS.sub("-", slug)
    return slug.strip("-")


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValidationError("Invalid date format", field="date")


def normalize_date(value: str) -> str:
    """Returns the calendar date as YYYY-MM-DD (UTC for zone-aware input)."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid date format", field="date")

    parsed = _parse_date(value.strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_time(value: str) -> str:
    """
    Accepts "H:MM"/"HH:MM" (24-hour) or "H[:MM] AM/PM" and returns "HH:MM".
    """
    if not isinstance(value, str):
        raise ValidationError("Invalid time format", field="time")
    text = value.strip()

    match = _TIME_12H.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2)) if match.group(2) else 0
        period = match.group(3).upper()
        if not 1 <= hours <= 12 or minutes > 59:
            raise ValidationError("Invalid time format", field="time")

        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return f"{hours:02d}:{minutes:02d}"

    match = _TIME_24H.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValidationError("Invalid time format", field="time")
        return f"{hours:02d}:{minutes:02d}"

    raise ValidationError("Invalid time format", field="time")
