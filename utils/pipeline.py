"""
Validation and normalization applied to documents before they are written.

Each entity has a pure ``validate_*`` function returning field-level errors
and a ``prepare_*`` function run by the write path. ``prepare_*`` receives the
set of fields that changed; derived values are only recomputed for those.
"""
import re
from typing import Callable, Iterable, List, Set, Tuple

from utils.errors import MissingReferenceError, ValidationError
from utils.normalize import normalize_date, normalize_email, normalize_time, slugify

FieldErrors = List[Tuple[str, str]]

EVENT_MODES = ("online", "offline", "hybrid")

# Declaration order; validation reports errors in this order
EVENT_FIELDS = (
    "title", "description", "overview", "image", "venue", "location",
    "date", "time", "mode", "audience", "agenda", "organizer", "tags",
)

_EVENT_TEXT_LIMITS = {
    "title": (200, "Event title is required", "Title cannot exceed 200 characters"),
    "description": (2000, "Event description is required", "Description cannot exceed 2000 characters"),
    "overview": (500, "Event overview is required", "Overview cannot exceed 500 characters"),
}

_EVENT_REQUIRED_TEXT = ("image", "venue", "location", "audience", "organizer")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_list(values) -> list:
    if not isinstance(values, (list, tuple)):
        return values
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


def _dedupe(values: Iterable[str]) -> list:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


# ---------- Event ----------

def validate_event(doc: dict) -> FieldErrors:
    errors: FieldErrors = []

    for name in EVENT_FIELDS:
        value = doc.get(name)

        if name in _EVENT_TEXT_LIMITS:
            max_len, required_msg, length_msg = _EVENT_TEXT_LIMITS[name]
            if _blank(value):
                errors.append((name, required_msg))
            elif not isinstance(value, str):
                errors.append((name, f"{name} must be a string"))
            elif len(value) > max_len:
                errors.append((name, length_msg))

        elif name in _EVENT_REQUIRED_TEXT:
            if _blank(value) or not isinstance(value, str):
                errors.append((name, f"Event {name} is required"))

        elif name == "date":
            if _blank(value):
                errors.append((name, "Event date is required"))
            elif not isinstance(value, str) or not _DATE_RE.match(value):
                errors.append((name, "Date must be in ISO format (YYYY-MM-DD)"))

        elif name == "time":
            if _blank(value):
                errors.append((name, "Event time is required"))
            elif not isinstance(value, str) or not _TIME_RE.match(value):
                errors.append((name, "Time must be in 24-hour format (HH:MM)"))

        elif name == "mode":
            if _blank(value):
                errors.append((name, "Event mode is required"))
            elif value not in EVENT_MODES:
                errors.append((name, "Mode must be online, offline, or hybrid"))

        elif name == "agenda":
            if not isinstance(value, list) or len(value) == 0:
                errors.append((name, "Agenda must contain at least one item"))

        elif name == "tags":
            if not isinstance(value, list) or len(value) == 0:
                errors.append((name, "At least one tag is required"))

    if not errors and not doc.get("slug"):
        errors.append(("title", "Title must contain at least one letter or number"))

    return errors


def prepare_event(doc: dict, changed: Set[str]) -> dict:
    """
    Normalizes ``doc`` and derives slug/date/time for the fields in
    ``changed``. Returns a new dict; raises ValidationError on the first
    failed derivation or with every field error found by validate_event.
    """
    out = dict(doc)

    for name, value in doc.items():
        if isinstance(value, str):
            out[name] = value.strip()
    if isinstance(out.get("mode"), str):
        out["mode"] = out["mode"].lower()
    if "agenda" in out:
        out["agenda"] = _clean_list(out["agenda"])
    if "tags" in out:
        tags = _clean_list(out["tags"])
        out["tags"] = _dedupe(tags) if isinstance(tags, list) else tags

    if "title" in changed and isinstance(out.get("title"), str):
        out["slug"] = slugify(out["title"])
    if "date" in changed and not _blank(out.get("date")):
        out["date"] = normalize_date(out["date"])
    if "time" in changed and not _blank(out.get("time")):
        out["time"] = normalize_time(out["time"])

    errors = validate_event(out)
    if errors:
        field, message = errors[0]
        raise ValidationError(f"{field}: {message}", errors=errors)
    return out


# ---------- Booking ----------

def validate_booking(doc: dict) -> FieldErrors:
    errors: FieldErrors = []

    if doc.get("event_id") in (None, ""):
        errors.append(("event_id", "Event ID is required"))

    email = doc.get("email")
    if _blank(email):
        errors.append(("email", "Email is required"))
    elif not isinstance(email, str) or not _EMAIL_RE.match(email):
        errors.append(("email", "Please provide a valid email address"))

    return errors


def prepare_booking(doc: dict, changed: Set[str], event_exists: Callable[[int], bool]) -> dict:
    """
    ``event_exists`` is only consulted when event_id is in ``changed``;
    updates that leave event_id alone skip the reference check.
    """
    out = dict(doc)
    if isinstance(out.get("email"), str):
        out["email"] = normalize_email(out["email"])

    errors = validate_booking(out)
    if errors:
        field, message = errors[0]
        raise ValidationError(f"{field}: {message}", errors=errors)

    if "event_id" in changed and not event_exists(out["event_id"]):
        raise MissingReferenceError("Event does not exist")

    return out
