from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.event import Event
from models.booking import Booking
from utils.errors import ConflictError, ValidationError
from utils.normalize import normalize_email
from utils.pipeline import EVENT_FIELDS, prepare_booking, prepare_event

_EVENT_COLUMNS = EVENT_FIELDS + ("slug",)


def _commit(conflict_message: str):
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError(conflict_message) from exc


def _coerce_id(value, field: str):
    if isinstance(value, bool):
        raise ValidationError(f"{field}: must be an integer id", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if value in (None, ""):
        return None
    raise ValidationError(f"{field}: must be an integer id", field=field)


# ---------- Events ----------

def _event_doc(event: Event) -> dict:
    return {name: getattr(event, name) for name in _EVENT_COLUMNS}


def create_event(data: dict) -> Event:
    doc = {name: data.get(name) for name in EVENT_FIELDS}
    doc = prepare_event(doc, changed=set(EVENT_FIELDS))

    event = Event(**{name: doc[name] for name in _EVENT_COLUMNS})
    db.session.add(event)
    _commit("An event with this title already exists")
    return event


def check_new_event(data: dict, image_placeholder: str = "pending-upload") -> dict:
    """
    Runs the create pipeline without writing, so callers can reject bad
    input before side effects (the image upload). Raises like create_event.
    """
    doc = {name: data.get(name) for name in EVENT_FIELDS}
    if _blank_image(doc.get("image")):
        doc["image"] = image_placeholder
    doc = prepare_event(doc, changed=set(EVENT_FIELDS))
    if get_event_by_slug(doc["slug"]):
        raise ConflictError("An event with this title already exists")
    return doc


def _blank_image(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def update_event(event: Event, changes: dict) -> Event:
    current = _event_doc(event)
    changed = {
        name for name, value in changes.items()
        if name in EVENT_FIELDS and current.get(name) != value
    }
    if not changed:
        return event

    doc = dict(current)
    doc.update({name: changes[name] for name in changed})
    # raises before the instance is touched, so a failed update persists nothing
    doc = prepare_event(doc, changed=changed)

    for name in _EVENT_COLUMNS:
        setattr(event, name, doc[name])
    _commit("An event with this title already exists")
    return event


def list_events():
    return Event.query.order_by(Event.created_at.desc(), Event.id.desc()).all()


def get_event_by_slug(slug: str):
    return Event.query.filter_by(slug=slug).first()


def event_exists(event_id) -> bool:
    return db.session.query(Event.id).filter_by(id=event_id).first() is not None


def similar_events(slug: str):
    """Events sharing at least one tag with ``slug``; empty when unknown."""
    try:
        event = get_event_by_slug(slug)
        if not event:
            return []
        tags = set(event.tags or [])
        return [
            e for e in list_events()
            if e.id != event.id and tags.intersection(e.tags or [])
        ]
    except SQLAlchemyError:
        db.session.rollback()
        return []


# ---------- Bookings ----------

def booking_exists(event_id, email: str) -> bool:
    try:
        event_id = _coerce_id(event_id, "event_id")
    except ValidationError:
        return False
    email = normalize_email(email)
    if event_id is None or not email:
        return False
    return Booking.query.filter_by(event_id=event_id, email=email).first() is not None


def create_booking(event_id, email: str) -> Booking:
    doc = {"event_id": _coerce_id(event_id, "event_id"), "email": email}
    doc = prepare_booking(doc, changed={"event_id", "email"}, event_exists=event_exists)

    # Application-level pre-check; the unique constraint below is the hard guarantee
    if booking_exists(doc["event_id"], doc["email"]):
        raise ConflictError("You have already booked this event")

    booking = Booking(event_id=doc["event_id"], email=doc["email"])
    db.session.add(booking)
    _commit("You have already booked this event")
    return booking


def update_booking(booking: Booking, changes: dict) -> Booking:
    current = {"event_id": booking.event_id, "email": booking.email}
    proposed = dict(current)
    if "event_id" in changes:
        proposed["event_id"] = _coerce_id(changes["event_id"], "event_id")
    if "email" in changes:
        proposed["email"] = changes["email"]

    changed = {name for name in proposed if proposed[name] != current[name]}
    if not changed:
        return booking

    doc = prepare_booking(proposed, changed=changed, event_exists=event_exists)
    booking.event_id = doc["event_id"]
    booking.email = doc["email"]
    _commit("You have already booked this event")
    return booking


def event_for_booking(booking: Booking):
    return db.session.get(Event, booking.event_id)
