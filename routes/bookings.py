from flask import Blueprint, request, jsonify

from utils.audit import log_event
from utils.connection import get_connection_cache
from utils.documents import booking_exists, create_booking
from utils.errors import ConflictError

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


def serialize_booking(b) -> dict:
    return {
        "id": b.id,
        "event_id": b.event_id,
        "email": b.email,
        "created_at": b.created_at.isoformat(),
        "updated_at": b.updated_at.isoformat(),
    }


@bookings_bp.post("")
def post_booking():
    data = request.get_json(silent=True) or {}
    event_id = data.get("event_id", data.get("eventId"))
    email = data.get("email")

    get_connection_cache().acquire()

    try:
        booking = create_booking(event_id, email)
    except ConflictError:
        log_event("BOOKING_FAIL_DUPLICATE", entity="event", entity_id=event_id)
        raise

    log_event("BOOKING_CREATE", entity="booking", entity_id=booking.id, metadata={"event_id": booking.event_id})
    return jsonify(message="Booking created successfully", booking=serialize_booking(booking)), 201


@bookings_bp.get("/exists")
def get_booking_exists():
    event_id = request.args.get("event_id")
    email = request.args.get("email")
    if not event_id or not email:
        return jsonify(error="event_id and email are required"), 400

    get_connection_cache().acquire()
    return jsonify(exists=booking_exists(event_id, email)), 200
