import json
import re

from flask import Blueprint, request, jsonify, current_app

from utils.audit import log_event
from utils.connection import get_connection_cache
from utils.documents import check_new_event, create_event, get_event_by_slug, list_events, similar_events
from utils.errors import StoreConnectionError
from utils.media import upload_image
from utils.pipeline import EVENT_FIELDS

events_bp = Blueprint("events", __name__, url_prefix="/api")

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_valid_slug(slug: str) -> bool:
    if not isinstance(slug, str) or not slug:
        return False
    if len(slug) > current_app.config.get("SLUG_MAX_LEN", 200):
        return False
    return _SLUG_RE.match(slug) is not None


def serialize_event(e) -> dict:
    return {
        "id": e.id,
        "title": e.title,
        "slug": e.slug,
        "description": e.description,
        "overview": e.overview,
        "image": e.image,
        "venue": e.venue,
        "location": e.location,
        "date": e.date,
        "time": e.time,
        "mode": e.mode,
        "audience": e.audience,
        "agenda": e.agenda,
        "organizer": e.organizer,
        "tags": e.tags,
        "created_at": e.created_at.isoformat(),
        "updated_at": e.updated_at.isoformat(),
    }


def _parse_json_list(raw, name: str):
    if raw is None or raw == "":
        return None
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError(f"{name} must be a JSON array")
    return value


@events_bp.get("/events")
def get_events():
    get_connection_cache().acquire()
    events = list_events()
    return jsonify(events=[serialize_event(e) for e in events]), 200


@events_bp.post("/events")
def post_event():
    get_connection_cache().acquire()

    form = request.form
    file = request.files.get("image")
    if not file or not file.filename:
        return jsonify(error="Image file is required"), 400

    try:
        tags = _parse_json_list(form.get("tags"), "tags")
        agenda = _parse_json_list(form.get("agenda"), "agenda")
    except ValueError as exc:
        return jsonify(error="Invalid form data", detail=str(exc)), 400

    data = {name: form.get(name) for name in EVENT_FIELDS}
    data["tags"] = tags
    data["agenda"] = agenda

    # reject bad input before anything lands on the media host
    check_new_event(data)

    url, err = upload_image(file)
    if err:
        current_app.logger.error("Image upload failed: %s", err)
        return jsonify(error="Image upload failed"), 500
    data["image"] = url

    event = create_event(data)

    log_event("EVENT_CREATE", entity="event", entity_id=event.id, metadata={"slug": event.slug})
    return jsonify(message="Event created successfully", event=serialize_event(event)), 201


# path converter so encoded slashes reach the slug check instead of a 404
@events_bp.get("/events/<path:slug>")
def get_event(slug: str):
    if not is_valid_slug(slug):
        return jsonify(
            error="Invalid slug format",
            detail="Slug must contain only lowercase letters, numbers, and hyphens",
        ), 400

    try:
        get_connection_cache().acquire()
    except StoreConnectionError:
        current_app.logger.exception("Database unavailable while fetching event %s", slug)
        return jsonify(error="Database connection failed", detail="Please try again later"), 503

    event = get_event_by_slug(slug)
    if not event:
        return jsonify(error="Event not found", detail=f"No event exists with slug: {slug}"), 404

    return jsonify(event=serialize_event(event)), 200


@events_bp.get("/similar-events/<path:slug>")
def get_similar_events(slug: str):
    if not is_valid_slug(slug):
        return jsonify(events=[]), 200

    get_connection_cache().acquire()
    return jsonify(events=[serialize_event(e) for e in similar_events(slug)]), 200
