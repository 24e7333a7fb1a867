import io
import json

import pytest

from app import create_app
from models import db


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "CLOUDINARY_CLOUD_NAME": None,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def event_data():
    return {
        "title": "My  Cool Event!!",
        "description": "A gathering of people who like cool things.",
        "overview": "Cool things, discussed.",
        "image": "https://res.cloudinary.com/demo/image/upload/cool.png",
        "venue": "Main Hall",
        "location": "Berlin, Germany",
        "date": "2025-06-12",
        "time": "2:30 PM",
        "mode": "Online",
        "audience": "Developers",
        "agenda": ["Welcome", "Talks"],
        "organizer": "Cool Org",
        "tags": ["cool", "meetup"],
    }


@pytest.fixture
def event_form(event_data):
    """Multipart body for POST /api/events."""

    form = {k: v for k, v in event_data.items() if k not in ("image", "tags", "agenda")}
    form["tags"] = json.dumps(event_data["tags"])
    form["agenda"] = json.dumps(event_data["agenda"])
    form["image"] = (io.BytesIO(b"\x89PNG fake"), "cool.png", "image/png")
    return form
