from datetime import datetime
from models.db import db

class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(200), nullable=False)
    # derived from title, see utils.pipeline.prepare_event
    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)

    description = db.Column(db.String(2000), nullable=False)
    overview = db.Column(db.String(500), nullable=False)
    image = db.Column(db.String(500), nullable=False)
    venue = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=False)

    date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    time = db.Column(db.String(5), nullable=False)   # HH:MM, 24-hour
    mode = db.Column(db.String(10), nullable=False)  # online, offline, hybrid

    audience = db.Column(db.String(255), nullable=False)
    agenda = db.Column(db.JSON, nullable=False, default=list)
    organizer = db.Column(db.String(255), nullable=False)
    tags = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
