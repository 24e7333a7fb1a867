from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from config import Config
from routes import health_bp, events_bp, bookings_bp

from models import db
from utils.connection import ConnectionCache, engine_options
from utils.errors import DomainError, StoreConnectionError


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if not uri:
        raise RuntimeError("Please define the DATABASE_URL environment variable")

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", engine_options(
        uri,
        app.config["DB_POOL_SIZE"],
        app.config["DB_SERVER_SELECTION_TIMEOUT_SECONDS"],
        app.config["DB_SOCKET_TIMEOUT_SECONDS"],
    ))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(bookings_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Shared connection handle, reused by every request in this process
    ConnectionCache().init_app(app)

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def _domain_error(err):
        if isinstance(err, StoreConnectionError):
            app.logger.error("Database unavailable: %s", err.detail)
        db.session.rollback()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(OperationalError)
    def _store_unreachable(err):
        app.logger.error("Database operation failed: %s", err)
        db.session.rollback()
        return jsonify(error="Database connection failed", status=503), 503

    @app.errorhandler(HTTPException)
    def _http_error(err):
        return jsonify(error=err.description, status=err.code), err.code

    @app.errorhandler(Exception)
    def _unhandled(err):
        app.logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify(error="Internal server error", status=500), 500

#-------------------------
import click
from utils.audit import log_event
from utils.connection import get_connection_cache
from utils.documents import create_event, get_event_by_slug
from utils.normalize import slugify

SAMPLE_EVENTS = [
    {
        "title": "React Summit 2025",
        "description": "The biggest React conference in Europe featuring the latest updates from the React team and community leaders.",
        "overview": "Two days of talks and workshops on React, tooling and the frontend ecosystem.",
        "image": "/images/event1.png",
        "venue": "Kromhouthal",
        "location": "Amsterdam, Netherlands",
        "date": "2025-06-12",
        "time": "9:00 AM",
        "mode": "Hybrid",
        "audience": "Frontend developers",
        "agenda": ["Registration", "Keynote", "Workshops", "Networking"],
        "organizer": "GitNation",
        "tags": ["React", "Frontend", "JavaScript"],
    },
    {
        "title": "AI & Machine Learning Bootcamp",
        "description": "Intensive 3-day bootcamp covering the fundamentals of AI, machine learning, and deep learning with hands-on projects.",
        "overview": "Hands-on introduction to modern machine learning.",
        "image": "/images/event2.png",
        "venue": "Moscone Center",
        "location": "San Francisco, CA",
        "date": "2025-03-20",
        "time": "10:00 AM",
        "mode": "offline",
        "audience": "Engineers and data scientists",
        "agenda": ["Foundations", "Deep learning", "Project showcase"],
        "organizer": "AI Institute",
        "tags": ["AI", "Machine Learning", "Python", "Data Science"],
    },
    {
        "title": "Full Stack Developer Meetup",
        "description": "Monthly meetup for full stack developers. This month: Building scalable apps with Next.js and PostgreSQL.",
        "overview": "Monthly community meetup.",
        "image": "/images/event4.png",
        "venue": "Shoreditch Works",
        "location": "London, UK",
        "date": "2025-02-28",
        "time": "6:30 PM",
        "mode": "online",
        "audience": "Full stack developers",
        "agenda": ["Lightning talks", "Main talk", "Q&A"],
        "organizer": "London Tech Community",
        "tags": ["Full Stack", "JavaScript", "PostgreSQL"],
    },
]


def register_cli(app):
    @app.cli.command("seed-events")
    def seed_events():
        """Insert the sample events (skips ones that already exist)."""
        get_connection_cache().acquire()
        created = 0
        for data in SAMPLE_EVENTS:
            if get_event_by_slug(slugify(data["title"])):
                continue
            event = create_event(data)
            log_event("EVENT_CREATE", entity="event", entity_id=event.id, metadata={"slug": event.slug, "seed": True})
            created += 1
        print(f"Seeded {created} event(s)")

    @app.cli.command("db-status")
    def db_status():
        """Connect to the database and print the connection state."""
        cache = get_connection_cache()
        try:
            cache.acquire()
        except StoreConnectionError as exc:
            print(exc.detail)
            raise click.exceptions.Exit(1)
        print(cache.status())

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
