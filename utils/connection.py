"""
Process-wide database connection cache.

One ``ConnectionCache`` is built by ``create_app`` and stored in
``app.extensions["connection_cache"]``. Request handlers call ``acquire()``
before touching the store. The first caller opens the connection; callers
arriving while that attempt is in flight wait on the same attempt instead of
opening their own. A failed attempt is forgotten so the next call retries.
"""
import logging
import threading
from concurrent.futures import Future

from flask import current_app
from sqlalchemy import text

from models.db import db
from utils.errors import StoreConnectionError

logger = logging.getLogger(__name__)


class ConnectionState:
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


def engine_options(uri: str, pool_size: int, server_selection_timeout: int, socket_timeout: int) -> dict:
    """SQLALCHEMY_ENGINE_OPTIONS for the fixed pool/timeout defaults."""
    if uri.startswith("sqlite"):
        # SQLite uses a single-connection pool; sizing options do not apply
        return {"pool_pre_ping": True}

    options = {
        "pool_size": pool_size,
        "pool_timeout": server_selection_timeout,
        "pool_pre_ping": True,
    }
    if uri.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": server_selection_timeout,
            "options": f"-c statement_timeout={socket_timeout * 1000}",
        }
    elif uri.startswith("mysql"):
        options["connect_args"] = {
            "connect_timeout": server_selection_timeout,
            "read_timeout": socket_timeout,
            "write_timeout": socket_timeout,
        }
    return options


class ConnectionCache:
    def __init__(self, uri=None, connector=None, disposer=None):
        self.uri = uri
        self._connector = connector
        self._disposer = disposer
        self._lock = threading.Lock()
        self._handle = None
        self._pending = None
        self._state = ConnectionState.DISCONNECTED

    def init_app(self, app):
        if self.uri is None:
            self.uri = app.config.get("SQLALCHEMY_DATABASE_URI")
        if self._connector is None:
            self._connector = lambda: _ping_engine(app)
        app.extensions["connection_cache"] = self

    def acquire(self):
        """
        Returns the established handle, opening it on first use.
        Raises StoreConnectionError when unconfigured or the connect fails.
        """
        if not self.uri:
            raise StoreConnectionError(detail="Database connection string is not configured (DATABASE_URL)")

        with self._lock:
            if self._handle is not None:
                return self._handle
            pending = self._pending
            owner = pending is None
            if owner:
                pending = Future()
                self._pending = pending
                self._state = ConnectionState.CONNECTING

        if not owner:
            return pending.result()

        try:
            handle = self._connector()
        except Exception as exc:
            err = StoreConnectionError(detail=f"Failed to connect to database: {exc}")
            with self._lock:
                if self._pending is pending:
                    self._pending = None
                    self._state = ConnectionState.DISCONNECTED
            pending.set_exception(err)
            logger.error("Database connection error: %s", exc)
            raise err from exc

        with self._lock:
            if self._pending is pending:
                self._handle = handle
                self._pending = None
                self._state = ConnectionState.CONNECTED
        pending.set_result(handle)
        logger.info("Connected to database")
        return handle

    def release(self):
        """Closes the cached connection; the next acquire() reconnects."""
        with self._lock:
            handle = self._handle
            if handle is None and self._pending is None:
                return
            self._state = ConnectionState.DISCONNECTING

        try:
            if handle is not None:
                if self._disposer is not None:
                    self._disposer(handle)
                elif hasattr(handle, "dispose"):
                    handle.dispose()
        finally:
            with self._lock:
                self._handle = None
                self._pending = None
                self._state = ConnectionState.DISCONNECTED
        logger.info("Disconnected from database")

    def status(self) -> str:
        return self._state

    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED


def _ping_engine(app):
    with app.app_context():
        engine = db.engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return engine


def get_connection_cache() -> ConnectionCache:
    return current_app.extensions["connection_cache"]
