import threading
import time

import pytest

from utils.connection import ConnectionCache, ConnectionState, engine_options
from utils.errors import StoreConnectionError


class FakeHandle:
    def __init__(self):
        self.disposed = False

    def dispose(self):
        self.disposed = True


class CountingConnector:
    def __init__(self, delay=0.0, fail_times=0):
        self.calls = 0
        self.delay = delay
        self.fail_times = fail_times
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
            attempt = self.calls
        time.sleep(self.delay)
        if attempt <= self.fail_times:
            raise OSError("server selection timed out")
        return FakeHandle()


def test_concurrent_first_acquire_connects_once():
    connector = CountingConnector(delay=0.2)
    cache = ConnectionCache(uri="sqlite://", connector=connector)
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(cache.acquire())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert connector.calls == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert cache.is_connected()


def test_cached_handle_is_reused():
    connector = CountingConnector()
    cache = ConnectionCache(uri="sqlite://", connector=connector)
    first = cache.acquire()
    assert cache.acquire() is first
    assert connector.calls == 1


def test_failure_clears_in_flight_attempt():
    connector = CountingConnector(fail_times=1)
    cache = ConnectionCache(uri="sqlite://", connector=connector)

    with pytest.raises(StoreConnectionError):
        cache.acquire()
    assert cache.status() == ConnectionState.DISCONNECTED

    handle = cache.acquire()
    assert isinstance(handle, FakeHandle)
    assert connector.calls == 2
    assert cache.status() == ConnectionState.CONNECTED


def test_concurrent_waiters_share_the_failure():
    connector = CountingConnector(delay=0.2, fail_times=1)
    cache = ConnectionCache(uri="sqlite://", connector=connector)
    barrier = threading.Barrier(5)
    errors = []

    def worker():
        barrier.wait()
        try:
            cache.acquire()
        except StoreConnectionError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert connector.calls == 1
    assert len(errors) == 5
    # next call retries instead of replaying the failure
    cache.acquire()
    assert connector.calls == 2


def test_connection_error_is_builtin_connection_error():
    cache = ConnectionCache(uri="sqlite://", connector=CountingConnector(fail_times=1))
    with pytest.raises(ConnectionError):
        cache.acquire()


def test_missing_uri_fails_without_connecting():
    connector = CountingConnector()
    cache = ConnectionCache(uri=None, connector=connector)
    with pytest.raises(StoreConnectionError) as exc:
        cache.acquire()
    assert "not configured" in exc.value.detail
    assert connector.calls == 0


def test_release_disposes_and_allows_reconnect():
    connector = CountingConnector()
    cache = ConnectionCache(uri="sqlite://", connector=connector)
    handle = cache.acquire()

    cache.release()
    assert handle.disposed
    assert cache.status() == ConnectionState.DISCONNECTED
    assert not cache.is_connected()

    assert cache.acquire() is not handle
    assert connector.calls == 2


def test_release_when_disconnected_is_noop():
    cache = ConnectionCache(uri="sqlite://", connector=CountingConnector())
    cache.release()
    assert cache.status() == ConnectionState.DISCONNECTED


def test_status_while_connecting():
    started = threading.Event()
    proceed = threading.Event()

    def connector():
        started.set()
        proceed.wait(2)
        return FakeHandle()

    cache = ConnectionCache(uri="sqlite://", connector=connector)
    t = threading.Thread(target=cache.acquire)
    t.start()
    started.wait(2)
    assert cache.status() == ConnectionState.CONNECTING
    proceed.set()
    t.join()
    assert cache.status() == ConnectionState.CONNECTED


def test_engine_options_for_pooled_driver():
    opts = engine_options("postgresql://u:p@db/events", 10, 5, 45)
    assert opts["pool_size"] == 10
    assert opts["pool_timeout"] == 5
    assert opts["connect_args"]["connect_timeout"] == 5


def test_engine_options_for_sqlite():
    assert "pool_size" not in engine_options("sqlite://", 10, 5, 45)


def test_app_cache_connects_to_database(app):
    from utils.connection import get_connection_cache

    cache = get_connection_cache()
    engine = cache.acquire()
    assert engine is not None
    assert cache.is_connected()


def test_connect_failure_keeps_driver_text_out_of_message():
    def connector():
        raise OSError('connection to server at "10.1.2.3", port 5432 failed for user "admin"')

    cache = ConnectionCache(uri="postgresql://db/events", connector=connector)
    with pytest.raises(StoreConnectionError) as exc:
        cache.acquire()
    assert exc.value.message == "Database connection failed"
    assert "10.1.2.3" in exc.value.detail
