import heapq
import itertools
import logging

import pytest
from fastapi.testclient import TestClient

from tara_call.api import create_app
from tara_call.config import Settings, get_settings
from tara_call.errors import MicrophoneError, StorageError, TransportError
from tara_call.session import EventBus

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


def make_settings(**overrides) -> Settings:
    values = dict(
        livekit_url="wss://tara.example.livekit.cloud",
        livekit_api_key="APItestkey",
        livekit_api_secret=TEST_SECRET,
        supabase_url="http://supabase.test",
        supabase_key="test-key",
        max_call_duration=300,
        feedback_success_reset_delay=2.0,
        feedback_failure_reset_delay=4.0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


class ManualHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler running on virtual time advanced by the test."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay, callback):
        handle = ManualHandle(callback)
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle))
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = when
            handle.callback()
        self.now = target

    @property
    def pending(self):
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)


@pytest.fixture
def scheduler():
    return ManualScheduler()


class FakeTransport:
    """In-memory stand-in for LiveKitTransport."""

    def __init__(self, join_error=None, microphone_error=None):
        self.events = EventBus()
        self.join_error = join_error
        self.microphone_error = microphone_error
        self.connected = False
        self.connect_calls = []
        self.disconnect_calls = 0
        self.microphone_enabled = None

    async def connect(self, url, token):
        self.connect_calls.append((url, token))
        if self.join_error:
            raise self.join_error
        self.connected = True

    async def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    async def set_microphone_enabled(self, enabled):
        if not self.connected:
            raise TransportError("Not connected to a room")
        if self.microphone_error:
            raise self.microphone_error
        self.microphone_enabled = enabled


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def denied_microphone_transport():
    return FakeTransport(microphone_error=MicrophoneError("Permission denied"))


class FakeFeedbackStore:
    """Records saved feedback rows instead of talking to Supabase."""

    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []
        self.closed = False

    async def save(self, record):
        if self.fail:
            raise StorageError("Failed to save feedback to database")
        self.saved.append(record)

    async def close(self):
        self.closed = True


@pytest.fixture
def feedback_store():
    return FakeFeedbackStore()


@pytest.fixture
def app(settings, feedback_store):
    app = create_app(feedback_store=feedback_store)
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
