import os
import sys
import pytest

# Ensure the backend root (containing the `registry` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from registry import create_app, socketio
from registry.store import MemoryStore


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    STORE_BACKEND = 'memory'
    RECORD_KEY_PREFIX = 'user:'
    CORS_ORIGINS = ['*']
    LOG_LEVEL = 'DEBUG'
    PORT = 3000


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def flask_app(store):
    application = create_app(TestConfig, store=store)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
    )
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


@pytest.fixture()
def make_client():
    """Build a test client around an arbitrary store."""
    def _make(custom_store):
        return create_app(TestConfig, store=custom_store).test_client()
    return _make
