import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'src' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import stubs as test_stubs


TEST_SETTINGS = {
    "spotify_client_id": "test-client-id",
    "spotify_client_secret": "test-client-secret",
    "spotify_redirect_uri": "http://localhost:5000/api/spotify-callback",
    "google_books_api_key": "test-books-key",
    "openai_api_key": None,
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real credentials from the developer's shell out of tests."""
    for name in ("OPENAI_API_KEY", "GOOGLE_BOOKS_API_KEY", "OTEL_EXPORTER_OTLP_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "test-client-secret")
    yield


@pytest.fixture
def fake_spotify():
    """A FakeSpotifyClient wired in as the per-token client factory."""
    return test_stubs.FakeSpotifyClient()


@pytest.fixture
def app(fake_spotify):
    import app as app_module

    application = app_module.create_app(dict(TEST_SETTINGS))
    application.config["TESTING"] = True
    application.extensions["spotify_client_factory"] = lambda token: fake_spotify
    yield application


@pytest.fixture
def fake_auth(app):
    """Replace the accounts client with a canned one."""
    stub = test_stubs.FakeAuthClient()
    app.extensions["spotify_auth"] = stub
    return stub


@pytest.fixture
def client(app):
    return app.test_client()
