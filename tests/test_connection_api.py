from unittest.mock import patch

import pytest
from conftest import make_settings

from tara_call.config import get_settings
from tara_call.services.livekit_service import LiveKitService


def test_connection_details_returned(client, settings):
    """Test that a configured server issues complete connection details"""
    response = client.get("/api/connection-details")
    assert response.status_code == 200

    data = response.json()
    assert set(data) == {"serverUrl", "roomName", "participantName", "participantToken"}
    assert data["serverUrl"] == settings.livekit_url
    assert data["roomName"] == "tara-medical-counselor"
    assert data["participantName"].startswith("user-")
    assert data["participantToken"]


def test_connection_details_not_cacheable(client):
    response = client.get("/api/connection-details?agent=tara")
    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"


@pytest.mark.parametrize(
    "missing, message",
    [
        ("livekit_url", "LiveKit URL is not configured"),
        ("livekit_api_key", "LiveKit API key is not configured"),
        ("livekit_api_secret", "LiveKit API secret is not configured"),
    ],
)
def test_missing_configuration_is_server_error(app, client, missing, message):
    """Test that missing configuration never yields a 200"""
    broken = make_settings(**{missing: ""})
    app.dependency_overrides[get_settings] = lambda: broken

    response = client.get("/api/connection-details")
    assert response.status_code == 500
    assert response.json()["detail"] == message
    assert response.headers["cache-control"] == "no-store"


def test_signing_failure_is_server_error(client):
    with patch.object(LiveKitService, "create_token", side_effect=RuntimeError("signing broke")):
        response = client.get("/api/connection-details")
    assert response.status_code == 500
    assert response.json()["detail"] == "signing broke"


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
