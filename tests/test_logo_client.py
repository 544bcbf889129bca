import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

import errors
from errors import RelayError
from logo_client import LogoClient
from logo_core import HuggingFaceImageBackend, LogoRenderer, decode_data_uri, to_data_uri
from relay import create_relay_app
from state import AppState, Ready

from fakes import PNG_BYTES, FakeResponse, FakeSession, FlaskSession

RELAY_URL = "http://localhost:3001/generate-logo"


def test_posts_name_industry_and_tone():
    image = to_data_uri(PNG_BYTES)
    session = FakeSession(FakeResponse(200, json_body={"image": image}))
    client = LogoClient(RELAY_URL, session=session, timeout=7)

    assert client.generate_logo("Nimbus", "HealthTech", "Professional") == image
    call = session.calls[0]
    assert call["url"] == RELAY_URL
    assert call["json"] == {"name": "Nimbus", "industry": "HealthTech", "tone": "Professional"}
    assert call["timeout"] == 7


def test_relay_error_message_and_reason_are_surfaced():
    body = {"error": "Image provider quota exhausted", "reason": errors.RATE_LIMITED}
    client = LogoClient(RELAY_URL, session=FakeSession(FakeResponse(500, json_body=body)))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.reason == errors.RATE_LIMITED
    assert info.value.message == "Image provider quota exhausted"
    assert info.value.status == 500


def test_error_without_json_body_uses_status():
    client = LogoClient(RELAY_URL, session=FakeSession(FakeResponse(502, b"<html>Bad gateway</html>")))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.message == "Logo generation failed (502)"
    assert info.value.reason == errors.UPSTREAM_ERROR
    assert info.value.user_message == "Logo generation failed (502)"


def test_unknown_reason_falls_back_to_upstream_error():
    body = {"error": "nope", "reason": "cosmic-rays"}
    client = LogoClient(RELAY_URL, session=FakeSession(FakeResponse(500, json_body=body)))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.reason == errors.UPSTREAM_ERROR


@pytest.mark.parametrize("exc", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_unreachable_relay(exc):
    client = LogoClient(RELAY_URL, session=FakeSession(exc))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.reason == errors.UNREACHABLE
    assert info.value.status is None
    assert info.value.retryable


@pytest.mark.parametrize("body", [{}, {"image": ""}, {"image": "https://example.com/logo.png"}, {"image": 42}])
def test_success_without_data_uri_is_malformed(body):
    client = LogoClient(RELAY_URL, session=FakeSession(FakeResponse(200, json_body=body)))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.reason == errors.MALFORMED
    assert info.value.message == "Invalid logo response from server"


# ---------------------------------------------------------------------------
# Through the relay
# ---------------------------------------------------------------------------

def relay_client(settings, upstream):
    backend = HuggingFaceImageBackend(settings, session=FakeSession(upstream))
    app = create_relay_app(settings, LogoRenderer(backend))
    return LogoClient(RELAY_URL, session=FlaskSession(app.test_client()))


def test_end_to_end_png_bytes_become_data_uri(settings):
    client = relay_client(settings, FakeResponse(200, PNG_BYTES, {"Content-Type": "image/png"}))
    image = client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert image.startswith("data:image/png;base64,")
    assert decode_data_uri(image) == ("image/png", PNG_BYTES)


def test_end_to_end_safety_block_is_distinguishable(settings):
    client = relay_client(settings, FakeResponse(400, b'{"error": "NSFW content detected"}'))
    with pytest.raises(RelayError) as info:
        client.generate_logo("Nimbus", "HealthTech", "Professional")
    assert info.value.reason == errors.SAFETY_BLOCKED
    assert info.value.transient
    assert "safety" in info.value.user_message.lower()


def test_end_to_end_missing_name_is_rejected(settings):
    client = relay_client(settings, FakeResponse(200, PNG_BYTES))
    with pytest.raises(RelayError) as info:
        client.generate_logo("", "HealthTech", "Professional")
    assert info.value.status == 400
    assert info.value.message == "name is required"


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def test_concurrent_requests_land_in_their_own_slots(result):
    names = result.names()
    barrier = threading.Barrier(len(names), timeout=5)

    def respond(url, json=None, timeout=None):
        barrier.wait()
        return FakeResponse(200, json_body={"image": to_data_uri(PNG_BYTES + json["name"].encode())})

    client = LogoClient(RELAY_URL, session=FakeSession(respond))
    state = AppState()
    state.result = result
    state.logos = {name: Ready("placeholder") for name in names}
    tickets = [state.begin_logo(name) for name in names]

    def run(ticket):
        state.complete_logo(ticket, client.generate_logo(ticket.name, ticket.industry, ticket.tone))

    with ThreadPoolExecutor(max_workers=len(names)) as pool:
        list(pool.map(run, tickets))

    for name in names:
        _, data = decode_data_uri(state.logo_image(name))
        assert data == PNG_BYTES + name.encode()
