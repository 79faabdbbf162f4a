import json
import time

import pytest
import requests

from fewsats_l402 import (
    HTTPStatusError,
    ProtocolError,
    RequestsTransport,
    TransportError,
    TransportTimeoutError,
)
from fewsats_l402.core.transport import extract_server_message


def _response(status_code=200, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeSession:
    def __init__(self, outcome):
        self.outcome = outcome
        self.requests = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    def close(self):
        self.closed = True


def _transport(outcome):
    session = FakeSession(outcome)
    return RequestsTransport("https://api.example.test/", "secret", session=session), session


@pytest.mark.asyncio
async def test_relative_path_uses_base_url_and_credential():
    transport, session = _transport(_response(payload={"status": "pending"}))

    result = await transport.send(
        "get", "/v0/l402/payment-status", timeout=10, params={"payment_context_token": "ctx"}
    )

    assert result == {"status": "pending"}
    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert url == "https://api.example.test/v0/l402/payment-status"
    assert kwargs["headers"]["Authorization"] == "Token secret"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["params"] == {"payment_context_token": "ctx"}
    assert kwargs["timeout"] == 10
    assert kwargs["json"] is None


@pytest.mark.asyncio
async def test_absolute_url_without_credential():
    transport, session = _transport(_response(payload={"ok": True}))

    await transport.send(
        "POST",
        "https://pay.elsewhere.test/request",
        {"offer_id": "o1"},
        timeout=10,
        authenticate=False,
    )

    _, url, kwargs = session.requests[0]
    assert url == "https://pay.elsewhere.test/request"
    assert "Authorization" not in kwargs["headers"]
    assert kwargs["json"] == {"offer_id": "o1"}


@pytest.mark.asyncio
async def test_timeout_maps_to_transport_timeout():
    transport, _ = _transport(requests.ReadTimeout("slow"))

    with pytest.raises(TransportTimeoutError) as excinfo:
        await transport.send("GET", "/v0/wallets", timeout=0.5)

    assert isinstance(excinfo.value, TransportError)
    assert isinstance(excinfo.value.__cause__, requests.ReadTimeout)



class SlowSession(FakeSession):
    def request(self, method, url, **kwargs):
        time.sleep(0.5)
        return super().request(method, url, **kwargs)


@pytest.mark.asyncio
async def test_whole_call_is_bounded_by_timeout():
    session = SlowSession(_response(payload={"status": "pending"}))
    transport = RequestsTransport("https://api.example.test", "secret", session=session)

    started = time.monotonic()
    with pytest.raises(TransportTimeoutError):
        await transport.send("GET", "/v0/wallets", timeout=0.05)

    assert time.monotonic() - started < 0.4


@pytest.mark.asyncio
async def test_connection_failure_maps_to_transport_error():
    transport, _ = _transport(requests.ConnectionError("refused"))

    with pytest.raises(TransportError) as excinfo:
        await transport.send("GET", "/v0/wallets", timeout=1)

    assert not isinstance(excinfo.value, TransportTimeoutError)
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.asyncio
async def test_error_status_keeps_server_message():
    transport, _ = _transport(_response(422, payload={"detail": "amount too small"}))

    with pytest.raises(HTTPStatusError) as excinfo:
        await transport.send("POST", "/v0/l402/offers", {"offers": []}, timeout=1)

    assert excinfo.value.status_code == 422
    assert excinfo.value.server_message == "amount too small"
    assert excinfo.value.body == {"detail": "amount too small"}


@pytest.mark.asyncio
async def test_error_status_with_plain_text_body():
    transport, _ = _transport(_response(502, text="Bad Gateway"))

    with pytest.raises(HTTPStatusError) as excinfo:
        await transport.send("GET", "/v0/users/me", timeout=1)

    assert excinfo.value.server_message == "Bad Gateway"


@pytest.mark.asyncio
async def test_invalid_json_is_protocol_error():
    transport, _ = _transport(_response(200, text="<html>not json</html>"))

    with pytest.raises(ProtocolError):
        await transport.send("GET", "/v0/users/me", timeout=1)


@pytest.mark.asyncio
async def test_empty_body_decodes_to_empty_mapping():
    transport, _ = _transport(_response(204))

    assert await transport.send("POST", "/v0/users/webhook/set", {"webhook_url": "x"}, timeout=1) == {}


@pytest.mark.asyncio
async def test_close_closes_session():
    transport, session = _transport(_response(payload={}))
    await transport.close()
    assert session.closed


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"detail": "bad token"}, "bad token"),
        ({"error": {"message": "nested"}}, "nested"),
        ({"detail": [{"msg": "field required"}, {"msg": "too short"}]}, "field required; too short"),
        ({"unrelated": 1}, None),
        ("", None),
        (None, None),
    ],
)
def test_extract_server_message(payload, expected):
    assert extract_server_message(payload) == expected
