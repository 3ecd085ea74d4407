from __future__ import annotations

import json

import pytest

from src.adapters import billing_client, booking_engine_client, token_client
from src.adapters.billing_client import BillingClient
from src.adapters.booking_engine_client import BookingEngineClient, BookingEngineError
from src.adapters.token_client import TokenIntrospectionClient


class FakeResponse:
    def __init__(self, status_code: int, body=None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.content = json.dumps(body).encode() if body is not None else b""
        self.text = text or (self.content.decode() if self.content else "")

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class RecordingRequests:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self.response

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self.response


def _patch(monkeypatch, module, response: FakeResponse) -> RecordingRequests:
    recorder = RecordingRequests(response)
    monkeypatch.setattr(module.requests, "post", recorder.post)
    monkeypatch.setattr(module.requests, "get", recorder.get)
    return recorder


def test_engine_posts_create_request(monkeypatch):
    recorder = _patch(monkeypatch, booking_engine_client, FakeResponse(200, {"uid": "abc"}))
    client = BookingEngineClient(base_url="http://engine.local/", timeout=3)

    result = client.create_booking({"body": {"start": "x"}})

    assert result == {"uid": "abc"}
    method, url, kwargs = recorder.calls[0]
    assert (method, url) == ("POST", "http://engine.local/bookings")
    assert kwargs["json"] == {"body": {"start": "x"}}
    assert kwargs["timeout"] == 3


def test_engine_unwraps_data_envelope(monkeypatch):
    _patch(monkeypatch, booking_engine_client, FakeResponse(200, {"data": [{"uid": "r-1"}]}))

    assert BookingEngineClient("http://engine.local").create_recurring_booking({}) == [{"uid": "r-1"}]


def test_engine_error_carries_status_and_message(monkeypatch):
    _patch(monkeypatch, booking_engine_client, FakeResponse(409, {"message": "slot taken"}))

    with pytest.raises(BookingEngineError) as info:
        BookingEngineClient("http://engine.local").create_booking({})

    assert (info.value.status_code, info.value.message) == (409, "slot taken")


def test_engine_missing_booking_returns_none(monkeypatch):
    _patch(monkeypatch, booking_engine_client, FakeResponse(404, {"message": "not found"}))

    assert BookingEngineClient("http://engine.local").get_booking_info("nope") is None


def test_engine_requires_base_url():
    with pytest.raises(RuntimeError):
        BookingEngineClient(base_url="").create_booking({})


def test_billing_increase_usage(monkeypatch):
    recorder = _patch(monkeypatch, billing_client, FakeResponse(202, {}))
    client = BillingClient(base_url="http://billing.local", api_key="key")

    client.increase_usage(7, {"bookingUid": "abc", "startTime": "2024-05-01T00:00:00+00:00"})

    _, url, kwargs = recorder.calls[0]
    assert url == "http://billing.local/usage/increase"
    assert kwargs["json"] == {"userId": 7, "bookingUid": "abc", "startTime": "2024-05-01T00:00:00+00:00"}
    assert kwargs["headers"]["Authorization"] == "Bearer key"


def test_billing_failure_raises(monkeypatch):
    _patch(monkeypatch, billing_client, FakeResponse(500, text="ledger offline"))

    with pytest.raises(RuntimeError, match="ledger offline"):
        BillingClient(base_url="http://billing.local", api_key="").cancel_usage("abc")


def test_token_introspection_returns_owner(monkeypatch):
    recorder = _patch(monkeypatch, token_client, FakeResponse(200, {"active": True, "ownerId": "42"}))

    owner = TokenIntrospectionClient("http://auth.local/introspect").resolve_owner("tok")

    assert owner == 42
    assert recorder.calls[0][2]["json"] == {"token": "tok"}


def test_token_introspection_inactive_token(monkeypatch):
    _patch(monkeypatch, token_client, FakeResponse(200, {"active": False}))

    assert TokenIntrospectionClient("http://auth.local/introspect").resolve_owner("tok") is None


def test_engine_error_with_structured_detail_keeps_text_message(monkeypatch):
    _patch(monkeypatch, booking_engine_client, FakeResponse(500, {"error": {"code": "x"}}))

    with pytest.raises(BookingEngineError) as info:
        BookingEngineClient("http://engine.local").create_booking({})

    assert info.value.status_code == 500
    assert isinstance(info.value.message, str)
    assert json.loads(info.value.message) == {"code": "x"}
