"""Pytest configuration and shared fixtures."""

import io
import json
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError

import pytest

from mindtrade_app.api.client import ApiClient
from mindtrade_app.auth.token_store import TokenStore
from mindtrade_app.config.defaults import ApiParams

BASE_URL = "http://test.local/api"


class FakeResponse:
    """Minimal stand-in for an ``http.client.HTTPResponse``."""

    def __init__(self, body: bytes = b"", status: int = 200):
        self._stream = io.BytesIO(body)
        self.status = status
        self.reason = "OK"
        self.closed = False

    def getcode(self) -> int:
        return self.status

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def close(self) -> None:
        self.closed = True


class FakeOpener:
    """Records requests and replays queued responses or failures in order."""

    def __init__(self):
        self.requests = []
        self.timeouts = []
        self._queue = []

    def respond(self, body: Any = None, status: int = 200, raw: Optional[bytes] = None) -> FakeResponse:
        if raw is None:
            raw = json.dumps(body).encode("utf-8") if body is not None else b""
        response = FakeResponse(raw, status)
        self._queue.append(response)
        return response

    def respond_ok(self, data: Any) -> FakeResponse:
        """Queue a ``{"success": true, "data": ...}`` envelope."""
        return self.respond({"success": True, "data": data})

    def fail(self, status: int, body: Any = None, reason: str = "Error") -> None:
        raw = json.dumps(body).encode("utf-8") if body is not None else b""
        self._queue.append(HTTPError(BASE_URL, status, reason, {}, io.BytesIO(raw)))

    def respond_with(self, response: Any) -> Any:
        """Queue a prepared response object."""
        self._queue.append(response)
        return response

    def raise_error(self, exc: Exception) -> None:
        self._queue.append(exc)

    def __call__(self, request, timeout=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def last_request(self):
        return self.requests[-1]

    def last_json(self) -> Any:
        data = self.last_request.data
        return json.loads(data.decode("utf-8")) if data else None


@pytest.fixture
def fake_opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def token_store() -> TokenStore:
    store = TokenStore()
    store.save_token("tok-123")
    return store


@pytest.fixture
def api_client(fake_opener: FakeOpener, token_store: TokenStore) -> ApiClient:
    """ApiClient wired to the fake opener with a signed-in session."""
    return ApiClient(ApiParams(base_url=BASE_URL), token_store=token_store, opener=fake_opener)


@pytest.fixture
def trade_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for wire-format closed trade payloads."""

    def make(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "id": "trade-1",
            "instrumentType": "STOCK",
            "symbol": "AAPL",
            "tradeDate": "2024-03-01",
            "tradeTime": "09:30",
            "type": "buy",
            "quantity": 10,
            "entryPrice": 100.0,
            "confidence": 3,
            "riskComfort": 500.0,
            "status": "closed",
            "createdAt": "2024-03-01T09:30:00Z",
            "plannedStop": 95.0,
            "plannedTarget": 110.0,
            "exitReason": "target",
            "exitPrice": 110.0,
            "profitLoss": 100.0,
            "result": "win",
            "closedAt": "2024-03-01T14:00:00Z",
            "emotions": ["calm"],
            "source": "MANUAL",
        }
        payload.update(overrides)
        return {k: v for k, v in payload.items() if v is not None}

    return make
