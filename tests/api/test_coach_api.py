"""Tests for the streamed AI coach client."""

from http.client import IncompleteRead
from urllib.error import URLError

import pytest

from mindtrade_app.api.coach import STARTER_PROMPTS, CoachApi
from mindtrade_app.config.defaults import CoachParams
from mindtrade_app.errors import AuthenticationRequiredError, StreamError
from mindtrade_app.streaming.sse import StreamEventType

HAPPY_STREAM = (
    b'data: {"type":"token","content":"Hel"}\n\n'
    b'data: {"type":"token","content":"lo"}\n\n'
    b'data: {"type":"complete","content":"Hello"}\n\n'
    b'data: [DONE]\n\n'
)


class DroppedResponse:
    """Response whose connection drops after the first chunk."""

    def __init__(self, first: bytes):
        self._chunks = [first]
        self.closed = False

    def getcode(self) -> int:
        return 200

    def read(self, size: int = -1) -> bytes:
        if self._chunks:
            return self._chunks.pop(0)
        raise IncompleteRead(b"partial", 10)

    def close(self) -> None:
        self.closed = True


class Recorder:
    """Collects coach callbacks."""

    def __init__(self):
        self.tokens = []
        self.completed = []
        self.errors = []

    def ask(self, coach: CoachApi, question: str = "Why do I overtrade?") -> None:
        coach.ask(question, self.tokens.append, self.completed.append, self.errors.append)


class TestCoachAsk:
    """Test ask() callback dispatch."""

    def test_streams_tokens_then_completes(self, api_client, fake_opener):
        """Test a complete stream split into small chunks."""
        response = fake_opener.respond(raw=HAPPY_STREAM)
        recorder = Recorder()

        recorder.ask(CoachApi(api_client, CoachParams(chunk_size=7)))

        assert recorder.tokens == ["Hel", "lo"]
        assert recorder.completed == ["Hello"]
        assert recorder.errors == []
        assert response.closed is True

        request = fake_opener.last_request
        assert request.full_url.endswith("/ai-coach/ask")
        assert request.get_header("Accept") == "text/event-stream"
        assert fake_opener.last_json() == {"question": "Why do I overtrade?"}

    def test_stops_at_done(self, api_client, fake_opener):
        """Test that frames after [DONE] are ignored."""
        fake_opener.respond(raw=(
            b'data: {"type":"token","content":"a"}\n'
            b'data: [DONE]\n'
            b'data: {"type":"token","content":"b"}\n'
        ))
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.tokens == ["a"]

    def test_skips_malformed_frames(self, api_client, fake_opener):
        """Test that malformed JSON lines are skipped silently."""
        fake_opener.respond(raw=(
            b': keep-alive\n'
            b'data: {not json}\n'
            b'data: {"type":"token","content":"ok"}\n'
            b'data: [DONE]\n'
        ))
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.tokens == ["ok"]
        assert recorder.errors == []

    def test_error_event(self, api_client, fake_opener):
        """Test that error events reach on_error."""
        fake_opener.respond(raw=b'data: {"type":"error","message":"Coach unavailable"}\n\ndata: [DONE]\n\n')
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.errors == ["Coach unavailable"]

    def test_no_token(self, api_client, fake_opener, token_store):
        """Test that asking without a session reports an error and sends nothing."""
        token_store.clear_token()
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.errors == ["Authentication required"]
        assert fake_opener.requests == []

    def test_http_error_uses_body_message(self, api_client, fake_opener):
        """Test that a non-2xx response reports the body's message."""
        fake_opener.fail(429, {"message": "Daily question limit reached"})
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.errors == ["Daily question limit reached"]

    def test_http_error_without_message(self, api_client, fake_opener):
        """Test the generic message for a bodyless failure."""
        fake_opener.fail(502)
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.errors == ["Failed to connect to coach"]

    def test_connection_failure(self, api_client, fake_opener):
        """Test that a connection failure reports the exception text."""
        fake_opener.raise_error(URLError("connection refused"))
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert len(recorder.errors) == 1
        assert "connection refused" in recorder.errors[0]

    def test_connection_dropped_mid_stream(self, api_client, fake_opener):
        """Test that a truncated body is reported through on_error."""
        response = fake_opener.respond_with(DroppedResponse(b'data: {"type":"token","content":"Hi"}\n\n'))
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.tokens == ["Hi"]
        assert len(recorder.errors) == 1
        assert "IncompleteRead" in recorder.errors[0]
        assert response.closed is True

    def test_rejected_session_uses_body_message(self, api_client, fake_opener, token_store):
        """Test that a 401 reports the body's message and clears the token."""
        fake_opener.fail(401, {"message": "Session expired"})
        recorder = Recorder()

        recorder.ask(CoachApi(api_client))

        assert recorder.errors == ["Session expired"]
        assert token_store.get_token() is None


class TestCoachStream:
    """Test the stream() generator directly."""

    def test_yields_events(self, api_client, fake_opener):
        """Test event types from a full stream."""
        fake_opener.respond(raw=HAPPY_STREAM)

        events = list(CoachApi(api_client).stream("q"))

        assert [e.type for e in events] == [
            StreamEventType.TOKEN, StreamEventType.TOKEN, StreamEventType.COMPLETE
        ]

    def test_raises_without_token(self, api_client, token_store):
        """Test that stream() raises when iterated without a session."""
        token_store.clear_token()
        with pytest.raises(AuthenticationRequiredError):
            list(CoachApi(api_client).stream("q"))

    def test_raises_stream_error(self, api_client, fake_opener):
        """Test that open failures surface as StreamError."""
        fake_opener.fail(500, {"message": "boom"})
        with pytest.raises(StreamError, match="boom"):
            list(CoachApi(api_client).stream("q"))


class TestCoachEndpoints:
    """Test history and status endpoints."""

    def test_status(self, api_client, fake_opener):
        fake_opener.respond_ok({"allowed": True, "remaining": 7, "limit": 10})

        status = CoachApi(api_client).status()

        assert status.allowed is True
        assert status.remaining == 7
        assert status.limit == 10
        assert fake_opener.last_request.full_url.endswith("/ai-coach/status")

    def test_history(self, api_client, fake_opener):
        fake_opener.respond_ok({"messages": [
            {"role": "user", "content": "hi", "timestamp": "2024-03-01T10:00:00Z"},
            {"role": "assistant", "content": "hello"},
        ]})

        history = CoachApi(api_client).history()

        assert [m.role for m in history] == ["user", "assistant"]
        assert history[0].timestamp.year == 2024
        assert history[1].timestamp is None

    def test_clear_history(self, api_client, fake_opener):
        fake_opener.respond_ok(None)

        CoachApi(api_client).clear_history()

        assert fake_opener.last_request.get_method() == "DELETE"
        assert fake_opener.last_request.full_url.endswith("/ai-coach/history")

    def test_endpoints_require_token(self, api_client, token_store):
        token_store.clear_token()
        with pytest.raises(AuthenticationRequiredError):
            CoachApi(api_client).status()

    def test_starter_prompts(self):
        assert len(STARTER_PROMPTS) == 4
        assert all(p.endswith("?") for p in STARTER_PROMPTS)
