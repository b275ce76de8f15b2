"""Tests for server-sent event parsing."""

import io

from mindtrade_app.streaming.sse import (
    SSELineBuffer,
    StreamEvent,
    StreamEventType,
    decode_event,
    iter_chunks,
    iter_events,
    parse_data_line,
)


class TestSSELineBuffer:
    """Test incremental line splitting."""

    def test_keeps_partial_line(self):
        """Test that an unterminated line waits for the next chunk."""
        buffer = SSELineBuffer()

        assert buffer.feed(b"data: a\ndata: b") == ["data: a"]
        assert buffer.pending == "data: b"
        assert buffer.feed(b"\n") == ["data: b"]
        assert buffer.pending == ""

    def test_strips_carriage_returns(self):
        """Test CRLF line endings."""
        buffer = SSELineBuffer()
        assert buffer.feed(b"data: x\r\n\r\n") == ["data: x", ""]

    def test_multibyte_character_split_across_chunks(self):
        """Test that a UTF-8 sequence split between chunks decodes intact."""
        buffer = SSELineBuffer()
        encoded = "data: café\n".encode("utf-8")
        split = encoded.index(b"\xa9")

        assert buffer.feed(encoded[:split]) == []
        assert buffer.feed(encoded[split:]) == ["data: café"]

    def test_flush_returns_tail(self):
        """Test flushing the unterminated last line."""
        buffer = SSELineBuffer()
        buffer.feed(b"data: tail")
        assert buffer.flush() == ["data: tail"]
        assert buffer.flush() == []


class TestFrameParsing:
    """Test data line and event decoding."""

    def test_parse_data_line(self):
        assert parse_data_line('data: {"a": 1}') == '{"a": 1}'
        assert parse_data_line("data: [DONE]") == "[DONE]"
        assert parse_data_line(": ping") is None
        assert parse_data_line("event: token") is None
        assert parse_data_line("") is None

    def test_decode_token(self):
        event = decode_event('{"type": "token", "content": "hi"}')
        assert event == StreamEvent(type=StreamEventType.TOKEN, content="hi")

    def test_decode_error(self):
        event = decode_event('{"type": "error", "message": "nope"}')
        assert event.type == StreamEventType.ERROR
        assert event.message == "nope"

    def test_decode_rejects_bad_payloads(self):
        """Test that malformed, non-object and unknown events are dropped."""
        assert decode_event("{oops") is None
        assert decode_event("[1, 2]") is None
        assert decode_event('{"type": "heartbeat"}') is None


class TestIterEvents:
    """Test event iteration over chunk streams."""

    def test_terminates_on_done(self):
        """Test that [DONE] ends iteration even with more data queued."""
        chunks = [
            b'data: {"type":"token","content":"1"}\n',
            b'data: [DONE]\n',
            b'data: {"type":"token","content":"2"}\n',
        ]
        events = list(iter_events(chunks))
        assert [e.content for e in events] == ["1"]

    def test_frames_split_across_chunks(self):
        """Test that a frame spread over many chunks is reassembled."""
        stream = b'data: {"type":"complete","content":"done"}\n\ndata: [DONE]\n\n'
        chunks = [stream[i:i + 3] for i in range(0, len(stream), 3)]

        events = list(iter_events(chunks))

        assert events == [StreamEvent(type=StreamEventType.COMPLETE, content="done")]

    def test_trailing_frame_without_newline(self):
        """Test that a final unterminated frame is still delivered."""
        events = list(iter_events([b'data: {"type":"token","content":"last"}']))
        assert [e.content for e in events] == ["last"]

    def test_stream_without_done(self):
        """Test that the stream ends cleanly when chunks run out."""
        events = list(iter_events([b'data: {"type":"token","content":"a"}\n']))
        assert len(events) == 1


class TestIterChunks:
    """Test response chunk reading."""

    def test_reads_until_eof(self):
        class Response:
            def __init__(self, body):
                self._body = io.BytesIO(body)

            def read(self, size=-1):
                return self._body.read(size)

        chunks = list(iter_chunks(Response(b"abcdefgh"), chunk_size=3))
        assert chunks == [b"abc", b"def", b"gh"]
