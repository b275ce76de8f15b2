"""
Server-sent events parsing for the AI coach stream.

Frames arrive as ``data: <json>`` lines. Network chunks can split a line
(or a multi-byte character) anywhere, so bytes are decoded incrementally
and the trailing partial line is buffered until the next chunk.
"""

import codecs
import json
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from ..logging.config import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamEventType(str, Enum):
    TOKEN = "token"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """One decoded coach event."""
    type: StreamEventType
    content: str = ""
    message: str = ""


class SSELineBuffer:
    """Incremental decoder turning byte chunks into complete text lines."""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        """
        Add a chunk and return the lines it completed.

        The last, unterminated line stays buffered.
        """
        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        return [rest.rstrip("\r")] if rest.strip() else []

    @property
    def pending(self) -> str:
        return self._buffer


def parse_data_line(line: str) -> Optional[str]:
    """
    Extract the payload of a ``data:`` line.

    Returns:
        The trimmed payload, or None for lines that carry no data
    """
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def decode_event(payload: str) -> Optional[StreamEvent]:
    """
    Decode a JSON event payload.

    Malformed JSON and unknown event types return None.
    """
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed stream frame", payload=payload[:100])
        return None

    if not isinstance(raw, dict):
        return None

    try:
        event_type = StreamEventType(raw.get("type"))
    except ValueError:
        return None

    return StreamEvent(
        type=event_type,
        content=raw.get("content") or "",
        message=raw.get("message") or "",
    )


def iter_events(
    chunks: Iterable[bytes],
    done_sentinel: str = DONE_SENTINEL,
) -> Iterator[StreamEvent]:
    """
    Yield coach events from a stream of byte chunks.

    Iteration stops at the ``[DONE]`` sentinel or when the chunks run out.
    """
    buffer = SSELineBuffer()

    for chunk in chunks:
        for line in buffer.feed(chunk):
            payload = parse_data_line(line)
            if payload is None:
                continue
            if payload == done_sentinel:
                return
            event = decode_event(payload)
            if event is not None:
                yield event

    for line in buffer.flush():
        payload = parse_data_line(line)
        if payload is None or payload == done_sentinel:
            continue
        event = decode_event(payload)
        if event is not None:
            yield event


def iter_chunks(response, chunk_size: int = 1024) -> Iterator[bytes]:
    """Read an HTTP response body in chunks until EOF."""
    reader = getattr(response, "read1", None) or response.read
    while True:
        chunk = reader(chunk_size)
        if not chunk:
            break
        yield chunk
