"""
Streaming helpers for the AI coach's server-sent events.
"""
from .sse import SSELineBuffer, StreamEvent, StreamEventType, iter_events

__all__ = ["SSELineBuffer", "StreamEvent", "StreamEventType", "iter_events"]
