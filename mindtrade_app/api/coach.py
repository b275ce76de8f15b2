"""
AI coach endpoints.

Questions are answered as a server-sent event stream of ``token`` events
followed by a ``complete`` event and a ``[DONE]`` sentinel.
"""

from http.client import HTTPException
from typing import Callable, Iterator, Optional

from ..config.defaults import CoachParams
from ..data.models import CoachMessage, CoachStatus
from ..data.parsers import parse_coach_history, parse_coach_status
from ..errors import ApiRequestError, AuthenticationRequiredError, NetworkError, StreamError
from ..logging.config import get_api_logger
from ..streaming.sse import StreamEvent, StreamEventType, iter_chunks, iter_events
from .client import ApiClient

logger = get_api_logger(__name__)

STARTER_PROMPTS = [
    "What patterns do you notice in my recent trades?",
    "Why might I be breaking my rules?",
    "How do I usually trade after losses?",
    "What should I be mindful of today?",
]


class CoachApi:
    """Streamed questions plus history and rate-limit status."""

    def __init__(self, client: ApiClient, config: Optional[CoachParams] = None):
        self.client = client
        self.config = config or CoachParams()

    def _require_token(self) -> None:
        if not self.client.token_store.get_token():
            raise AuthenticationRequiredError()

    def stream(self, question: str) -> Iterator[StreamEvent]:
        """
        Ask a question and yield decoded stream events.

        The response is closed when iteration finishes or is abandoned.

        Raises:
            AuthenticationRequiredError: If there is no session
            StreamError: If the stream cannot be opened or breaks mid-way
        """
        self._require_token()

        try:
            response = self.client.open(
                "POST", "/ai-coach/ask", {"question": question},
                accept="text/event-stream",
            )
        except ApiRequestError as e:
            raise StreamError(
                e.payload.get("message") or "Failed to connect to coach",
                endpoint="/ai-coach/ask"
            ) from e
        except NetworkError as e:
            raise StreamError(str(e), endpoint="/ai-coach/ask") from e

        try:
            chunks = iter_chunks(response, self.config.chunk_size)
            yield from iter_events(chunks, self.config.done_sentinel)
        except (OSError, HTTPException) as e:
            raise StreamError(f"Connection failed: {e}", endpoint="/ai-coach/ask") from e
        finally:
            response.close()

    def ask(
        self,
        question: str,
        on_token: Callable[[str], None],
        on_complete: Callable[[str], None],
        on_error: Callable[[str], None],
    ) -> None:
        """
        Ask a question, dispatching stream events to callbacks.

        Failures are reported through ``on_error``; nothing is raised.
        """
        try:
            for event in self.stream(question):
                if event.type == StreamEventType.TOKEN:
                    on_token(event.content)
                elif event.type == StreamEventType.COMPLETE:
                    on_complete(event.content)
                elif event.type == StreamEventType.ERROR:
                    on_error(event.message)
        except AuthenticationRequiredError as e:
            on_error(str(e))
        except StreamError as e:
            logger.warning("Coach stream failed", error=str(e))
            on_error(str(e))

    def history(self) -> list[CoachMessage]:
        self._require_token()
        return parse_coach_history(self.client.get("/ai-coach/history"))

    def clear_history(self) -> None:
        self._require_token()
        self.client.delete("/ai-coach/history")

    def status(self) -> CoachStatus:
        self._require_token()
        return parse_coach_status(self.client.get("/ai-coach/status"))
