"""JSON-over-HTTPS client for the MindTrade backend."""

import json
import socket
import time
import uuid
from typing import Any, Callable, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode, urlparse
from urllib.request import Request, urlopen

from ..auth.token_store import TokenStore
from ..config.defaults import ApiParams
from ..errors import (
    ApiRequestError,
    AuthenticationRequiredError,
    NetworkError,
)
from ..logging.config import get_api_logger, log_api_call

logger = get_api_logger(__name__)


def encode_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Encode query parameters the way the backend expects.

    ``None`` values are dropped, booleans become ``true``/``false`` and
    sequences are comma-joined (empty sequences are dropped).
    """
    if not params:
        return ""

    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            value = ",".join(str(v) for v in value)
        pairs.append((key, str(value)))

    return urlencode(pairs)


def path_segment(value: Any) -> str:
    """Quote an identifier for use as a single URL path segment."""
    return quote(str(value), safe="")


def encode_multipart(
    fields: Mapping[str, Any],
    files: Mapping[str, tuple[str, bytes, str]],
    boundary: Optional[str] = None,
) -> tuple[bytes, str]:
    """
    Encode form fields and files as ``multipart/form-data``.

    Args:
        fields: Plain form values
        files: Field name -> (filename, content, content type)
        boundary: Part separator, random when omitted

    Returns:
        (body, Content-Type header value)
    """
    boundary = boundary or uuid.uuid4().hex
    lines: list[bytes] = []

    for name, value in fields.items():
        lines.append(f"--{boundary}".encode())
        lines.append(f'Content-Disposition: form-data; name="{name}"'.encode())
        lines.append(b"")
        lines.append(str(value).encode("utf-8"))

    for name, (filename, content, content_type) in files.items():
        lines.append(f"--{boundary}".encode())
        lines.append(
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"'.encode()
        )
        lines.append(f"Content-Type: {content_type}".encode())
        lines.append(b"")
        lines.append(content)

    lines.append(f"--{boundary}--".encode())
    lines.append(b"")
    return b"\r\n".join(lines), f"multipart/form-data; boundary={boundary}"


def error_message(payload: Any, fallback: str) -> str:
    """Pick the human-readable message from an error body."""
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error") or fallback
    return fallback


class ApiClient:
    """Thin client over the backend REST API."""

    def __init__(
        self,
        config: Optional[ApiParams] = None,
        token_store: Optional[TokenStore] = None,
        opener: Callable[..., Any] = urlopen,
    ):
        self.config = config or ApiParams()
        self.token_store = token_store or TokenStore()
        self._opener = opener
        self.logger = logger

        parsed = urlparse(self.config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid API base URL: {self.config.base_url}")

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    def build_url(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Join the base URL, endpoint and encoded query parameters."""
        url = f"{self.base_url}{endpoint}"
        query = encode_params(params)
        if query:
            url += ("&" if "?" in url else "?") + query
        return url

    def _build_request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        skip_auth: bool = False,
        accept: str = "application/json",
        raw_body: Optional[bytes] = None,
        content_type: str = "application/json",
    ) -> Request:
        headers = {
            "Content-Type": content_type,
            "Accept": accept,
            "User-Agent": self.config.user_agent,
        }

        if not skip_auth:
            token = self.token_store.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        if raw_body is not None:
            body: Optional[bytes] = raw_body
        else:
            body = json.dumps(data).encode("utf-8") if data is not None else None

        return Request(
            self.build_url(endpoint, params),
            data=body,
            headers=headers,
            method=method,
        )

    def open(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        skip_auth: bool = False,
        accept: str = "application/json",
        raw_body: Optional[bytes] = None,
        content_type: str = "application/json",
    ) -> Any:
        """
        Send a request and return the open HTTP response.

        The caller owns the response and must close it.

        Raises:
            AuthenticationRequiredError: On HTTP 401 (the stored token is cleared)
            ApiRequestError: On any other non-2xx status
            NetworkError: If no HTTP response was received
        """
        req = self._build_request(
            method, endpoint, data, params, skip_auth, accept, raw_body, content_type
        )
        start_time = time.time()

        try:
            response = self._opener(req, timeout=self.config.timeout_seconds)

        except HTTPError as e:
            duration_ms = int((time.time() - start_time) * 1000)
            log_api_call(self.logger, method, endpoint, e.code, duration_ms)
            try:
                raw = e.read()
            finally:
                e.close()
            self._raise_for_status(e.code, e.reason, raw, endpoint)

        except (OSError, URLError, socket.timeout) as e:
            duration_ms = int((time.time() - start_time) * 1000)
            log_api_call(self.logger, method, endpoint, None, duration_ms,
                         context={"error": str(e)})
            raise NetworkError(f"Network error: {e}", endpoint=endpoint) from e

        status_code = response.getcode()
        if not 200 <= status_code < 300:
            try:
                raw = response.read()
            finally:
                response.close()
            self._raise_for_status(status_code, getattr(response, "reason", ""), raw, endpoint)

        log_api_call(self.logger, method, endpoint, status_code,
                     int((time.time() - start_time) * 1000))
        return response

    def _raise_for_status(self, status_code: int, reason: Any, raw: bytes, endpoint: str) -> None:
        try:
            payload = json.loads(raw.decode("utf-8")) if raw else {}
        except (UnicodeDecodeError, json.JSONDecodeError):
            payload = {}

        if status_code == 401:
            self.token_store.clear_token()
            self.logger.warning("Token rejected, cleared local session", endpoint=endpoint)
            raise AuthenticationRequiredError(
                endpoint=endpoint,
                payload=payload if isinstance(payload, dict) else {}
            )

        message = error_message(payload, f"Request failed: {reason or status_code}")
        raise ApiRequestError(
            message,
            status_code=status_code,
            endpoint=endpoint,
            payload=payload if isinstance(payload, dict) else {}
        )

    def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        skip_auth: bool = False,
    ) -> Any:
        """
        Perform a JSON request.

        Responses shaped ``{"success": true, "data": X}`` unwrap to ``X``;
        any other body is returned whole. An empty body returns None.
        """
        response = self.open(method, endpoint, data, params, skip_auth)
        return self._read_json(response, endpoint)

    def upload(
        self,
        endpoint: str,
        fields: Mapping[str, Any],
        files: Mapping[str, tuple[str, bytes, str]],
    ) -> Any:
        """POST a multipart form and return the unwrapped JSON body."""
        body, content_type = encode_multipart(fields, files)
        response = self.open("POST", endpoint, raw_body=body, content_type=content_type)
        return self._read_json(response, endpoint)

    def download(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        accept: str = "text/csv",
    ) -> bytes:
        """GET a non-JSON resource and return its raw bytes."""
        response = self.open("GET", endpoint, params=params, accept=accept)
        try:
            return response.read()
        finally:
            response.close()

    def _read_json(self, response: Any, endpoint: str) -> Any:
        try:
            raw = response.read()
        finally:
            response.close()

        if not raw:
            return None

        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ApiRequestError(
                f"Invalid JSON response: {e}",
                status_code=response.getcode(),
                endpoint=endpoint
            ) from e

        if isinstance(body, dict) and body.get("success") and "data" in body:
            return body["data"]
        return body

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        return self.request("GET", endpoint, params=params, **kwargs)

    def post(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return self.request("POST", endpoint, data=data, **kwargs)

    def put(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return self.request("PUT", endpoint, data=data, **kwargs)

    def patch(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return self.request("PATCH", endpoint, data=data, **kwargs)

    def delete(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        return self.request("DELETE", endpoint, params=params, **kwargs)
