"""Session management: Google sign-in, token storage and logout."""

from typing import Any

from ..api.client import ApiClient
from ..errors import ApiRequestError, AuthenticationRequiredError, NetworkError
from ..logging.config import get_logger

logger = get_logger(__name__)


class AuthService:
    """Exchanges a Google ID token for a backend session and gates access."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.token_store = client.token_store

    def login_with_google(self, id_token: str) -> dict[str, Any]:
        """
        Exchange a Google ID token for a backend bearer token.

        The token is stored on success.

        Returns:
            ``{"token": ..., "expires_at": ...}``

        Raises:
            AuthenticationRequiredError: If the backend rejects the login
        """
        try:
            data = self.client.post("/auth/google", {"idToken": id_token}, skip_auth=True)
        except AuthenticationRequiredError:
            raise
        except ApiRequestError as e:
            raise AuthenticationRequiredError(
                str(e) or "Authentication failed",
                payload=e.payload
            ) from e

        if not isinstance(data, dict) or not data.get("token"):
            message = "Authentication failed"
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or message
            raise AuthenticationRequiredError(message)

        self.token_store.save_token(data["token"])
        logger.info("Signed in", expires_at=data.get("expiresAt"))
        return {"token": data["token"], "expires_at": data.get("expiresAt")}

    def get_token(self):
        return self.token_store.get_token()

    def save_token(self, token: str) -> None:
        self.token_store.save_token(token)

    def clear_token(self) -> None:
        self.token_store.clear_token()

    @property
    def is_authenticated(self) -> bool:
        return self.token_store.has_token

    def require_token(self) -> str:
        """
        Return the current token.

        Raises:
            AuthenticationRequiredError: If there is no session
        """
        token = self.token_store.get_token()
        if not token:
            raise AuthenticationRequiredError()
        return token

    def logout(self) -> None:
        """Notify the backend (best effort) and always clear the local token."""
        if self.token_store.get_token():
            try:
                self.client.post("/auth/logout")
            except (ApiRequestError, NetworkError) as e:
                logger.debug("Logout notification failed", error=str(e))
        self.token_store.clear_token()
        logger.info("Signed out")
