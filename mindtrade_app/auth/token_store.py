"""Bearer token holder backed by the local store."""

from typing import Optional

from ..persistence.local_store import LocalStore


class TokenStore:
    """
    Holds the bearer token in memory and, when a LocalStore is given,
    persists it across processes.
    """

    def __init__(self, store: Optional[LocalStore] = None, key: str = "mindtrade_token"):
        self.store = store
        self.key = key
        self._token: Optional[str] = None
        self._loaded = store is None

    def get_token(self) -> Optional[str]:
        if not self._loaded:
            stored = self.store.get(self.key)
            self._token = stored if isinstance(stored, str) and stored else None
            self._loaded = True
        return self._token

    def save_token(self, token: str) -> None:
        if self.store is not None:
            self.store.set(self.key, token)
        self._token = token
        self._loaded = True

    def clear_token(self) -> None:
        if self.store is not None:
            self.store.delete(self.key)
        self._token = None
        self._loaded = True

    @property
    def has_token(self) -> bool:
        return self.get_token() is not None
