"""User profile endpoints."""

from typing import Any, Mapping

from ..data.models import UserProfile
from ..data.parsers import parse_profile, to_wire
from .client import ApiClient


class ProfileApi:
    """The signed-in user's trading profile."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_profile(self) -> UserProfile:
        return parse_profile(self.client.get("/user/profile"))

    def update_profile(self, data: Mapping[str, Any]) -> UserProfile:
        """Update name, experience_level, account_size or trading_style."""
        return parse_profile(self.client.patch("/user/profile", to_wire(dict(data))))
