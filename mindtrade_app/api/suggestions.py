"""Product feedback endpoints."""

from typing import Any, Mapping, Optional

from ..data.parsers import to_wire
from .client import ApiClient, path_segment


class SuggestionsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.client.post("/suggestions", to_wire(dict(data)))

    def get_user_suggestions(self) -> list[dict[str, Any]]:
        return self.client.get("/suggestions/my-suggestions") or []

    def get_all(self, limit: Optional[int] = None, skip: Optional[int] = None) -> dict[str, Any]:
        return self.client.get("/suggestions", params={"limit": limit or None, "skip": skip or None})

    def get_by_id(self, suggestion_id: str) -> dict[str, Any]:
        return self.client.get(f"/suggestions/{path_segment(suggestion_id)}")

    def update_status(self, suggestion_id: str, status: str) -> dict[str, Any]:
        endpoint = f"/suggestions/{path_segment(suggestion_id)}/status"
        return self.client.patch(endpoint, {"status": status})
