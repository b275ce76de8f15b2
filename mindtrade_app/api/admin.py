"""Admin dashboard endpoints."""

from typing import Any, Optional

from ..errors import ApiRequestError, NetworkError
from .client import ApiClient, path_segment


class AdminApi:
    """Operator views over users, trades and activity."""

    def __init__(self, client: ApiClient):
        self.client = client

    def check_admin_status(self) -> bool:
        """Any failure counts as not an admin."""
        try:
            data = self.client.get("/admin/check")
        except (ApiRequestError, NetworkError):
            return False
        return bool((data or {}).get("isAdmin", False))

    def get_dashboard(self) -> dict[str, Any]:
        return self.client.get("/admin/dashboard")

    def get_users(
        self,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        params = {"search": search or None, "page": page or None, "limit": limit or None}
        return self.client.get("/admin/users", params=params)

    def get_user_detail(self, user_id: str) -> dict[str, Any]:
        return self.client.get(f"/admin/users/{path_segment(user_id)}")

    def get_recent_activity(self, limit: Optional[int] = None) -> list[dict[str, Any]]:
        return self.client.get("/admin/activity", params={"limit": limit or None}) or []
