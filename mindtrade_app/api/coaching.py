"""Streaks, milestones and the daily mindset check."""

from typing import Any, Mapping, Optional

from ..data.parsers import to_wire
from .client import ApiClient, path_segment


class CoachingApi:
    """Journey markers and daily check-ins."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_active_streaks(self) -> list[dict[str, Any]]:
        """Streaks with ``currentCount > 0``."""
        return self.client.get("/coaching/streaks") or []

    def get_all_streaks(self) -> list[dict[str, Any]]:
        return self.client.get("/coaching/streaks/all") or []

    def get_unacknowledged_milestones(self) -> list[dict[str, Any]]:
        return self.client.get("/coaching/milestones") or []

    def get_all_milestones(self) -> list[dict[str, Any]]:
        return self.client.get("/coaching/milestones/all") or []

    def acknowledge_milestone(self, milestone_id: str) -> dict[str, Any]:
        return self.client.post(f"/coaching/milestones/{path_segment(milestone_id)}/acknowledge")

    def acknowledge_all_milestones(self) -> int:
        """Returns the number of milestones acknowledged."""
        data = self.client.post("/coaching/milestones/acknowledge-all")
        return int((data or {}).get("acknowledged", 0))

    def get_today_check(self) -> Optional[dict[str, Any]]:
        """Today's mindset check, or None if not submitted yet."""
        return self.client.get("/mindset-check/today") or None

    def submit_mindset_check(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.client.post("/mindset-check/today", to_wire(dict(data)))

    def get_daily_coaching(self) -> dict[str, Any]:
        """
        Today's coaching guidance.

        Keys include ``scenario``, ``focus``, ``context`` and ``generatedAt``;
        ``gentleReminder`` and ``journeyMessage`` appear when relevant.
        """
        return self.client.get("/coaching/daily")

    def refresh_coaching(self) -> dict[str, Any]:
        """Regenerate today's guidance after new trades."""
        return self.client.post("/coaching/refresh")
