"""Behavioural insight, trend history and Trading DNA endpoints."""

from typing import Any, Optional

from .client import ApiClient

INSIGHT_RANGES = ("TODAY", "WEEK", "MONTH")

INSIGHTS_VERSION = "v2"


class InsightsApi:
    """Read-only behavioural analytics computed by the backend."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_insights(self, insight_range: str = "WEEK") -> dict[str, Any]:
        """
        Fetch insights for a range.

        Raises:
            ValueError: If the range is not TODAY, WEEK or MONTH
        """
        normalized = insight_range.upper()
        if normalized not in INSIGHT_RANGES:
            raise ValueError(f"Unsupported insight range: {insight_range}")
        return self.client.get(
            "/insights", params={"range": normalized.lower(), "version": INSIGHTS_VERSION}
        )

    def get_trading_dna(self, force_refresh: bool = False) -> dict[str, Any]:
        """Behavioural fingerprint; ``dna`` is None until enough trades exist."""
        params = {"refresh": True} if force_refresh else None
        return self.client.get("/insights/dna", params=params)

    def check_dna_eligibility(self) -> dict[str, Any]:
        return self.client.get("/insights/dna/eligibility")

    def get_trends(self, days: int = 30, expand: bool = False) -> dict[str, Any]:
        """Daily behaviour snapshots and pattern trends for the last ``days`` days."""
        return self.client.get("/insights/trends", params={"days": days, "expand": expand})

    def aggregate_weeks(self) -> int:
        """Roll daily snapshots into weekly summaries; returns weeks aggregated."""
        data = self.client.post("/insights/aggregate", {})
        return int((data or {}).get("weeksAggregated", 0))

    def export_data(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> bytes:
        """Download insight history as CSV bytes; dates are ``YYYY-MM-DD``."""
        return self.client.download(
            "/insights/export", params={"startDate": start_date, "endDate": end_date}
        )

    def get_progress_comparison(self) -> dict[str, Any]:
        """This period versus the previous one."""
        return self.client.get("/insights/progress")

    def get_weekly_trends(self, weeks: int = 8) -> list[dict[str, Any]]:
        return self.client.get("/insights/progress/weekly", params={"weeks": weeks}) or []
