"""Trading rule endpoints."""

from typing import Any, Mapping

from ..data.models import TradingRule
from ..data.parsers import parse_rule, to_wire
from .client import ApiClient, path_segment


class RulesApi:
    """CRUD for the user's trading rules."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_rules(self) -> list[TradingRule]:
        return [parse_rule(r) for r in self.client.get("/rules") or []]

    def get_rule(self, rule_id: str) -> TradingRule:
        return parse_rule(self.client.get(f"/rules/{path_segment(rule_id)}"))

    def create_rule(self, data: Mapping[str, Any]) -> TradingRule:
        """Create a rule from type, value, value_type, is_active and description."""
        return parse_rule(self.client.post("/rules", to_wire(dict(data))))

    def update_rule(self, rule_id: str, data: Mapping[str, Any]) -> TradingRule:
        """Update value, value_type, is_active or description."""
        return parse_rule(self.client.patch(f"/rules/{path_segment(rule_id)}", to_wire(dict(data))))

    def delete_rule(self, rule_id: str) -> None:
        self.client.delete(f"/rules/{path_segment(rule_id)}")
