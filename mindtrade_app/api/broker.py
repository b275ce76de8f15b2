"""
Broker account endpoints.

The backend owns the broker OAuth session and position reconciliation;
the client only triggers those flows and renders their results.
"""

from typing import Any, Mapping, Optional

from ..data.models import (
    BrokerConnectionStatus,
    BrokerMargins,
    BrokerPosition,
    PlaceOrderResult,
    SyncResult,
)
from ..data.parsers import (
    parse_broker_status,
    parse_margins,
    parse_place_order_result,
    parse_positions,
    parse_sync_result,
    to_wire,
)
from .client import ApiClient, path_segment

SUPPORTED_BROKERS = ("ZERODHA", "ANGELONE", "UPSTOX", "IIFL")


def broker_slug(broker: str) -> str:
    """
    Normalize a broker name to its URL segment.

    Raises:
        ValueError: If the broker is not supported
    """
    name = (broker or "").strip().upper()
    if name not in SUPPORTED_BROKERS:
        raise ValueError(
            f"Unsupported broker {broker!r}; expected one of {', '.join(SUPPORTED_BROKERS)}"
        )
    return name.lower()


class BrokerApi:
    """Connect, inspect and trade through a linked broker account."""

    def __init__(self, client: ApiClient):
        self.client = client

    def _path(self, broker: str, suffix: str) -> str:
        return f"/broker/{broker_slug(broker)}/{suffix}"

    def connect(self, broker: str) -> str:
        """Start the OAuth flow; returns the broker login URL."""
        data = self.client.post(self._path(broker, "connect"), {})
        return (data or {}).get("loginUrl", "")

    def handle_callback(self, broker: str, request_token: str) -> BrokerConnectionStatus:
        """Exchange the OAuth request token for a broker session."""
        data = self.client.post(self._path(broker, "callback"), {"request_token": request_token})
        return parse_broker_status(data or {})

    def status(self, broker: str) -> BrokerConnectionStatus:
        return parse_broker_status(self.client.get(self._path(broker, "status")) or {})

    def disconnect(self, broker: str) -> bool:
        """Returns the connection flag reported after disconnecting."""
        data = self.client.delete(self._path(broker, "disconnect"))
        return bool((data or {}).get("connected", False))

    def positions(self, broker: str) -> list[BrokerPosition]:
        return parse_positions(self.client.get(self._path(broker, "positions")))

    def margins(self, broker: str) -> Optional[BrokerMargins]:
        data = self.client.get(self._path(broker, "margins"))
        return parse_margins(data) if isinstance(data, dict) else None

    def place_order(
        self,
        broker: str,
        trade_data: Mapping[str, Any],
        override_warnings: bool = False,
        override_reason: Optional[str] = None,
    ) -> PlaceOrderResult:
        """
        Place an order; the backend validates it against the user's rules first.

        A WARN outcome needs ``override_warnings`` (and a reason) to proceed.
        """
        body = {
            "tradeData": to_wire(dict(trade_data)),
            "overrideWarnings": override_warnings,
        }
        if override_reason:
            body["overrideReason"] = override_reason
        return parse_place_order_result(self.client.post(self._path(broker, "orders"), body) or {})

    def order_status(self, broker: str, order_id: str) -> dict[str, Any]:
        data = self.client.get(self._path(broker, f"orders/{path_segment(order_id)}"))
        return (data or {}).get("status", {})

    def sync_positions(self, broker: str) -> SyncResult:
        return parse_sync_result(self.client.post(self._path(broker, "sync"), {}) or {})

    def search_instruments(
        self,
        broker: str,
        search: str,
        exchange: str = "NSE",
        refresh: bool = False,
    ) -> list[dict[str, Any]]:
        params = {"search": search, "exchange": exchange}
        if refresh:
            params["refresh"] = True
        data = self.client.get(self._path(broker, "instruments/search"), params=params)
        return (data or {}).get("instruments", [])

    def validate_symbol(self, broker: str, symbol: str, exchange: str = "NSE") -> dict[str, Any]:
        """Returns ``{"valid": bool, "instrument": dict | None}``."""
        return self.client.get(
            self._path(broker, "instruments/validate"),
            params={"symbol": symbol, "exchange": exchange},
        ) or {"valid": False, "instrument": None}

    def last_price(self, broker: str, instrument_token: str) -> Optional[float]:
        data = self.client.get(
            self._path(broker, "instruments/price"),
            params={"instrumentToken": instrument_token},
        )
        return (data or {}).get("lastPrice")

    def clear_instruments_cache(self, broker: str, exchange: Optional[str] = None) -> None:
        self.client.delete(self._path(broker, "instruments/cache"), params={"exchange": exchange})
