"""Trade journal endpoints."""

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..data.models import (
    CloseTradeResult,
    ImportResult,
    MonthTrades,
    PaginatedTrades,
    Trade,
    TradesMetadata,
)
from ..data.parsers import (
    parse_close_trade_result,
    parse_import_result,
    parse_month_trades,
    parse_paginated_trades,
    parse_trade,
    parse_trades,
    parse_trades_metadata,
    to_wire,
)
from .client import ApiClient, path_segment

EXPORT_LIMIT = 999999

IMPORT_FILE_TYPES = ("EQ", "FO")


class TradesApi:
    """CRUD and history queries for trades."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_trades(self) -> list[Trade]:
        return parse_trades(self.client.get("/trades"))

    def get_open_trades(self) -> list[Trade]:
        return parse_trades(self.client.get("/trades/open"))

    def get_closed_trades(self) -> list[Trade]:
        return parse_trades(self.client.get("/trades/closed"))

    def get_trade(self, trade_id: str) -> Trade:
        return parse_trade(self.client.get(f"/trades/{path_segment(trade_id)}"))

    def create_trade(self, data: Mapping[str, Any]) -> Trade:
        """
        Log a new trade.

        Args:
            data: snake_case fields of ``CreateTradeRequest`` (instrument_type,
                symbol, trade_date, trade_time, type, quantity, entry_price,
                confidence, risk_comfort and optional plan fields)
        """
        return parse_trade(self.client.post("/trades", to_wire(dict(data))))

    def update_trade(self, trade_id: str, data: Mapping[str, Any]) -> Trade:
        """Update planned stop/target, reason or emotions."""
        endpoint = f"/trades/{path_segment(trade_id)}"
        return parse_trade(self.client.patch(endpoint, to_wire(dict(data))))

    def complete_trade(self, trade_id: str, data: Mapping[str, Any]) -> Trade:
        """Fill in plan details for an imported trade."""
        endpoint = f"/trades/{path_segment(trade_id)}/complete"
        return parse_trade(self.client.put(endpoint, to_wire(dict(data))))

    def close_trade(self, trade_id: str, data: Mapping[str, Any]) -> CloseTradeResult:
        """
        Close an open trade.

        Args:
            data: exit_reason, exit_price and optional exit_note, emotions,
                closed_at (ISO string)
        """
        payload = self.client.post(f"/trades/{path_segment(trade_id)}/close", to_wire(dict(data)))
        return parse_close_trade_result(payload)

    def delete_trade(self, trade_id: str) -> None:
        self.client.delete(f"/trades/{path_segment(trade_id)}")

    def get_closed_trades_paginated(self, query: Optional[Mapping[str, Any]] = None) -> PaginatedTrades:
        """
        Fetch one page of closed trades.

        Args:
            query: wire-format history query, see ``state.filters.to_api_query``
        """
        return parse_paginated_trades(
            self.client.get("/trades/closed-paginated", params=query or {})
        )

    def get_month_trades(self, year: int, month: int) -> MonthTrades:
        return parse_month_trades(
            self.client.get("/trades/calendar-month", params={"year": year, "month": month})
        )

    def get_trades_metadata(self) -> TradesMetadata:
        return parse_trades_metadata(self.client.get("/trades/metadata"))

    def export_all_trades(self, query: Optional[Mapping[str, Any]] = None) -> list[Trade]:
        """Fetch every closed trade matching the query, ignoring pagination."""
        params = {k: v for k, v in (query or {}).items() if k not in ("skip", "limit")}
        params["limit"] = EXPORT_LIMIT
        params["skip"] = 0
        return self.get_closed_trades_paginated(params).trades

    def import_trades(
        self,
        tradebook: Union[str, Path, bytes],
        broker: str = "GENERIC",
        file_type: str = "EQ",
        filename: str = "tradebook.csv",
    ) -> ImportResult:
        """
        Upload a broker tradebook CSV for trade reconstruction.

        Args:
            tradebook: Path to the CSV file, or its raw bytes
            broker: Broker whose export layout the file uses (GENERIC, ZERODHA)
            file_type: EQ for equity, FO for futures and options
            filename: Upload name used when raw bytes are given

        Raises:
            ValueError: If file_type is not EQ or FO
        """
        normalized = file_type.upper()
        if normalized not in IMPORT_FILE_TYPES:
            raise ValueError(f"Unsupported tradebook type: {file_type}")

        if isinstance(tradebook, bytes):
            content = tradebook
        else:
            path = Path(tradebook)
            content = path.read_bytes()
            filename = path.name

        payload = self.client.upload(
            "/trades/import",
            fields={"broker": broker.upper(), "fileType": normalized},
            files={"file": (filename, content, "text/csv")},
        )
        return parse_import_result(payload)
