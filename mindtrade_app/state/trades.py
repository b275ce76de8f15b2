"""
Local trade cache.

Every mutation round-trips to the backend first and only then patches the
cached list, so the cache always reflects the last server response.
"""

from typing import Any, Mapping, Optional

from ..api.trades import TradesApi
from ..data.models import CloseTradeResult, Trade, TradeStatus
from ..logging.config import get_state_logger

logger = get_state_logger(__name__)


class TradeStore:
    """Caches the signed-in user's trades."""

    def __init__(self, trades_api: TradesApi):
        self.api = trades_api
        self.logger = logger
        self.trades: list[Trade] = []
        self.loaded = False

    def refresh(self) -> list[Trade]:
        """Reload every trade from the backend."""
        self.trades = self.api.get_trades()
        self.loaded = True
        self.logger.debug("Trades refreshed", count=len(self.trades))
        return self.trades

    def _replace(self, trade: Trade) -> None:
        self.trades = [trade if t.id == trade.id else t for t in self.trades]

    def create_trade(self, data: Mapping[str, Any]) -> Trade:
        trade = self.api.create_trade(data)
        self.trades = [trade] + self.trades
        self.logger.info("Trade created", trade_id=trade.id, symbol=trade.symbol)
        return trade

    def close_trade(self, trade_id: str, data: Mapping[str, Any]) -> CloseTradeResult:
        """
        Close a trade and cache the closed version.

        Returns:
            The close result, including plan adherence and any rule breaches
        """
        result = self.api.close_trade(trade_id, data)
        self._replace(result.trade)
        self.logger.info(
            "Trade closed",
            trade_id=trade_id,
            result=result.trade.result.value if result.trade.result else None,
            rule_breaches=len(result.rule_breaches)
        )
        return result

    def update_trade(self, trade_id: str, data: Mapping[str, Any]) -> Trade:
        trade = self.api.update_trade(trade_id, data)
        self._replace(trade)
        self.logger.info("Trade updated", trade_id=trade_id)
        return trade

    def complete_trade(self, trade_id: str, data: Mapping[str, Any]) -> Trade:
        trade = self.api.complete_trade(trade_id, data)
        self._replace(trade)
        self.logger.info("Trade plan completed", trade_id=trade_id)
        return trade

    def delete_trade(self, trade_id: str) -> None:
        self.api.delete_trade(trade_id)
        self.trades = [t for t in self.trades if t.id != trade_id]
        self.logger.info("Trade deleted", trade_id=trade_id)

    def open_trades(self) -> list[Trade]:
        return [t for t in self.trades if t.status == TradeStatus.OPEN]

    def closed_trades(self) -> list[Trade]:
        return [t for t in self.trades if t.status == TradeStatus.CLOSED]

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        for trade in self.trades:
            if trade.id == trade_id:
                return trade
        return None
