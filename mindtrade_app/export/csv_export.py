"""
CSV export of the filtered trade history.

Rows are written with the ``csv`` module using minimal quoting, so free-text
notes and multi-emotion lists cannot break the row layout.
"""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from ..api.trades import TradesApi
from ..data.models import Trade, TradeSource
from ..errors import NoTradesToExportError, PersistenceError
from ..logging.config import get_logger
from ..state.filters import FilterState, to_api_query
from ..utils.time import export_timestamp

logger = get_logger(__name__)

CSV_HEADERS = [
    "Date",
    "Time",
    "Symbol",
    "Instrument Type",
    "Option Type",
    "Trade Type",
    "Entry Price",
    "Exit Price",
    "Quantity",
    "P&L",
    "P&L %",
    "Result",
    "Confidence",
    "Exit Reason",
    "Emotions",
    "Source",
    "Notes",
]


def _plain_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _pnl_percent(trade: Trade) -> str:
    if not trade.profit_loss or not trade.entry_price or not trade.quantity:
        return ""
    percent = trade.profit_loss / (trade.entry_price * trade.quantity) * 100
    return f"{percent:.2f}%"


def trade_row(trade: Trade) -> list[str]:
    """CSV cells for one trade, in header order."""
    return [
        trade.trade_date,
        trade.trade_time,
        trade.symbol,
        trade.instrument_type.value,
        trade.option_type.value if trade.option_type else "",
        trade.type.value.upper(),
        _plain_number(trade.entry_price),
        _plain_number(trade.exit_price),
        _plain_number(trade.quantity),
        f"{trade.profit_loss:.2f}" if trade.profit_loss is not None else "",
        _pnl_percent(trade),
        trade.result.value.upper() if trade.result else "",
        str(trade.confidence),
        trade.exit_reason.value if trade.exit_reason else "",
        ", ".join(trade.emotions),
        trade.source.value if trade.source else TradeSource.MANUAL.value,
        trade.exit_note or "",
    ]


def generate_csv(trades: Iterable[Trade]) -> str:
    """Render trades as CSV text with a header row and ``\\n`` line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(trade_row(trade) for trade in trades)
    return buffer.getvalue().removesuffix("\n")


def export_filename(now: Optional[datetime] = None) -> str:
    return f"mindful-trader-export-{export_timestamp(now)}.csv"


def export_trades_to_csv(
    trades_api: TradesApi,
    filters: FilterState,
    directory: Union[str, Path] = ".",
    now: Optional[datetime] = None
) -> Path:
    """
    Export every closed trade matching the filters to a CSV file.

    Pagination is ignored; all matching trades are fetched in one request.

    Args:
        trades_api: Trades endpoint wrapper
        filters: Current history filters
        directory: Where to write the file
        now: Time used for the file name

    Returns:
        Path of the written file

    Raises:
        NoTradesToExportError: If no trade matches the filters
        PersistenceError: If the file cannot be written
    """
    trades = trades_api.export_all_trades(to_api_query(filters, include_pagination=False))
    if not trades:
        raise NoTradesToExportError()

    path = Path(directory).expanduser() / export_filename(now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generate_csv(trades), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(
            f"Failed to write export: {e}",
            operation="export",
            target=str(path)
        ) from e

    logger.info("Trades exported", count=len(trades), path=str(path))
    return path
