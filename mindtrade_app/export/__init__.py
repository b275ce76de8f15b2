"""Trade history export."""

from .csv_export import export_trades_to_csv, generate_csv

__all__ = ["export_trades_to_csv", "generate_csv"]
