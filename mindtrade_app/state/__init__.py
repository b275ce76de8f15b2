"""
Client-side state: cached trades, rules and profile, history filters and
saved filter presets.
"""

from .filters import FilterState, parse_filters, update_filters
from .presets import FilterPreset, FilterPresetStore
from .rules import RulesStore, compute_daily_status
from .trades import TradeStore

__all__ = [
    "FilterState",
    "parse_filters",
    "update_filters",
    "FilterPreset",
    "FilterPresetStore",
    "RulesStore",
    "compute_daily_status",
    "TradeStore",
]
