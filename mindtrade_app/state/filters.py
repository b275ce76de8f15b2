"""
History filter state and its query-string representation.

The query string is the source of truth for history filters, so a filter
view can be bookmarked or shared. Only non-default values are written;
anything unparsable in an incoming query is ignored and the default kept.
"""

import math
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

from ..utils.time import format_date_param, parse_date

SORT_FIELDS = ("closedAt", "profitLoss", "symbol")
SORT_ORDERS = ("asc", "desc")
VIEWS = ("list", "grid", "calendar")
RESULTS = ("win", "loss", "all")

# FilterState field -> query parameter name
QUERY_KEYS = {
    "date_from": "dateFrom",
    "date_to": "dateTo",
    "symbol": "symbol",
    "result": "result",
    "instrument_types": "instrumentTypes",
    "exit_reasons": "exitReasons",
    "emotions": "emotions",
    "sources": "sources",
    "min_pnl": "minPnL",
    "max_pnl": "maxPnL",
    "page": "page",
    "limit": "limit",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
    "view": "view",
}

LIST_FIELDS = ("instrument_types", "exit_reasons", "emotions", "sources")


@dataclass(frozen=True)
class FilterState:
    """Filters, sorting, pagination and view mode for the trade history."""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    symbol: Optional[str] = None
    result: str = "all"
    instrument_types: tuple[str, ...] = ()
    exit_reasons: tuple[str, ...] = ()
    emotions: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    min_pnl: Optional[float] = None
    max_pnl: Optional[float] = None
    page: int = 1
    limit: int = 20
    sort_by: str = "closedAt"
    sort_order: str = "desc"
    view: str = "list"


DEFAULT_FILTERS = FilterState()


@dataclass(frozen=True)
class FilterValidationError:
    field: str
    message: str


QueryInput = Union[str, Mapping[str, Any], None]


def _query_items(query: QueryInput) -> dict[str, str]:
    """Normalize a query string or mapping to ``{key: last value}``."""
    if query is None:
        return {}
    if isinstance(query, str):
        return dict(parse_qsl(query.lstrip("?"), keep_blank_values=True))

    items = {}
    for key, value in query.items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[-1]
        if value is None:
            continue
        items[key] = str(value)
    return items


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_positive_int(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 1 else None


def _parse_query_date(raw: str) -> Optional[date]:
    try:
        return parse_date(raw)
    except ValueError:
        return None


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(item for item in raw.split(",") if item)


def parse_filters(query: QueryInput) -> FilterState:
    """
    Parse filter state from a query string or mapping.

    Unknown keys, invalid enum values and unparsable numbers or dates are
    ignored and leave the default in place.
    """
    items = _query_items(query)
    parsed: dict[str, Any] = {}

    for name in ("date_from", "date_to"):
        raw = items.get(QUERY_KEYS[name])
        if raw:
            value = _parse_query_date(raw)
            if value is not None:
                parsed[name] = value

    symbol = items.get("symbol")
    if symbol:
        parsed["symbol"] = symbol

    result = items.get("result")
    if result in RESULTS:
        parsed["result"] = result

    for name in LIST_FIELDS:
        raw = items.get(QUERY_KEYS[name])
        if raw:
            values = _split_list(raw)
            if values:
                parsed[name] = values

    for name in ("min_pnl", "max_pnl"):
        raw = items.get(QUERY_KEYS[name])
        if raw:
            value = _parse_float(raw)
            if value is not None:
                parsed[name] = value

    for name in ("page", "limit"):
        raw = items.get(QUERY_KEYS[name])
        if raw:
            value = _parse_positive_int(raw)
            if value is not None:
                parsed[name] = value

    sort_by = items.get("sortBy")
    if sort_by in SORT_FIELDS:
        parsed["sort_by"] = sort_by

    sort_order = items.get("sortOrder")
    if sort_order in SORT_ORDERS:
        parsed["sort_order"] = sort_order

    view = items.get("view")
    if view in VIEWS:
        parsed["view"] = view

    return replace(DEFAULT_FILTERS, **parsed)


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _serialize_value(value: Any) -> Optional[str]:
    """Query representation of a value, or None if it should be removed."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return format_date_param(value)
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
        if any("," in item for item in items):
            raise ValueError(f"List filter values cannot contain commas: {items}")
        return ",".join(items) if items else None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    return str(value)


def _encode(items: Mapping[str, str]) -> str:
    return urlencode(list(items.items()), safe=",")


def update_filters(query: QueryInput, **partial: Any) -> str:
    """
    Apply filter changes to a query string.

    Args:
        query: Current query string or mapping
        **partial: FilterState field names with their new values

    Returns:
        The new query string. Values that are empty or equal to the default
        are removed. Unless ``page`` is among the changes, the page resets.

    Raises:
        TypeError: If a key is not a FilterState field
        ValueError: If a list value has an item containing a comma
    """
    items = _query_items(query)

    for name, value in partial.items():
        if name not in QUERY_KEYS:
            raise TypeError(f"Unknown filter field: {name}")
        key = QUERY_KEYS[name]

        default = getattr(DEFAULT_FILTERS, name)
        if isinstance(value, list):
            value = tuple(value)
        serialized = _serialize_value(value)

        if serialized is None or value == default:
            items.pop(key, None)
        else:
            items[key] = serialized

    if "page" not in partial:
        items.pop("page", None)

    return _encode(items)


def to_query(state: FilterState) -> str:
    """Serialize a complete filter state, writing only non-default values."""
    values = {f.name: getattr(state, f.name) for f in fields(FilterState)}
    return update_filters("", **values)


def clear_filters(query: QueryInput) -> str:
    """Drop every filter but keep the current view mode."""
    current = parse_filters(query)
    return _encode({"view": current.view})


def update_page(query: QueryInput, page: int) -> str:
    return update_filters(query, page=page)


def set_view(query: QueryInput, view: str) -> str:
    """
    Raises:
        ValueError: If the view is not list, grid or calendar
    """
    if view not in VIEWS:
        raise ValueError(f"Unsupported view: {view}")
    return update_filters(query, view=view)


def preset_values(state: FilterState) -> dict[str, Any]:
    """Filter fields worth saving in a preset: everything except page and view."""
    return {
        f.name: getattr(state, f.name)
        for f in fields(FilterState)
        if f.name not in ("page", "view")
    }


def apply_preset(query: QueryInput, preset_state: FilterState) -> str:
    """Overlay a preset's filters on the current query, keeping the view."""
    return update_filters(query, **preset_values(preset_state))


def validate_filters(state: FilterState) -> list[FilterValidationError]:
    """Check cross-field constraints on a filter state."""
    errors = []

    if state.date_from and state.date_to and state.date_from > state.date_to:
        errors.append(FilterValidationError(
            field="dateRange",
            message="Start date must be before end date"
        ))

    if (
        state.min_pnl is not None
        and state.max_pnl is not None
        and state.min_pnl > state.max_pnl
    ):
        errors.append(FilterValidationError(
            field="pnlRange",
            message="Minimum P&L must be less than maximum P&L"
        ))

    return errors


def active_filter_count(state: FilterState) -> int:
    """Number of active filters, not counting pagination, sorting or view."""
    count = 0
    if state.date_from:
        count += 1
    if state.date_to:
        count += 1
    if state.symbol:
        count += 1
    if state.result and state.result != "all":
        count += 1
    for name in LIST_FIELDS:
        if getattr(state, name):
            count += 1
    if state.min_pnl is not None:
        count += 1
    if state.max_pnl is not None:
        count += 1
    return count


def has_filters(state: FilterState) -> bool:
    return active_filter_count(state) > 0


def to_api_query(state: FilterState, include_pagination: bool = True) -> dict[str, Any]:
    """
    Map filter state to ``/trades/closed-paginated`` parameters.

    Returns:
        Wire-format parameters; unset filters are None so the encoder drops them
    """
    query: dict[str, Any] = {
        "sortBy": state.sort_by,
        "sortOrder": state.sort_order,
        "dateFrom": format_date_param(state.date_from) if state.date_from else None,
        "dateTo": format_date_param(state.date_to) if state.date_to else None,
        "symbol": state.symbol or None,
        "result": None if state.result == "all" else state.result,
        "instrumentTypes": list(state.instrument_types) or None,
        "exitReasons": list(state.exit_reasons) or None,
        "emotions": list(state.emotions) or None,
        "sources": list(state.sources) or None,
        "minPnL": state.min_pnl,
        "maxPnL": state.max_pnl,
    }
    if include_pagination:
        query["skip"] = (state.page - 1) * state.limit
        query["limit"] = state.limit
    return query
