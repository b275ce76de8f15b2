"""
Parsers converting backend JSON payloads into client records.

Wire payloads use camelCase keys and ISO8601 date strings. Unknown keys are
ignored; missing required keys and badly typed values raise data quality
errors so callers can decide whether to skip the record or fail.
"""

import re
from enum import Enum
from typing import Any, Optional, TypeVar, Union

from ..errors import MalformedRecordError, MissingFieldError
from ..utils.time import parse_timestamp
from .models import (
    BrokerConnectionStatus,
    BrokerMargins,
    BrokerPosition,
    CloseTradeResult,
    CoachMessage,
    CoachStatus,
    DataCompleteness,
    ExitReason,
    ExperienceLevel,
    ImportResult,
    InstrumentType,
    MonthTrades,
    OptionType,
    PaginatedTrades,
    PlaceOrderResult,
    PlanAdherence,
    PreOrderValidation,
    RuleBreach,
    RuleCategory,
    RuleViolation,
    SyncResult,
    Trade,
    TradeResult,
    TradesMetadata,
    TradeSide,
    TradeSource,
    TradeStatus,
    TradingRule,
    TradingStyle,
    UserProfile,
    ValueType,
)

E = TypeVar("E", bound=Enum)

Number = Union[int, float]

_CAMEL_BOUNDARY = re.compile(r"_([a-z0-9])")


def to_camel(name: str) -> str:
    """Convert a snake_case field name to the backend's camelCase."""
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def to_wire(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a request payload to wire format.

    Keys become camelCase, ``None`` values are dropped, enums become their
    values and tuples become lists. Nested dicts are converted recursively.
    """
    wire: dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            continue
        wire[to_camel(key)] = _wire_value(value)
    return wire


def _wire_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return to_wire(value)
    if isinstance(value, (list, tuple)):
        return [_wire_value(item) for item in value]
    return value


def _require(payload: dict[str, Any], record_type: str, *fields: str) -> None:
    if not isinstance(payload, dict):
        raise MalformedRecordError(
            f"{record_type} payload must be an object",
            field=record_type,
            raw_value=payload,
            expected_format="object"
        )
    missing = [f for f in fields if payload.get(f) is None]
    if missing:
        raise MissingFieldError(
            f"{record_type} is missing required fields: {', '.join(missing)}",
            record_type=record_type,
            missing_fields=missing
        )


def _number(value: Any, field: str) -> Optional[Number]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise MalformedRecordError(
            f"{field} must be numeric", field=field, raw_value=value, expected_format="number"
        )
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(
            f"{field} must be numeric", field=field, raw_value=value, expected_format="number"
        ) from None


def _count(payload: dict[str, Any], field: str, default: int = 0) -> int:
    value = _number(payload.get(field), field)
    return default if value is None else int(value)


def _enum(enum_cls: type[E], value: Any, field: str) -> Optional[E]:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise MalformedRecordError(
            f"{field} has unsupported value {value!r}",
            field=field,
            raw_value=value,
            expected_format="|".join(m.value for m in enum_cls)
        ) from None


def _timestamp(value: Any, field: str):
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(
            f"{field} is not an ISO8601 timestamp",
            field=field,
            raw_value=value,
            expected_format="ISO8601"
        ) from None


def parse_trade(payload: dict[str, Any]) -> Trade:
    """Parse a ``TradeResponse`` payload."""
    _require(
        payload, "Trade",
        "id", "instrumentType", "symbol", "tradeDate", "tradeTime", "type",
        "quantity", "entryPrice", "status", "createdAt",
    )

    completeness = payload.get("dataCompleteness")
    return Trade(
        id=str(payload["id"]),
        instrument_type=_enum(InstrumentType, payload["instrumentType"], "instrumentType"),
        symbol=payload["symbol"],
        trade_date=payload["tradeDate"],
        trade_time=payload["tradeTime"],
        type=_enum(TradeSide, payload["type"], "type"),
        quantity=_number(payload["quantity"], "quantity"),
        entry_price=_number(payload["entryPrice"], "entryPrice"),
        confidence=int(_number(payload.get("confidence"), "confidence") or 0),
        risk_comfort=_number(payload.get("riskComfort"), "riskComfort") or 0,
        status=_enum(TradeStatus, payload["status"], "status"),
        created_at=_timestamp(payload["createdAt"], "createdAt"),
        option_type=_enum(OptionType, payload.get("optionType"), "optionType"),
        planned_stop=_number(payload.get("plannedStop"), "plannedStop"),
        planned_target=_number(payload.get("plannedTarget"), "plannedTarget"),
        reason=payload.get("reason"),
        exit_reason=_enum(ExitReason, payload.get("exitReason"), "exitReason"),
        exit_price=_number(payload.get("exitPrice"), "exitPrice"),
        profit_loss=_number(payload.get("profitLoss"), "profitLoss"),
        exit_note=payload.get("exitNote"),
        result=_enum(TradeResult, payload.get("result"), "result"),
        closed_at=_timestamp(payload.get("closedAt"), "closedAt"),
        emotions=tuple(payload.get("emotions") or ()),
        source=_enum(TradeSource, payload.get("source"), "source"),
        data_completeness=DataCompleteness(
            has_planned_risk=bool(completeness.get("hasPlannedRisk")),
            has_declared_intent=bool(completeness.get("hasDeclaredIntent")),
        ) if isinstance(completeness, dict) else None,
    )


def parse_trades(payloads: list[dict[str, Any]]) -> list[Trade]:
    """Parse a list of trade payloads."""
    return [parse_trade(p) for p in payloads or []]


def parse_close_trade_result(payload: dict[str, Any]) -> CloseTradeResult:
    """Parse a ``CloseTradeResponse``: the trade plus plan/rule verdicts."""
    breaches = tuple(
        RuleBreach(
            rule_id=str(b.get("ruleId", "")),
            rule_type=b.get("ruleType", ""),
            message=b.get("message", ""),
        )
        for b in payload.get("ruleBreaches") or []
    )
    return CloseTradeResult(
        trade=parse_trade(payload),
        plan_adherence=_enum(PlanAdherence, payload.get("planAdherence"), "planAdherence"),
        rule_breaches=breaches,
        nudge_message=payload.get("nudgeMessage"),
    )


def parse_paginated_trades(payload: dict[str, Any]) -> PaginatedTrades:
    """Parse a ``closed-paginated`` response."""
    _require(payload, "PaginatedTrades", "trades")
    return PaginatedTrades(
        trades=parse_trades(payload["trades"]),
        total=_count(payload, "total"),
        page=_count(payload, "page", 1),
        limit=_count(payload, "limit"),
        has_more=bool(payload.get("hasMore", False)),
    )


def parse_month_trades(payload: dict[str, Any]) -> MonthTrades:
    """Parse a ``calendar-month`` response."""
    _require(payload, "MonthTrades", "trades")
    return MonthTrades(
        trades=parse_trades(payload["trades"]),
        month_total=_number(payload.get("monthTotal"), "monthTotal") or 0,
        win_count=_count(payload, "winCount"),
        loss_count=_count(payload, "lossCount"),
    )


def _year_month(payload: dict[str, Any]) -> tuple[int, int]:
    _require(payload, "AvailableMonth", "year", "month")
    return _count(payload, "year"), _count(payload, "month")


def parse_trades_metadata(payload: dict[str, Any]) -> TradesMetadata:
    """Parse a ``/trades/metadata`` response."""
    _require(payload, "TradesMetadata")
    return TradesMetadata(
        total_trades=_count(payload, "totalTrades"),
        first_trade_date=payload.get("firstTradeDate"),
        last_trade_date=payload.get("lastTradeDate"),
        available_months=[_year_month(m) for m in payload.get("availableMonths") or []],
    )


def parse_rule(payload: dict[str, Any]) -> TradingRule:
    """Parse a ``RuleResponse`` payload."""
    _require(payload, "TradingRule", "id", "type", "value")
    return TradingRule(
        id=str(payload["id"]),
        type=payload["type"],
        value=_number(payload["value"], "value"),
        is_active=bool(payload.get("isActive", True)),
        description=payload.get("description") or "",
        category=_enum(RuleCategory, payload.get("category"), "category"),
        value_type=_enum(ValueType, payload.get("valueType"), "valueType"),
        is_custom=bool(payload.get("isCustom", False)),
        custom_name=payload.get("customName"),
        disabled_until=_timestamp(payload.get("disabledUntil"), "disabledUntil"),
        disable_reason=payload.get("disableReason"),
    )


def parse_profile(payload: dict[str, Any]) -> UserProfile:
    """
    Parse a ``UserProfileResponse``.

    Missing or empty fields fall back to the default profile values.
    """
    defaults = UserProfile()
    payload = payload or {}
    return UserProfile(
        name=payload.get("name") or defaults.name,
        experience_level=_enum(
            ExperienceLevel, payload.get("experienceLevel"), "experienceLevel"
        ) or defaults.experience_level,
        account_size=_number(payload.get("accountSize"), "accountSize") or defaults.account_size,
        trading_style=_enum(
            TradingStyle, payload.get("tradingStyle"), "tradingStyle"
        ) or defaults.trading_style,
        email=payload.get("email"),
    )


def parse_coach_status(payload: dict[str, Any]) -> CoachStatus:
    """Parse the coach rate-limit status."""
    _require(payload, "CoachStatus", "allowed", "remaining", "limit")
    return CoachStatus(
        allowed=bool(payload["allowed"]),
        remaining=int(payload["remaining"]),
        limit=int(payload["limit"]),
    )


def parse_coach_history(payload: dict[str, Any]) -> list[CoachMessage]:
    """Parse the coach conversation history."""
    messages = (payload or {}).get("messages") or []
    return [
        CoachMessage(
            role=m.get("role", "assistant"),
            content=m.get("content", ""),
            timestamp=_timestamp(m.get("timestamp"), "timestamp"),
        )
        for m in messages
    ]


def parse_broker_status(payload: dict[str, Any]) -> BrokerConnectionStatus:
    """Parse a broker connection status with optional margins."""
    margins = payload.get("margins")
    return BrokerConnectionStatus(
        connected=bool(payload.get("connected", False)),
        market_open=bool(payload.get("marketOpen", False)),
        broker=payload.get("broker"),
        user_id=payload.get("userId"),
        connected_at=_timestamp(payload.get("connectedAt"), "connectedAt"),
        expires_at=_timestamp(payload.get("expiresAt"), "expiresAt"),
        margins=parse_margins(margins) if isinstance(margins, dict) else None,
    )


def parse_margins(payload: dict[str, Any]) -> BrokerMargins:
    return BrokerMargins(
        available=_number(payload.get("available"), "available") or 0,
        used=_number(payload.get("used"), "used") or 0,
        total=_number(payload.get("total"), "total") or 0,
    )


def parse_positions(payload: dict[str, Any]) -> list[BrokerPosition]:
    """Parse the broker positions list."""
    positions = []
    for p in (payload or {}).get("positions") or []:
        _require(p, "BrokerPosition", "tradingsymbol")
        positions.append(BrokerPosition(
            tradingsymbol=p["tradingsymbol"],
            exchange=p.get("exchange", ""),
            product=p.get("product", ""),
            quantity=_number(p.get("quantity"), "quantity") or 0,
            average_price=_number(p.get("averagePrice"), "averagePrice") or 0,
            last_price=_number(p.get("lastPrice"), "lastPrice") or 0,
            pnl=_number(p.get("pnl"), "pnl") or 0,
            value=_number(p.get("value"), "value") or 0,
        ))
    return positions


def parse_sync_result(payload: dict[str, Any]) -> SyncResult:
    """Parse a position sync summary."""
    _require(payload, "SyncResult")
    return SyncResult(
        positions_matched=_count(payload, "positionsMatched"),
        trades_created=_count(payload, "tradesCreated"),
        trades_updated=_count(payload, "tradesUpdated"),
        trades_closed=_count(payload, "tradesClosed"),
        errors=list(payload.get("errors") or []),
    )


def parse_place_order_result(payload: dict[str, Any]) -> PlaceOrderResult:
    """Parse a place-order response including any pre-order validation."""
    validation = payload.get("validation")
    parsed_validation = None
    if isinstance(validation, dict):
        parsed_validation = PreOrderValidation(
            outcome=validation.get("outcome", "PASS"),
            violations=[
                RuleViolation(
                    rule_id=str(v.get("ruleId", "")),
                    rule_type=v.get("ruleType", ""),
                    outcome=v.get("outcome", "PASS"),
                    message=v.get("message", ""),
                    current_value=_number(v.get("currentValue"), "currentValue") or 0,
                    limit_value=_number(v.get("limitValue"), "limitValue") or 0,
                    suggested_action=v.get("suggestedAction"),
                )
                for v in validation.get("violations") or []
            ],
            can_proceed=bool(validation.get("canProceed", False)),
            requires_override=bool(validation.get("requiresOverride", False)),
        )

    return PlaceOrderResult(
        requires_override=bool(payload.get("requiresOverride", False)),
        validation=parsed_validation,
        trade=payload.get("trade"),
        error=payload.get("error"),
    )


def parse_import_result(payload: dict[str, Any]) -> ImportResult:
    """Parse a tradebook import summary."""
    _require(payload, "ImportResult")
    return ImportResult(
        imported_executions=_count(payload, "importedExecutions"),
        reconstructed_trades=_count(payload, "reconstructedTrades"),
        skipped_rows=_count(payload, "skippedRows"),
        warnings=[str(w) for w in payload.get("warnings") or []],
    )
