"""Tests for API payload parsing and request wire format."""

from datetime import datetime, timezone

import pytest

from mindtrade_app.data.models import (
    ExperienceLevel,
    ExitReason,
    InstrumentType,
    RuleType,
    TradeSide,
    TradeSource,
    TradingStyle,
    UserProfile,
    ValueType,
)
from mindtrade_app.data.parsers import (
    parse_import_result,
    parse_paginated_trades,
    parse_positions,
    parse_profile,
    parse_rule,
    parse_sync_result,
    parse_trade,
    parse_trades_metadata,
    to_camel,
    to_wire,
)
from mindtrade_app.errors import MalformedRecordError, MissingFieldError


class TestParseTrade:
    """Test trade payload mapping."""

    def test_closed_trade(self, trade_payload):
        trade = parse_trade(trade_payload(dataCompleteness={"hasPlannedRisk": True}))

        assert trade.id == "trade-1"
        assert trade.instrument_type == InstrumentType.STOCK
        assert trade.type == TradeSide.BUY
        assert trade.exit_reason == ExitReason.TARGET
        assert trade.source == TradeSource.MANUAL
        assert trade.closed_at == datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)
        assert trade.emotions == ("calm",)
        assert trade.is_closed is True
        assert trade.is_open is False
        assert trade.has_plan is True
        assert trade.data_completeness.has_planned_risk is True
        assert trade.data_completeness.has_declared_intent is False

    def test_numeric_strings_coerced(self, trade_payload):
        trade = parse_trade(trade_payload(entryPrice="101.5", quantity="3"))
        assert trade.entry_price == 101.5
        assert trade.quantity == 3.0

    def test_missing_fields(self, trade_payload):
        payload = trade_payload()
        del payload["symbol"]
        del payload["entryPrice"]

        with pytest.raises(MissingFieldError) as exc_info:
            parse_trade(payload)

        assert exc_info.value.missing_fields == ["symbol", "entryPrice"]

    def test_unknown_enum(self, trade_payload):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_trade(trade_payload(exitReason="boredom"))
        assert exc_info.value.field == "exitReason"

    def test_bad_number(self, trade_payload):
        with pytest.raises(MalformedRecordError):
            parse_trade(trade_payload(quantity="many"))

    def test_not_an_object(self):
        with pytest.raises(MalformedRecordError):
            parse_trade(["not", "a", "trade"])


class TestParseOtherRecords:
    """Test rule, profile and page mapping."""

    def test_rule(self):
        rule = parse_rule({
            "id": 7, "type": "DAILY_LOSS", "value": "2.5", "valueType": "PERCENTAGE",
            "isActive": False, "category": "RISK",
        })
        assert rule.id == "7"
        assert rule.type == RuleType.DAILY_LOSS.value
        assert rule.value == 2.5
        assert rule.value_type == ValueType.PERCENTAGE
        assert rule.is_active is False

    def test_unknown_rule_type_kept(self):
        rule = parse_rule({"id": "r", "type": "NEW_FANCY_RULE", "value": 1})
        assert rule.type == "NEW_FANCY_RULE"
        assert rule.is_active is True

    def test_profile_defaults(self):
        assert parse_profile({}) == UserProfile()
        assert parse_profile(None) == UserProfile()

    def test_profile_values(self):
        profile = parse_profile({
            "name": "Asha", "experienceLevel": "EXPERIENCED",
            "accountSize": 250000, "tradingStyle": "SWING", "email": "a@example.com",
        })
        assert profile.experience_level == ExperienceLevel.EXPERIENCED
        assert profile.account_size == 250000
        assert profile.trading_style == TradingStyle.SWING

    def test_paginated_requires_trades(self):
        with pytest.raises(MissingFieldError):
            parse_paginated_trades({"total": 0})

    def test_paginated_null_counts_use_defaults(self):
        page = parse_paginated_trades({"trades": [], "total": None, "page": None, "limit": "20"})
        assert (page.total, page.page, page.limit) == (0, 1, 20)

    def test_paginated_bad_count(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_paginated_trades({"trades": [], "total": "lots"})
        assert exc_info.value.field == "total"

    def test_position_without_symbol(self):
        with pytest.raises(MissingFieldError) as exc_info:
            parse_positions({"positions": [{"quantity": 5}]})
        assert exc_info.value.record_type == "BrokerPosition"
        assert exc_info.value.missing_fields == ["tradingsymbol"]

    def test_sync_and_metadata_counts(self):
        with pytest.raises(MalformedRecordError):
            parse_sync_result({"tradesCreated": [1]})
        with pytest.raises(MissingFieldError):
            parse_trades_metadata({"availableMonths": [{"year": 2024}]})
        assert parse_sync_result({"tradesClosed": None}).trades_closed == 0

    def test_import_result(self):
        result = parse_import_result({"importedExecutions": "3", "warnings": None})
        assert result.imported_executions == 3
        assert result.reconstructed_trades == 0
        assert result.warnings == []


class TestWireFormat:
    """Test request payload conversion."""

    def test_to_camel(self):
        assert to_camel("entry_price") == "entryPrice"
        assert to_camel("override_reason") == "overrideReason"
        assert to_camel("symbol") == "symbol"

    def test_to_wire(self):
        payload = to_wire({
            "instrument_type": InstrumentType.OPTIONS,
            "planned_stop": None,
            "emotions": ("calm",),
            "trade_data": {"exit_price": 10},
        })
        assert payload == {
            "instrumentType": "OPTIONS",
            "emotions": ["calm"],
            "tradeData": {"exitPrice": 10},
        }
