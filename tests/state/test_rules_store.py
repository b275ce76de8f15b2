"""Tests for daily rule status and the rules store."""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from mindtrade_app.api.profile import ProfileApi
from mindtrade_app.api.rules import RulesApi
from mindtrade_app.config.defaults import RuleParams
from mindtrade_app.data.models import (
    RuleStatus,
    TradeResult,
    TradingRule,
    UserProfile,
    ValueType,
)
from mindtrade_app.data.parsers import parse_trade
from mindtrade_app.errors import ApiRequestError, NetworkError
from mindtrade_app.state.rules import RulesStore, compute_daily_status
from mindtrade_app.state.trades import TradeStore

# Local noon, so "an hour ago" is always the same local day
NOW = datetime(2024, 3, 1, 12, 0).astimezone()


def rule(rule_type, value, value_type=ValueType.ABSOLUTE, active=True, rule_id=None):
    return TradingRule(
        id=rule_id or rule_type.lower(),
        type=rule_type,
        value=value,
        is_active=active,
        description="",
        value_type=value_type,
    )


@pytest.fixture
def make_trade(trade_payload):
    """Closed trade an hour before NOW, as a loss unless overridden."""

    def make(risk_comfort=100.0, profit_loss=-50.0, result="loss", closed_at=None, **kw):
        trade = parse_trade(trade_payload(
            riskComfort=risk_comfort, profitLoss=profit_loss, result=result, **kw
        ))
        return trade.with_changes(closed_at=closed_at or NOW - timedelta(hours=1))

    return make


class TestDailyLoss:
    """Test DAILY_LOSS status."""

    def test_safe(self, make_trade):
        trades = [make_trade(risk_comfort=300), make_trade(risk_comfort=200)]

        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], trades, now=NOW)

        assert status.current_value == 500
        assert status.limit_value == 1000
        assert status.remaining_value == 500
        assert status.status == RuleStatus.SAFE

    def test_warning_at_twenty_percent(self, make_trade):
        trades = [make_trade(risk_comfort=800)]

        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], trades, now=NOW)

        assert status.remaining_value == 200
        assert status.status == RuleStatus.WARNING

    def test_breached_never_negative(self, make_trade):
        trades = [make_trade(risk_comfort=900), make_trade(risk_comfort=600)]

        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], trades, now=NOW)

        assert status.current_value == 1500
        assert status.remaining_value == 0
        assert status.status == RuleStatus.BREACHED

    def test_wins_do_not_count(self, make_trade):
        trades = [make_trade(risk_comfort=900, profit_loss=200, result="win")]

        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], trades, now=NOW)

        assert status.current_value == 0

    def test_percentage_of_account(self, make_trade):
        [status] = compute_daily_status(
            [rule("DAILY_LOSS", 2, ValueType.PERCENTAGE)], [], account_size=50000, now=NOW
        )
        assert status.limit_value == 1000

    def test_percentage_defaults_account_size(self):
        [status] = compute_daily_status(
            [rule("DAILY_LOSS", 1, ValueType.PERCENTAGE)], [], account_size=None, now=NOW
        )
        assert status.limit_value == 1000

    def test_only_today_counts(self, make_trade):
        trades = [
            make_trade(risk_comfort=400),
            make_trade(risk_comfort=700, closed_at=NOW - timedelta(days=1)),
        ]

        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], trades, now=NOW)

        assert status.current_value == 400


class TestDailyTarget:
    """Test DAILY_TARGET status."""

    def test_sums_profit_and_loss(self, make_trade):
        trades = [
            make_trade(profit_loss=300, result="win"),
            make_trade(profit_loss=-100, result="loss"),
        ]

        [status] = compute_daily_status([rule("DAILY_TARGET", 1000)], trades, now=NOW)

        assert status.current_value == 200
        assert status.remaining_value == 800
        assert status.status == RuleStatus.SAFE

    def test_target_reached(self, make_trade):
        trades = [make_trade(profit_loss=1200, result="win")]

        [status] = compute_daily_status([rule("DAILY_TARGET", 1000)], trades, now=NOW)

        assert status.remaining_value == 0
        assert status.status == RuleStatus.BREACHED


class TestMaxLosingTrades:
    """Test MAX_LOSING_TRADES status."""

    @pytest.mark.parametrize("losses,remaining,expected", [
        (0, 3, RuleStatus.SAFE),
        (1, 2, RuleStatus.SAFE),
        (2, 1, RuleStatus.WARNING),
        (3, 0, RuleStatus.BREACHED),
        (5, 0, RuleStatus.BREACHED),
    ])
    def test_thresholds(self, make_trade, losses, remaining, expected):
        trades = [make_trade() for _ in range(losses)]

        [status] = compute_daily_status([rule("MAX_LOSING_TRADES", 3)], trades, now=NOW)

        assert status.current_value == losses
        assert status.remaining_value == remaining
        assert status.status == expected


class TestOtherRules:
    """Test rules without client-side tracking."""

    def test_untracked_rule_is_safe(self, make_trade):
        [status] = compute_daily_status(
            [rule("MAX_TRADES_PER_DAY", 5)], [make_trade()], now=NOW
        )
        assert status.current_value == 0
        assert status.limit_value == 5
        assert status.remaining_value == 5
        assert status.status == RuleStatus.SAFE

    def test_inactive_rules_skipped(self):
        statuses = compute_daily_status(
            [rule("DAILY_LOSS", 1000, active=False), rule("DAILY_TARGET", 500)], [], now=NOW
        )
        assert [s.rule_id for s in statuses] == ["daily_target"]

    def test_open_trades_ignored(self, make_trade):
        open_trade = make_trade(risk_comfort=999).with_changes(closed_at=None, result=TradeResult.LOSS)
        [status] = compute_daily_status([rule("DAILY_LOSS", 1000)], [open_trade], now=NOW)
        assert status.current_value == 0

    def test_remaining_never_negative(self, make_trade):
        """Test remaining across a spread of limits and losses."""
        for limit in (-2, 0, 1, 250, 1000):
            for risk in (0, 100, 999, 5000):
                statuses = compute_daily_status(
                    [rule("DAILY_LOSS", limit), rule("DAILY_TARGET", limit),
                     rule("MAX_LOSING_TRADES", limit), rule("MAX_TRADES_PER_DAY", limit)],
                    [make_trade(risk_comfort=risk, profit_loss=risk, result="loss")],
                    now=NOW,
                )
                assert all(s.remaining_value >= 0 for s in statuses)

    def test_untracked_rule_with_negative_value(self):
        [status] = compute_daily_status([rule("MAX_TRADES_PER_DAY", -2)], [], now=NOW)

        assert status.remaining_value == 0
        assert status.limit_value == -2
        assert status.status == RuleStatus.SAFE

    def test_custom_warning_ratio(self, make_trade):
        params = RuleParams(warning_ratio=0.5)
        [status] = compute_daily_status(
            [rule("DAILY_LOSS", 1000)], [make_trade(risk_comfort=600)], now=NOW, params=params
        )
        assert status.status == RuleStatus.WARNING


class TestRulesStore:
    """Test loading and mutating rules and profile."""

    def setup_method(self):
        self.rules_api = Mock(spec=RulesApi)
        self.profile_api = Mock(spec=ProfileApi)
        self.trade_store = Mock(spec=TradeStore)
        self.trade_store.trades = []
        self.store = RulesStore(self.rules_api, self.profile_api, self.trade_store)

    def test_profile_falls_back_to_defaults(self):
        self.profile_api.get_profile.side_effect = NetworkError("down")

        profile = self.store.load_profile()

        assert profile == UserProfile()
        assert profile.account_size == 100000.0

    def test_rules_empty_on_failure(self):
        self.store.rules = [rule("DAILY_LOSS", 1)]
        self.rules_api.get_rules.side_effect = ApiRequestError("boom", status_code=500)

        assert self.store.load_rules() == []

    def test_mutations_propagate_errors(self):
        self.rules_api.create_rule.side_effect = ApiRequestError("invalid", status_code=400)

        with pytest.raises(ApiRequestError):
            self.store.add_rule({"type": "DAILY_LOSS", "value": 2})

        assert self.store.rules == []

    def test_add_update_delete(self):
        self.rules_api.create_rule.return_value = rule("DAILY_LOSS", 1000, rule_id="r1")
        self.rules_api.update_rule.return_value = rule("DAILY_LOSS", 1500, rule_id="r1")

        self.store.add_rule({"type": "DAILY_LOSS", "value": 1000})
        self.store.update_rule("r1", {"value": 1500})
        assert self.store.rules[0].value == 1500

        self.store.delete_rule("r1")
        assert self.store.rules == []

    def test_daily_status_uses_profile_account(self, make_trade):
        self.profile_api.get_profile.return_value = UserProfile(account_size=20000)
        self.rules_api.get_rules.return_value = [rule("DAILY_LOSS", 5, ValueType.PERCENTAGE)]
        self.trade_store.trades = [make_trade(risk_comfort=900)]

        self.store.load()
        [status] = self.store.daily_status(now=NOW)

        assert status.limit_value == 1000
        assert status.remaining_value == 100
        assert status.status == RuleStatus.WARNING

    def test_active_rules(self):
        self.store.rules = [rule("DAILY_LOSS", 1000), rule("DAILY_TARGET", 500, active=False)]

        assert [r.type for r in self.store.active_rules()] == ["DAILY_LOSS"]
