"""Tests for informational risk nudges."""

from mindtrade_app.analysis.risk import (
    APPROACHING_LOSS_LIMIT,
    LOSING_TRADES_CLOSE,
    LOSING_TRADES_REACHED,
    LOSS_LIMIT_REACHED,
    TARGET_REACHED,
    calculate_account_risk_percent,
    calculate_actual_risk,
    check_daily_rule_conflicts,
    check_risk_mismatch,
)
from mindtrade_app.data.models import DailyRuleStatus, RuleStatus, TradingRule


def rule(rule_id, rule_type):
    return TradingRule(id=rule_id, type=rule_type, value=0, is_active=True, description="")


def status(rule_id, remaining, level, limit=1000.0):
    return DailyRuleStatus(
        rule_id=rule_id,
        current_value=limit - remaining,
        limit_value=limit,
        remaining_value=remaining,
        status=level,
    )


RULES = [
    rule("loss", "DAILY_LOSS"),
    rule("target", "DAILY_TARGET"),
    rule("losers", "MAX_LOSING_TRADES"),
]


class TestAccountRisk:
    """Test risk as a share of the account."""

    def test_percent(self):
        assert calculate_account_risk_percent(500, 100000) == 0.5

    def test_missing_account_size(self):
        assert calculate_account_risk_percent(500, None) is None
        assert calculate_account_risk_percent(500, 0) is None
        assert calculate_account_risk_percent(500, -10) is None


class TestDailyRuleConflicts:
    """Test nudge selection from today's rule status."""

    def test_risk_exceeds_remaining_loss(self):
        statuses = [status("loss", 300, RuleStatus.SAFE)]
        assert check_daily_rule_conflicts(400, statuses, RULES) == APPROACHING_LOSS_LIMIT

    def test_warning_loss(self):
        statuses = [status("loss", 150, RuleStatus.WARNING)]
        assert check_daily_rule_conflicts(100, statuses, RULES) == APPROACHING_LOSS_LIMIT

    def test_breached_loss(self):
        statuses = [status("loss", 0, RuleStatus.BREACHED)]
        assert check_daily_rule_conflicts(100, statuses, RULES) == LOSS_LIMIT_REACHED

    def test_target_reached(self):
        statuses = [status("loss", 900, RuleStatus.SAFE), status("target", 0, RuleStatus.BREACHED)]
        assert check_daily_rule_conflicts(100, statuses, RULES) == TARGET_REACHED

    def test_losing_trades(self):
        warning = [status("losers", 1, RuleStatus.WARNING, limit=3)]
        breached = [status("losers", 0, RuleStatus.BREACHED, limit=3)]

        assert check_daily_rule_conflicts(100, warning, RULES) == LOSING_TRADES_CLOSE
        assert check_daily_rule_conflicts(100, breached, RULES) == LOSING_TRADES_REACHED

    def test_nothing_to_say(self):
        statuses = [status("loss", 900, RuleStatus.SAFE), status("target", 500, RuleStatus.SAFE)]
        assert check_daily_rule_conflicts(100, statuses, RULES) is None

    def test_status_without_rule(self):
        statuses = [status("unknown", 0, RuleStatus.BREACHED)]
        assert check_daily_rule_conflicts(100, statuses, RULES) is None


class TestActualRisk:
    """Test stop-based risk and comfort mismatch."""

    def test_long_and_short(self):
        assert calculate_actual_risk(100, 95, 10) == 50
        assert calculate_actual_risk(95, 100, 10) == 50

    def test_missing_inputs(self):
        assert calculate_actual_risk(None, 95, 10) is None
        assert calculate_actual_risk(100, None, 10) is None
        assert calculate_actual_risk(100, 95, 0) is None
        assert calculate_actual_risk(100, 95, -5) is None

    def test_mismatch(self):
        assert check_risk_mismatch(600, 500) is True
        assert check_risk_mismatch(500, 500) is False
        assert check_risk_mismatch(None, 500) is False
