"""
Informational risk nudges shown while logging a trade.

Nothing here blocks an action; the backend enforces rules.
"""

from typing import Iterable, Optional

from ..data.models import DailyRuleStatus, RuleStatus, RuleType, TradingRule

APPROACHING_LOSS_LIMIT = "This trade may move you closer to your daily loss limit."
LOSS_LIMIT_REACHED = (
    "You have already reached your daily loss limit. "
    "Consider whether additional trades align with your plan."
)
TARGET_REACHED = (
    "You have already reached your daily target. "
    "Consider whether additional trades align with your plan."
)
LOSING_TRADES_CLOSE = "You are close to your losing trades limit for today."
LOSING_TRADES_REACHED = (
    "You have reached your losing trades limit for today. "
    "Consider whether additional trades align with your plan."
)


def calculate_account_risk_percent(
    risk_comfort: float,
    account_size: Optional[float]
) -> Optional[float]:
    """Risk as a percentage of the account, None without a usable account size."""
    if not account_size or account_size <= 0:
        return None
    return risk_comfort / account_size * 100


def _status_for(
    rule_type: RuleType,
    daily_status: Iterable[DailyRuleStatus],
    rules_by_id: dict[str, TradingRule]
) -> Optional[DailyRuleStatus]:
    for status in daily_status:
        rule = rules_by_id.get(status.rule_id)
        if rule is not None and rule.type == rule_type.value:
            return status
    return None


def check_daily_rule_conflicts(
    risk_comfort: float,
    daily_status: list[DailyRuleStatus],
    rules: Iterable[TradingRule]
) -> Optional[str]:
    """
    Describe how a new trade's risk relates to today's rule status.

    Returns:
        A nudge message, or None when nothing is worth mentioning
    """
    rules_by_id = {r.id: r for r in rules}

    loss = _status_for(RuleType.DAILY_LOSS, daily_status, rules_by_id)
    if loss is not None:
        if loss.remaining_value > 0 and risk_comfort > loss.remaining_value:
            return APPROACHING_LOSS_LIMIT
        if loss.status == RuleStatus.WARNING and risk_comfort > 0:
            return APPROACHING_LOSS_LIMIT
        if loss.status == RuleStatus.BREACHED:
            return LOSS_LIMIT_REACHED

    target = _status_for(RuleType.DAILY_TARGET, daily_status, rules_by_id)
    if target is not None and target.status == RuleStatus.BREACHED:
        return TARGET_REACHED

    losing = _status_for(RuleType.MAX_LOSING_TRADES, daily_status, rules_by_id)
    if losing is not None:
        if losing.status == RuleStatus.WARNING:
            return LOSING_TRADES_CLOSE
        if losing.status == RuleStatus.BREACHED:
            return LOSING_TRADES_REACHED

    return None


def calculate_actual_risk(
    entry_price: Optional[float],
    stop_price: Optional[float],
    quantity: Optional[float]
) -> Optional[float]:
    """Money at risk between entry and stop, None if any input is missing."""
    if not entry_price or not stop_price or not quantity or quantity <= 0:
        return None
    return abs(entry_price - stop_price) * quantity


def check_risk_mismatch(actual_risk: Optional[float], risk_comfort: float) -> bool:
    """True when the stop puts more at risk than the trader said they were comfortable with."""
    if actual_risk is None:
        return False
    return actual_risk > risk_comfort
