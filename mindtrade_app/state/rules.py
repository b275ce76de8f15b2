"""
Trading rules, the user profile and today's rule status.

The status computed here is for display only; the backend evaluates rules
authoritatively when trades are closed or orders placed.
"""

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from ..api.profile import ProfileApi
from ..api.rules import RulesApi
from ..config.defaults import RuleParams
from ..data.models import (
    DailyRuleStatus,
    RuleStatus,
    RuleType,
    Trade,
    TradeResult,
    TradingRule,
    UserProfile,
    ValueType,
)
from ..errors import ClientError, DataQualityError
from ..logging.config import get_state_logger
from ..utils.time import is_same_local_day
from .trades import TradeStore

logger = get_state_logger(__name__)


def rule_limit(rule: TradingRule, account_size: float) -> float:
    """Absolute limit of a money rule, resolving percentage values."""
    if rule.value_type == ValueType.PERCENTAGE:
        return account_size * rule.value / 100
    return rule.value


def _threshold_status(remaining: float, limit: float, warning_ratio: float) -> RuleStatus:
    if remaining == 0:
        return RuleStatus.BREACHED
    if remaining <= limit * warning_ratio:
        return RuleStatus.WARNING
    return RuleStatus.SAFE


def todays_closed_trades(trades: Iterable[Trade], now: Optional[datetime] = None) -> list[Trade]:
    """Closed trades whose close time falls on today's local date."""
    return [
        t for t in trades
        if t.closed_at is not None and is_same_local_day(t.closed_at, now)
    ]


def compute_daily_status(
    rules: Iterable[TradingRule],
    trades: Iterable[Trade],
    account_size: Optional[float] = None,
    now: Optional[datetime] = None,
    params: Optional[RuleParams] = None,
) -> list[DailyRuleStatus]:
    """
    Evaluate active rules against today's closed trades.

    Losses are measured by the risk the trader declared comfortable with
    (``risk_comfort``), profit by realised ``profit_loss``.

    Args:
        rules: All rules; inactive ones are skipped
        trades: Trades to consider, typically the whole cache
        account_size: Account size for percentage rules
        now: Reference time for "today"
        params: Warning thresholds and the fallback account size

    Returns:
        One status per active rule. ``remaining_value`` is never negative.
    """
    params = params or RuleParams()
    account_size = account_size or params.default_account_size

    today = todays_closed_trades(trades, now)
    losses = [t for t in today if t.result == TradeResult.LOSS]
    total_loss = sum(t.risk_comfort or 0 for t in losses)
    total_profit = sum(t.profit_loss for t in today if t.profit_loss is not None)

    statuses = []
    for rule in rules:
        if not rule.is_active:
            continue

        if rule.type == RuleType.DAILY_LOSS.value:
            limit = rule_limit(rule, account_size)
            remaining = max(0, limit - total_loss)
            status = DailyRuleStatus(
                rule_id=rule.id,
                current_value=total_loss,
                limit_value=limit,
                remaining_value=remaining,
                status=_threshold_status(remaining, limit, params.warning_ratio)
            )

        elif rule.type == RuleType.DAILY_TARGET.value:
            limit = rule_limit(rule, account_size)
            remaining = max(0, limit - total_profit)
            status = DailyRuleStatus(
                rule_id=rule.id,
                current_value=total_profit,
                limit_value=limit,
                remaining_value=remaining,
                status=_threshold_status(remaining, limit, params.warning_ratio)
            )

        elif rule.type == RuleType.MAX_LOSING_TRADES.value:
            remaining = max(0, rule.value - len(losses))
            if remaining == 0:
                level = RuleStatus.BREACHED
            elif remaining == params.losing_trades_warning_remaining:
                level = RuleStatus.WARNING
            else:
                level = RuleStatus.SAFE
            status = DailyRuleStatus(
                rule_id=rule.id,
                current_value=len(losses),
                limit_value=rule.value,
                remaining_value=remaining,
                status=level
            )

        else:
            status = DailyRuleStatus(
                rule_id=rule.id,
                current_value=0,
                limit_value=rule.value,
                remaining_value=max(0, rule.value),
                status=RuleStatus.SAFE
            )

        statuses.append(status)

    return statuses


class RulesStore:
    """Holds the user's rules and profile and derives today's rule status."""

    def __init__(
        self,
        rules_api: RulesApi,
        profile_api: ProfileApi,
        trade_store: TradeStore,
        config: Optional[RuleParams] = None
    ):
        self.rules_api = rules_api
        self.profile_api = profile_api
        self.trade_store = trade_store
        self.config = config or RuleParams()
        self.logger = logger

        self.rules: list[TradingRule] = []
        self.profile: Optional[UserProfile] = None

    def load(self) -> None:
        """Load profile and rules, as done on sign-in."""
        self.load_profile()
        self.load_rules()

    def load_profile(self) -> UserProfile:
        """
        Fetch the profile, falling back to defaults if the request fails.
        """
        try:
            self.profile = self.profile_api.get_profile()
        except (ClientError, DataQualityError) as e:
            self.logger.warning("Failed to load profile, using defaults", error=str(e))
            self.profile = UserProfile()
        return self.profile

    def update_profile(self, data: Mapping[str, Any]) -> UserProfile:
        self.profile = self.profile_api.update_profile(data)
        self.logger.info("Profile updated", fields=sorted(data))
        return self.profile

    def load_rules(self) -> list[TradingRule]:
        """Fetch rules; on failure the list is emptied and the error logged."""
        try:
            self.rules = self.rules_api.get_rules()
        except (ClientError, DataQualityError) as e:
            self.logger.warning("Failed to load rules", error=str(e))
            self.rules = []
        return self.rules

    def add_rule(self, data: Mapping[str, Any]) -> TradingRule:
        rule = self.rules_api.create_rule(data)
        self.rules = self.rules + [rule]
        self.logger.info("Rule added", rule_id=rule.id, rule_type=rule.type)
        return rule

    def update_rule(self, rule_id: str, data: Mapping[str, Any]) -> TradingRule:
        rule = self.rules_api.update_rule(rule_id, data)
        self.rules = [rule if r.id == rule_id else r for r in self.rules]
        self.logger.info("Rule updated", rule_id=rule_id)
        return rule

    def delete_rule(self, rule_id: str) -> None:
        self.rules_api.delete_rule(rule_id)
        self.rules = [r for r in self.rules if r.id != rule_id]
        self.logger.info("Rule deleted", rule_id=rule_id)

    def active_rules(self) -> list[TradingRule]:
        return [r for r in self.rules if r.is_active]

    @property
    def account_size(self) -> float:
        if self.profile and self.profile.account_size:
            return self.profile.account_size
        return self.config.default_account_size

    def daily_status(self, now: Optional[datetime] = None) -> list[DailyRuleStatus]:
        """Status of each active rule against today's cached trades."""
        return compute_daily_status(
            self.rules,
            self.trade_store.trades,
            account_size=self.account_size,
            now=now,
            params=self.config
        )
