"""
Client-side records mirrored from backend API responses.

The backend is the source of truth; these are plain snapshots with dates
already parsed. Field names are snake_case versions of the wire names.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class InstrumentType(str, Enum):
    STOCK = "STOCK"
    FUTURES = "FUTURES"
    OPTIONS = "OPTIONS"


class OptionType(str, Enum):
    PUT = "PUT"
    CALL = "CALL"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ExitReason(str, Enum):
    TARGET = "target"
    STOP = "stop"
    FEAR = "fear"
    UNSURE = "unsure"
    IMPULSE = "impulse"


class TradeResult(str, Enum):
    WIN = "win"
    LOSS = "loss"


class TradeSource(str, Enum):
    MANUAL = "MANUAL"
    MANUAL_BROKER = "MANUAL_BROKER"
    BROKER_EXTERNAL = "BROKER_EXTERNAL"
    IMPORTED = "IMPORTED"


class RuleType(str, Enum):
    """Trading rule types, grouped by category."""
    # Risk management
    DAILY_LOSS = "DAILY_LOSS"
    WEEKLY_LOSS = "WEEKLY_LOSS"
    MAX_POSITION_SIZE = "MAX_POSITION_SIZE"
    MAX_OPEN_POSITIONS = "MAX_OPEN_POSITIONS"
    DAILY_TARGET = "DAILY_TARGET"
    # Discipline
    MAX_TRADES_PER_DAY = "MAX_TRADES_PER_DAY"
    MAX_LOSING_TRADES = "MAX_LOSING_TRADES"
    STOP_AFTER_TARGET = "STOP_AFTER_TARGET"
    STOP_AFTER_LOSS = "STOP_AFTER_LOSS"
    NO_AVERAGING_DOWN = "NO_AVERAGING_DOWN"
    MIN_RR_RATIO = "MIN_RR_RATIO"
    # Timing
    NO_TRADING_BEFORE = "NO_TRADING_BEFORE"
    NO_TRADING_AFTER = "NO_TRADING_AFTER"
    COOLING_OFF_PERIOD = "COOLING_OFF_PERIOD"
    # Psychology
    STOP_AFTER_CONSECUTIVE_LOSSES = "STOP_AFTER_CONSECUTIVE_LOSSES"
    REQUIRE_TRADE_PLAN = "REQUIRE_TRADE_PLAN"
    MAX_TRADES_AFTER_WIN = "MAX_TRADES_AFTER_WIN"


class RuleCategory(str, Enum):
    RISK = "RISK"
    DISCIPLINE = "DISCIPLINE"
    TIMING = "TIMING"
    PSYCHOLOGY = "PSYCHOLOGY"


class ValueType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    ABSOLUTE = "ABSOLUTE"


class RuleStatus(str, Enum):
    SAFE = "SAFE"
    WARNING = "WARNING"
    BREACHED = "BREACHED"


class ExperienceLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    EXPERIENCED = "EXPERIENCED"


class TradingStyle(str, Enum):
    INTRADAY = "INTRADAY"
    SWING = "SWING"
    MIXED = "MIXED"


class PlanAdherence(str, Enum):
    FOLLOWED = "followed"
    DEVIATED = "deviated"
    NO_PLAN = "no_plan"


@dataclass(frozen=True)
class DataCompleteness:
    """Whether an imported trade carries planned risk and declared intent."""
    has_planned_risk: bool
    has_declared_intent: bool


@dataclass(frozen=True)
class Trade:
    """A single buy/sell position with planned risk and realised outcome."""
    id: str
    instrument_type: InstrumentType
    symbol: str
    trade_date: str                 # ISO date string
    trade_time: str                 # HH:mm
    type: TradeSide
    quantity: float
    entry_price: float
    confidence: int                 # 1-5
    risk_comfort: float
    status: TradeStatus
    created_at: datetime
    option_type: Optional[OptionType] = None
    planned_stop: Optional[float] = None
    planned_target: Optional[float] = None
    reason: Optional[str] = None
    exit_reason: Optional[ExitReason] = None
    exit_price: Optional[float] = None
    profit_loss: Optional[float] = None
    exit_note: Optional[str] = None
    result: Optional[TradeResult] = None
    closed_at: Optional[datetime] = None
    emotions: tuple[str, ...] = ()
    source: Optional[TradeSource] = None
    data_completeness: Optional[DataCompleteness] = None

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    @property
    def has_plan(self) -> bool:
        """True if a planned stop or target was recorded."""
        return bool(self.planned_stop) or bool(self.planned_target)

    def with_changes(self, **changes: Any) -> "Trade":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class TradingRule:
    """A user-defined daily threshold; display only, the backend enforces."""
    id: str
    type: str                       # RuleType value; unknown types are kept verbatim
    value: float
    is_active: bool
    description: str
    category: Optional[RuleCategory] = None
    value_type: Optional[ValueType] = None
    is_custom: bool = False
    custom_name: Optional[str] = None
    disabled_until: Optional[datetime] = None
    disable_reason: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Trading profile; ``account_size`` feeds percentage-based rules."""
    name: str = ""
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    account_size: float = 100000.0
    trading_style: TradingStyle = TradingStyle.MIXED
    email: Optional[str] = None


@dataclass(frozen=True)
class DailyRuleStatus:
    """Today's standing against one active rule."""
    rule_id: str
    current_value: float
    limit_value: float
    remaining_value: float
    status: RuleStatus


@dataclass(frozen=True)
class RuleBreach:
    rule_id: str
    rule_type: str
    message: str


@dataclass(frozen=True)
class CloseTradeResult:
    """Closed trade plus the backend's plan/rule verdicts."""
    trade: Trade
    plan_adherence: Optional[PlanAdherence] = None
    rule_breaches: tuple[RuleBreach, ...] = ()
    nudge_message: Optional[str] = None


@dataclass(frozen=True)
class PaginatedTrades:
    trades: list[Trade]
    total: int
    page: int
    limit: int
    has_more: bool


@dataclass(frozen=True)
class MonthTrades:
    trades: list[Trade]
    month_total: float
    win_count: int
    loss_count: int


@dataclass(frozen=True)
class TradesMetadata:
    total_trades: int
    first_trade_date: Optional[str]
    last_trade_date: Optional[str]
    available_months: list[tuple[int, int]] = field(default_factory=list)


@dataclass(frozen=True)
class CoachMessage:
    role: str                       # "user" | "assistant"
    content: str
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class CoachStatus:
    """AI coach rate-limit status."""
    allowed: bool
    remaining: int
    limit: int


@dataclass(frozen=True)
class BrokerMargins:
    available: float
    used: float
    total: float


@dataclass(frozen=True)
class BrokerConnectionStatus:
    connected: bool
    market_open: bool = False
    broker: Optional[str] = None
    user_id: Optional[str] = None
    connected_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    margins: Optional[BrokerMargins] = None


@dataclass(frozen=True)
class BrokerPosition:
    tradingsymbol: str
    exchange: str
    product: str
    quantity: float
    average_price: float
    last_price: float
    pnl: float
    value: float


@dataclass(frozen=True)
class RuleViolation:
    rule_id: str
    rule_type: str
    outcome: str                    # PASS | WARN | BLOCK
    message: str
    current_value: float
    limit_value: float
    suggested_action: Optional[str] = None


@dataclass(frozen=True)
class PreOrderValidation:
    outcome: str                    # PASS | WARN | BLOCK
    violations: list[RuleViolation]
    can_proceed: bool
    requires_override: bool


@dataclass(frozen=True)
class PlaceOrderResult:
    requires_override: bool = False
    validation: Optional[PreOrderValidation] = None
    trade: Optional[dict[str, Any]] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of reconciling broker positions with journal trades."""
    positions_matched: int
    trades_created: int
    trades_updated: int
    trades_closed: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    """Summary of a broker tradebook import."""
    imported_executions: int
    reconstructed_trades: int
    skipped_rows: int
    warnings: list[str] = field(default_factory=list)
