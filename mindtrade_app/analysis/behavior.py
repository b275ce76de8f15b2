"""Behavioral labels for closed trades, used in history and detail views."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from ..data.models import ExitReason, PlanAdherence, Trade

EXITED_AS_PLANNED = "Exited as Planned"
HELD_TO_TARGET = "Held to Target"
EXITED_EARLY = "Exited Early"
RISK_EXCEEDED = "Risk Exceeded"
OVERCONFIDENT = "Overconfident Trade"

EARLY_EXIT_REASONS = (ExitReason.FEAR, ExitReason.UNSURE, ExitReason.IMPULSE)


def check_plan_adherence(trade: Trade, exit_reason: Optional[ExitReason]) -> PlanAdherence:
    """Whether an exit matched the trade's planned stop or target."""
    if not trade.has_plan:
        return PlanAdherence.NO_PLAN
    if exit_reason == ExitReason.TARGET and trade.planned_target:
        return PlanAdherence.FOLLOWED
    if exit_reason == ExitReason.STOP and trade.planned_stop:
        return PlanAdherence.FOLLOWED
    return PlanAdherence.DEVIATED


def behavioral_tag(trade: Trade) -> str:
    """
    Single human-readable interpretation of a closed trade.

    Checked in order: stop exit, target exit, early exit from a planned
    trade, loss beyond risk comfort, losing high-confidence trade.
    Returns an empty string when none applies.
    """
    if not trade.is_closed or trade.exit_reason is None or trade.profit_loss is None:
        return ""

    if trade.exit_reason == ExitReason.STOP:
        return EXITED_AS_PLANNED
    if trade.exit_reason == ExitReason.TARGET:
        return HELD_TO_TARGET

    if trade.has_plan and trade.exit_reason in EARLY_EXIT_REASONS:
        return EXITED_EARLY

    if (
        trade.profit_loss < 0
        and trade.risk_comfort
        and abs(trade.profit_loss) > trade.risk_comfort
    ):
        return RISK_EXCEEDED

    if trade.confidence >= 4 and trade.profit_loss < 0:
        return OVERCONFIDENT

    return ""


def is_within_plan(trade: Trade) -> bool:
    if not trade.is_closed or trade.exit_reason is None:
        return False
    if trade.exit_reason == ExitReason.STOP and trade.planned_stop:
        return True
    if trade.exit_reason == ExitReason.TARGET and trade.planned_target:
        return True
    return False


def confidence_dots(confidence: int) -> str:
    """Five-dot confidence meter, e.g. ``●●●○○`` for 3."""
    filled = max(0, min(5, confidence))
    return "●" * filled + "○" * (5 - filled)


def insight_hint(
    trade: Trade,
    all_trades: Iterable[Trade],
    now: Optional[datetime] = None
) -> str:
    """
    Point out when a trade belongs to a pattern from the last seven days.

    Three or more early exits, or two or more overconfident losses, count
    as a pattern.
    """
    if not trade.is_closed:
        return ""

    now = now or datetime.now(timezone.utc)
    recent_tags = [
        behavioral_tag(t)
        for t in all_trades
        if t.is_closed and t.closed_at is not None and (now - t.closed_at).days <= 7
    ]
    tag = behavioral_tag(trade)

    if tag == EXITED_EARLY and recent_tags.count(EXITED_EARLY) >= 3:
        return "Contributes to your weekly insight on early exits."
    if tag == OVERCONFIDENT and recent_tags.count(OVERCONFIDENT) >= 2:
        return "Part of a recurring pattern this week."
    return ""
