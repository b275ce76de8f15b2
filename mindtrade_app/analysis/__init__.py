"""Display-only risk nudges and behavioral labels for trades."""

from .behavior import behavioral_tag, check_plan_adherence, confidence_dots, is_within_plan
from .risk import (
    calculate_account_risk_percent,
    calculate_actual_risk,
    check_daily_rule_conflicts,
    check_risk_mismatch,
)

__all__ = [
    "behavioral_tag",
    "check_plan_adherence",
    "confidence_dots",
    "is_within_plan",
    "calculate_account_risk_percent",
    "calculate_actual_risk",
    "check_daily_rule_conflicts",
    "check_risk_mismatch",
]
