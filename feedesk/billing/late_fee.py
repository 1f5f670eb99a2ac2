"""
Late fee policy and calculation.

Policy fields come from the quarter; any field the quarter leaves unset falls back to the
school-wide defaults in settings.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from feedesk.billing.money import HUNDRED, ZERO, to_money
from feedesk.core.enums import LateFeeType
from feedesk.core.models import Quarter


@dataclass(frozen=True)
class LateFeePolicy:
    fee_type: LateFeeType = LateFeeType.FLAT
    amount: Decimal = ZERO
    percentage: Decimal = ZERO
    grace_period_days: int = 0
    apply_daily: bool = False
    max_late_fee: Optional[Decimal] = None  # None: uncapped

    @classmethod
    def from_quarter(cls, quarter: Quarter, defaults) -> "LateFeePolicy":
        """defaults is any object with the late_fee_* attributes of Settings."""

        def pick(value, fallback):
            return fallback if value is None else value

        fee_type = pick(quarter.late_fee_type, defaults.late_fee_type)
        return cls(
            fee_type=LateFeeType(str(fee_type).strip().lower()),
            amount=to_money(pick(quarter.late_fee_amount, defaults.late_fee_amount)),
            percentage=Decimal(str(pick(quarter.late_fee_percentage, defaults.late_fee_percentage))),
            grace_period_days=max(0, int(pick(quarter.grace_period_days, defaults.late_fee_grace_period_days))),
            apply_daily=bool(pick(quarter.apply_daily, defaults.late_fee_apply_daily)),
            max_late_fee=pick(quarter.max_late_fee, defaults.late_fee_max),
        )


def days_late(due_date: date, grace_period_days: int, as_of: date) -> int:
    """Whole days past due_date + grace; 0 while still inside the grace window."""
    deadline = due_date + timedelta(days=max(0, grace_period_days))
    if as_of <= deadline:
        return 0
    return max(1, (as_of - deadline).days)


def compute_late_fee(due_date: date, policy: LateFeePolicy, gross_due, as_of: date) -> Decimal:
    """
    Late fee for a quarter as of a date. Never negative.
    flat: the configured amount; percentage: that share of gross_due. apply_daily multiplies by days late.
    The result is capped at max_late_fee when one is configured.
    """
    days = days_late(due_date, policy.grace_period_days, as_of)
    if days == 0:
        return ZERO

    if policy.fee_type == LateFeeType.PERCENTAGE:
        gross = to_money(gross_due)
        if gross <= 0:
            return ZERO
        fee = gross * policy.percentage / HUNDRED
    else:
        fee = to_money(policy.amount)

    if policy.apply_daily:
        fee = fee * days
    fee = to_money(fee)
    if policy.max_late_fee is not None:
        fee = min(fee, to_money(policy.max_late_fee))
    return max(ZERO, fee)
