"""Overdue and defaulter classification over computed quarter balances."""

from datetime import date

from feedesk.billing.money import to_money


def is_defaulter(quarter_balance) -> bool:
    """A student is a defaulter for a quarter while any balance remains."""
    return to_money(quarter_balance.balance) > 0


def is_overdue(due_date: date, as_of: date, balance) -> bool:
    return as_of > due_date and to_money(balance) > 0
