"""Display formatting and row classification helpers"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from settlement_plans.utils.money import CENT, to_decimal

STATUS_BADGE_CLASSES = {
    "Scheduled": "status-badge status-scheduled",
    "Cleared": "status-badge status-cleared",
    "NSF": "status-badge status-nsf",
    "Cancelled": "status-badge status-cancelled",
}

ROW_CLASSES = {
    "Scheduled": "row-scheduled",
    "Cleared": "row-cleared",
    "NSF": "row-nsf",
    "Cancelled": "row-cancelled",
}


def format_currency(value: Any) -> str:
    """
    Format an amount as US dollars.

    Example:
        Decimal("1234.5") → "$1,234.50"
        Decimal("-20")    → "-$20.00"
        None              → "$0.00"
    """
    amount = to_decimal(value)
    if amount is None:
        return "$0.00"

    try:
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return "$0.00"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_date(value: date | None) -> str:
    """MM/DD/YYYY, empty string for a missing date"""
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")


def amount_class(value: Decimal) -> str:
    if value == 0:
        return "value-zero"
    if value < 0:
        return "value-negative"
    return ""


def savings_class(value: Decimal) -> str:
    return "savings-negative" if value < 0 else "savings-positive"


def status_badge_class(status: str) -> str:
    return STATUS_BADGE_CLASSES.get(status, "status-badge status-pending")


def row_class(status: str) -> str:
    return ROW_CLASSES.get(status, "")
