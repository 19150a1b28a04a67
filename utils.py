"""
Utility functions for ShareLedger
"""
from __future__ import annotations
import os
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def check_date(s) -> str:
    """Return s if it is empty or a valid YYYY-MM-DD date; raise ValueError otherwise"""
    if not s:
        return ""
    if not isinstance(s, str):
        raise ValueError(f"Not a date: {s!r}")
    parse_date(s)
    return s


def to_decimal(x) -> Decimal:
    """
    Convert a number or numeric string to Decimal.
    Floats go through str() so 0.1 becomes Decimal('0.1'), not its binary expansion.
    Raises ValueError on anything that is not a finite number.
    """
    if isinstance(x, Decimal):
        value = x
    else:
        try:
            value = Decimal(str(x).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {x!r}") from None
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {x!r}")
    return value


def format_money(amount: Decimal) -> str:
    """Format amount with two decimals, e.g. 3.5 -> '3.50'"""
    return f"{amount.quantize(CENT):,.2f}"


def app_dir() -> str:
    """
    Get application data directory: $SHARELEDGER_HOME or ~/.shareledger
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("SHARELEDGER_HOME") or os.path.expanduser("~/.shareledger")
    os.makedirs(path, exist_ok=True)
    return path
