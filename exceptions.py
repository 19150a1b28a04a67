"""
Exception hierarchy for ShareLedger.

Errors raised by the balance engine and the file layer all derive from
LedgerError so callers can catch the whole family at once.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger errors."""
    pass


class InvalidExpense(LedgerError, ValueError):
    """Raised when an expense cannot be split (no participants, negative amount, ...)."""

    def __init__(self, message: str, expense_id: Optional[str] = None):
        super().__init__(message)
        self.expense_id = expense_id


class InvalidPayment(InvalidExpense):
    """Raised when a payment record cannot be applied to balances."""
    pass


class InternalInconsistency(LedgerError, RuntimeError):
    """Raised when balances or settlements break the zero-sum invariant."""
    pass


class LedgerFormatError(LedgerError, ValueError):
    """Raised when a ledger or CSV file has unusable content."""
    pass


class ValidationWarning(UserWarning):
    """Manual split whose shares do not add up to the expense amount.

    Returned alongside the split rather than raised: the entered shares are
    still used as-is.
    """

    def __init__(self, expense_id: str, expected: Decimal, actual: Decimal):
        super().__init__(
            f"Expense {expense_id}: manual shares sum to {actual}, expected {expected}"
        )
        self.expense_id = expense_id
        self.expected = expected
        self.actual = actual

    @property
    def difference(self) -> Decimal:
        """Amount not covered by the manual shares (negative if over-assigned)"""
        return self.expected - self.actual
