"""
CSV export and import functionality for ShareLedger
"""
from __future__ import annotations
import csv
from decimal import Decimal
from typing import Dict, List

from exceptions import LedgerFormatError
from models import Expense, Payment, SplitMode
from utils import check_date, to_decimal

EXPENSE_COLUMNS = [
    'id', 'date', 'title', 'category', 'payer', 'amount',
    'involved', 'split_mode', 'ratios', 'manual_shares', 'description',
]
PAYMENT_COLUMNS = ['id', 'date', 'payer', 'payee', 'amount']


def _encode_map(d: Dict[str, Decimal]) -> str:
    return ';'.join([f"{k}:{v}" for k, v in d.items()])


def _decode_map(s: str) -> Dict[str, Decimal]:
    out = {}
    if s:
        for pair in s.split(';'):
            if ':' in pair:
                k, v = pair.split(':', 1)
                out[k.strip()] = to_decimal(v.strip())
    return out


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    Mappings are written as id:value;id:value, the involved list as id;id
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(EXPENSE_COLUMNS)

        for e in expenses:
            writer.writerow([
                e.id,
                e.date,
                e.title,
                e.category,
                e.payer,
                e.amount,
                ';'.join(e.involved),
                SplitMode(e.split_mode).value,
                _encode_map(e.ratios),
                _encode_map(e.manual_shares),
                e.description,
            ])


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line, row in enumerate(reader, start=2):
            try:
                expense = Expense(
                    id=row['id'],
                    date=check_date(row.get('date')),
                    title=row.get('title') or '',
                    category=row.get('category') or '',
                    payer=row['payer'],
                    amount=to_decimal(row['amount']),
                    involved=[p.strip() for p in (row['involved'] or '').split(';') if p.strip()],
                    split_mode=SplitMode(row.get('split_mode') or 'equal'),
                    ratios=_decode_map(row.get('ratios') or ''),
                    manual_shares=_decode_map(row.get('manual_shares') or ''),
                    description=row.get('description') or '',
                )
            except (KeyError, ValueError) as ex:
                raise LedgerFormatError(f"{filepath} line {line}: {ex}") from ex
            expenses.append(expense)

    return expenses


def export_payments_to_csv(payments: List[Payment], filepath: str) -> None:
    """Export payments list to CSV file"""
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(PAYMENT_COLUMNS)
        for p in payments:
            writer.writerow([p.id, p.date, p.payer, p.payee, p.amount])


def import_payments_from_csv(filepath: str) -> List[Payment]:
    """Import payments list from CSV file"""
    payments = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for line, row in enumerate(reader, start=2):
            try:
                payments.append(Payment(
                    id=row['id'],
                    date=check_date(row.get('date')),
                    payer=row['payer'],
                    payee=row['payee'],
                    amount=to_decimal(row['amount']),
                ))
            except (KeyError, ValueError) as ex:
                raise LedgerFormatError(f"{filepath} line {line}: {ex}") from ex

    return payments
