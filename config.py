"""
Configuration and data loading/saving for ShareLedger
"""
from __future__ import annotations
import json
import os
from typing import List

from exceptions import LedgerFormatError
from models import Category, Expense, Ledger, Payment, Person, SplitMode
from utils import app_dir, check_date, to_decimal


def load_people(path: str) -> List[Person]:
    """Load people list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [_person(p) for p in data.get("people", [])]
    except FileNotFoundError:
        return []


def load_categories(path: str) -> List[Category]:
    """Load categories list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [Category(**c) for c in data.get("categories", [])]
    except FileNotFoundError:
        return []


def get_default_ledger() -> Ledger:
    """Create empty ledger seeded with the people and categories in the data directory"""
    base = app_dir()
    people = load_people(os.path.join(base, "people.json"))
    categories = load_categories(os.path.join(base, "categories.json"))

    if not categories:
        categories = [Category("general", "General")]

    return Ledger(people=people, categories=categories, expenses=[], payments=[])


def _person(d) -> Person:
    # people.json may list bare names
    if isinstance(d, str):
        return Person(id=d, name=d)
    return Person(**d)


def _amount_map(d: dict) -> dict:
    return {k: to_decimal(v) for k, v in (d or {}).items()}


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "title": e.title,
        "description": e.description,
        "date": e.date,
        "category": e.category,
        "amount": str(e.amount),
        "payer": e.payer,
        "involved": list(e.involved),
        "split_mode": SplitMode(e.split_mode).value,
        "ratios": {k: str(v) for k, v in e.ratios.items()},
        "manual_shares": {k: str(v) for k, v in e.manual_shares.items()},
    }


def dict_to_expense(d: dict) -> Expense:
    try:
        return Expense(
            id=str(d["id"]),
            amount=to_decimal(d["amount"]),
            payer=d["payer"],
            involved=list(d["involved"]),
            split_mode=SplitMode(d.get("split_mode", "equal")),
            ratios=_amount_map(d.get("ratios")),
            manual_shares=_amount_map(d.get("manual_shares")),
            title=d.get("title", ""),
            date=check_date(d.get("date", "")),
            category=d.get("category", ""),
            description=d.get("description", ""),
        )
    except KeyError as ex:
        raise LedgerFormatError(f"Expense record missing field {ex}") from ex
    except ValueError as ex:
        raise LedgerFormatError(f"Expense {d.get('id')!r}: {ex}") from ex


def payment_to_dict(p: Payment) -> dict:
    return {
        "id": p.id,
        "date": p.date,
        "amount": str(p.amount),
        "payer": p.payer,
        "payee": p.payee,
    }


def dict_to_payment(d: dict) -> Payment:
    try:
        return Payment(
            id=str(d["id"]),
            amount=to_decimal(d["amount"]),
            payer=d["payer"],
            payee=d["payee"],
            date=check_date(d.get("date", "")),
        )
    except KeyError as ex:
        raise LedgerFormatError(f"Payment record missing field {ex}") from ex
    except ValueError as ex:
        raise LedgerFormatError(f"Payment {d.get('id')!r}: {ex}") from ex


def ledger_to_dict(ledger: Ledger) -> dict:
    """Convert Ledger object to dictionary for JSON serialization"""
    return {
        "version": ledger.version,
        "people": [{"id": p.id, "name": p.name, "phone": p.phone} for p in ledger.people],
        "categories": [{"id": c.id, "name": c.name, "color": c.color} for c in ledger.categories],
        "expenses": [expense_to_dict(e) for e in ledger.expenses],
        "payments": [payment_to_dict(p) for p in ledger.payments],
    }


def dict_to_ledger(d: dict) -> Ledger:
    """Convert dictionary from JSON to Ledger object"""
    if not isinstance(d, dict):
        raise LedgerFormatError("Ledger file must contain a JSON object")
    try:
        people = [_person(p) for p in d.get("people", [])]
        categories = [Category(**c) for c in d.get("categories", [])]
    except TypeError as ex:
        raise LedgerFormatError(f"Bad person or category entry: {ex}") from ex

    return Ledger(
        version=d.get("version", 1),
        people=people,
        categories=categories,
        expenses=[dict_to_expense(e) for e in d.get("expenses", [])],
        payments=[dict_to_payment(p) for p in d.get("payments", [])],
    )


def load_ledger(path: str) -> Ledger:
    """Read a ledger JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        try:
            d = json.load(f)
        except json.JSONDecodeError as ex:
            raise LedgerFormatError(f"{path}: not valid JSON ({ex})") from ex
    return dict_to_ledger(d)


def save_ledger(ledger: Ledger, path: str) -> None:
    """Write a ledger JSON file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(ledger_to_dict(ledger), f, ensure_ascii=False, indent=2)
