"""
Data models for ShareLedger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, NamedTuple, Optional


class SplitMode(str, Enum):
    """How an expense is divided among the people involved"""
    EQUAL = "equal"
    RATIO = "ratio"
    MANUAL = "manual"


@dataclass
class Person:
    """Participant in the shared ledger"""
    id: str
    name: str
    phone: str = ""


@dataclass
class Category:
    """Expense category"""
    id: str
    name: str
    color: str = "#4F81BD"


@dataclass
class Expense:
    """Single shared expense"""
    id: str
    amount: Decimal
    payer: str  # person id
    involved: List[str]  # person ids, order decides who absorbs rounding
    split_mode: SplitMode = SplitMode.EQUAL
    ratios: Dict[str, Decimal] = field(default_factory=dict)  # ratio mode weights
    manual_shares: Dict[str, Decimal] = field(default_factory=dict)  # manual mode shares
    title: str = ""
    date: str = ""  # YYYY-MM-DD
    category: str = ""  # category id
    description: str = ""


@dataclass
class Payment:
    """Direct payment from one person to another, already made outside the ledger"""
    id: str
    amount: Decimal
    payer: str  # who handed the money over
    payee: str  # who received it
    date: str = ""


class Settlement(NamedTuple):
    """Suggested transfer: debtor pays creditor amount"""
    debtor: str
    creditor: str
    amount: Decimal


@dataclass
class Ledger:
    """Complete ledger containing all records"""
    people: List[Person]
    categories: List[Category]
    expenses: List[Expense]
    payments: List[Payment]
    version: int = 1

    def person_ids(self) -> List[str]:
        return [p.id for p in self.people]

    def person_name(self, person_id: str) -> str:
        """Display name for a person id, falling back to the id itself"""
        for p in self.people:
            if p.id == person_id:
                return p.name
        return person_id

    def category_name(self, category_id: str) -> str:
        for c in self.categories:
            if c.id == category_id:
                return c.name
        return category_id

    def find_category(self, category_id: str) -> Optional[Category]:
        for c in self.categories:
            if c.id == category_id:
                return c
        return None
