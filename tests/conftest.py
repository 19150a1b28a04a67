"""
Shared fixtures for ShareLedger tests.
"""
from decimal import Decimal

import pytest

from models import Category, Expense, Ledger, Payment, Person, SplitMode


@pytest.fixture
def people():
    return [
        Person(id="A", name="Alice"),
        Person(id="B", name="Bob"),
        Person(id="C", name="Carla"),
    ]


@pytest.fixture
def categories():
    return [
        Category(id="food", name="Food", color="#FF8800"),
        Category(id="home", name="Home", color="#336699"),
        Category(id="fun", name="Fun"),
    ]


@pytest.fixture
def dinner():
    """90.00 paid by Alice, shared equally by all three."""
    return Expense(
        id="e1",
        amount=Decimal("90.00"),
        payer="A",
        involved=["A", "B", "C"],
        title="Dinner",
        date="2024-03-01",
        category="food",
    )


@pytest.fixture
def ledger(people, categories, dinner):
    rent = Expense(
        id="e2",
        amount=Decimal("100.00"),
        payer="B",
        involved=["A", "B"],
        split_mode=SplitMode.RATIO,
        ratios={"A": Decimal("1"), "B": Decimal("3")},
        title="Rent share",
        date="2024-03-10",
        category="home",
    )
    cinema = Expense(
        id="e3",
        amount=Decimal("30.00"),
        payer="C",
        involved=["B", "C"],
        split_mode=SplitMode.MANUAL,
        manual_shares={"B": Decimal("20.00"), "C": Decimal("10.00")},
        title="Cinema",
        date="2024-04-02",
        category="fun",
    )
    payment = Payment(id="p1", amount=Decimal("10.00"), payer="B", payee="A", date="2024-03-15")
    return Ledger(
        people=people,
        categories=categories,
        expenses=[dinner, rent, cinema],
        payments=[payment],
    )
