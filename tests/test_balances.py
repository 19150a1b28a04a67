"""
Tests for the balance aggregator.
"""
from decimal import Decimal

import pytest

from computations import aggregate_balances, compute_balances
from exceptions import InvalidExpense, InvalidPayment
from models import Expense, Payment, SplitMode


def total(balances):
    return sum(balances.values(), Decimal(0))


class TestComputeBalances:

    def test_empty_input(self):
        assert compute_balances([], []) == {}

    def test_empty_input_with_people(self):
        balances = compute_balances([], [], people=["A", "B"])
        assert balances == {"A": Decimal(0), "B": Decimal(0)}

    def test_payer_who_also_shares(self, dinner):
        balances = compute_balances([dinner], [])
        assert balances == {"A": Decimal("60"), "B": Decimal("-30"), "C": Decimal("-30")}
        assert total(balances) == 0

    def test_payer_not_involved(self):
        e = Expense(id="e", amount=Decimal("20"), payer="A", involved=["B", "C"])
        balances = compute_balances([e], [])
        assert balances == {"A": Decimal("20"), "B": Decimal("-10"), "C": Decimal("-10")}

    def test_payment_moves_balance(self, dinner):
        payment = Payment(id="p", amount=Decimal("30"), payer="B", payee="A")
        balances = compute_balances([dinner], [payment])
        assert balances == {"A": Decimal("30"), "B": Decimal("0"), "C": Decimal("-30")}

    def test_payment_only(self):
        payment = Payment(id="p", amount=Decimal("5"), payer="A", payee="B")
        assert compute_balances([], [payment]) == {"A": Decimal("5"), "B": Decimal("-5")}

    def test_full_ledger(self, ledger):
        balances = compute_balances(ledger.expenses, ledger.payments, ledger.person_ids())
        assert balances == {"A": Decimal("25"), "B": Decimal("-15"), "C": Decimal("-10")}
        assert total(balances) == 0

    def test_order_does_not_matter(self, ledger):
        forward = compute_balances(ledger.expenses, ledger.payments)
        backward = compute_balances(ledger.expenses[::-1], ledger.payments[::-1])
        assert forward == backward

    def test_same_input_same_result(self, ledger):
        first = compute_balances(ledger.expenses, ledger.payments)
        second = compute_balances(ledger.expenses, ledger.payments)
        assert first == second

    def test_does_not_mutate_records(self, dinner):
        before = (dinner.amount, list(dinner.involved), dict(dinner.ratios))
        compute_balances([dinner], [])
        assert (dinner.amount, dinner.involved, dinner.ratios) == before

    def test_accepts_generators(self, dinner):
        balances = compute_balances((e for e in [dinner]), iter([]))
        assert balances["A"] == Decimal("60")

    def test_zero_sum_over_awkward_splits(self):
        expenses = [
            Expense(id=str(i), amount=Decimal(amount), payer=payer, involved=involved)
            for i, (amount, payer, involved) in enumerate([
                ("10.00", "A", ["A", "B", "C"]),
                ("0.01", "B", ["A", "B", "C"]),
                ("33.33", "C", ["A", "B", "C", "D", "E", "F", "G"]),
                ("7.77", "D", ["E", "F"]),
            ])
        ]
        payments = [Payment(id="p", amount=Decimal("1.11"), payer="G", payee="A")]
        assert total(compute_balances(expenses, payments)) == 0


class TestAggregateBalances:

    def test_invalid_expense_fails_fast(self, dinner):
        bad = Expense(id="bad", amount=Decimal("10"), payer="A", involved=[])
        with pytest.raises(InvalidExpense):
            aggregate_balances([dinner, bad], [])

    def test_invalid_expense_collected(self, dinner):
        bad = Expense(id="bad", amount=Decimal("-10"), payer="D", involved=["A"])
        report = aggregate_balances([dinner, bad], [], fail_fast=False)
        assert report.balances == {
            "A": Decimal("60"), "B": Decimal("-30"), "C": Decimal("-30"), "D": Decimal("0"),
        }
        assert [record_id for record_id, _ in report.rejected] == ["bad"]
        assert isinstance(report.rejected[0][1], InvalidExpense)

    def test_oversized_amount_collected(self, dinner):
        huge = Expense(id="huge", amount=Decimal("1e40"), payer="A", involved=["A", "B", "C"])
        with pytest.raises(InvalidExpense):
            aggregate_balances([huge], [])
        report = aggregate_balances([dinner, huge], [], fail_fast=False)
        assert [record_id for record_id, _ in report.rejected] == ["huge"]
        assert report.balances["A"] == Decimal("60")

    def test_negative_payment(self):
        payment = Payment(id="p", amount=Decimal("-3"), payer="A", payee="B")
        with pytest.raises(InvalidPayment):
            aggregate_balances([], [payment])
        report = aggregate_balances([], [payment], fail_fast=False)
        assert report.balances == {"A": Decimal(0), "B": Decimal(0)}
        assert report.rejected[0][0] == "p"

    def test_manual_mismatch_used_as_entered(self):
        e = Expense(
            id="m", amount=Decimal("50"), payer="A", involved=["A", "B"],
            split_mode=SplitMode.MANUAL,
            manual_shares={"A": Decimal("10"), "B": Decimal("10")},
        )
        report = aggregate_balances([e], [])
        assert report.balances == {"A": Decimal("40"), "B": Decimal("-10")}
        assert len(report.warnings) == 1
        assert report.drift == Decimal("30")
        assert total(report.balances) == report.drift

    def test_clean_batch_has_no_drift(self, dinner):
        report = aggregate_balances([dinner], [])
        assert report.warnings == []
        assert report.drift == 0
