"""
Balance engine for ShareLedger: split resolution, balance aggregation and
settlement planning, plus the filters and totals used by the reports.

Everything here is pure: records go in, new values come out, nothing is
mutated or cached. Money is Decimal; shares are cut to cents.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from exceptions import InternalInconsistency, InvalidExpense, InvalidPayment, ValidationWarning
from models import Category, Expense, Ledger, Payment, Settlement, SplitMode
from utils import CENT, parse_date, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass
class ResolvedSplit:
    """Per-participant shares of one expense"""
    amount: Decimal
    shares: Dict[str, Decimal]  # keyed by involved, in involved order
    warnings: List[ValidationWarning] = field(default_factory=list)


@dataclass
class BalanceReport:
    """Result of folding a batch of expenses and payments"""
    balances: Dict[str, Decimal]  # positive -> is owed; negative -> owes
    warnings: List[ValidationWarning] = field(default_factory=list)
    rejected: List[Tuple[str, InvalidExpense]] = field(default_factory=list)

    @property
    def drift(self) -> Decimal:
        """Money created or lost by mismatched manual splits; zero for a clean batch"""
        return sum((w.difference for w in self.warnings), ZERO)


# ---------- Split resolver ----------

def _unique(ids: Iterable[str]) -> List[str]:
    return list(OrderedDict.fromkeys(ids))


def _amount_of(record_id: str, value, error=InvalidExpense) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError as ex:
        raise error(f"{record_id}: {ex}", record_id) from ex
    if amount < 0:
        raise error(f"{record_id}: amount must not be negative, got {amount}", record_id)
    return amount


def _ratio_weight(expense: Expense, person: str) -> Decimal:
    """Weight for ratio mode; missing or non-positive weights count as 1"""
    raw = expense.ratios.get(person)
    if raw is None:
        return ONE
    try:
        w = to_decimal(raw)
    except ValueError as ex:
        raise InvalidExpense(f"{expense.id}: bad ratio for {person}: {ex}", expense.id) from ex
    return w if w > 0 else ONE


def _distribute(
    expense_id: str, amount: Decimal, involved: List[str], weights: Dict[str, Decimal]
) -> Dict[str, Decimal]:
    """
    Split amount proportionally to weights.
    Each share is rounded down to cents, then the leftover goes to the first
    participant so the shares add up to amount exactly.
    """
    total = sum(weights.values(), ZERO)
    if total <= 0:
        raise InvalidExpense(f"{expense_id}: split weights sum to {total}", expense_id)
    shares = OrderedDict()
    try:
        for p in involved:
            shares[p] = (amount * weights[p] / total).quantize(CENT, rounding=ROUND_DOWN)
    except InvalidOperation:
        # amount has more digits than the decimal context can hold at cent precision
        raise InvalidExpense(f"{expense_id}: amount {amount} is too large to split", expense_id) from None
    residual = amount - sum(shares.values(), ZERO)
    shares[involved[0]] += residual
    return dict(shares)


def resolve_split(expense: Expense) -> ResolvedSplit:
    """
    Compute what each involved person owes for one expense.

    equal  -> amount / n, leftover cent(s) to the first involved person
    ratio  -> amount * weight / total weight, same leftover rule
    manual -> the entered shares as-is; a sum mismatch is reported as a
              ValidationWarning, never corrected

    Raises InvalidExpense for an empty involved list, a negative amount or
    an unusable split input.
    """
    involved = _unique(expense.involved)
    if not involved:
        raise InvalidExpense(f"{expense.id}: no participants involved", expense.id)
    amount = _amount_of(expense.id, expense.amount)
    try:
        mode = SplitMode(expense.split_mode)
    except ValueError:
        raise InvalidExpense(
            f"{expense.id}: unknown split mode {expense.split_mode!r}", expense.id
        ) from None

    if mode is SplitMode.EQUAL:
        shares = _distribute(expense.id, amount, involved, {p: ONE for p in involved})
        return ResolvedSplit(amount, shares)

    if mode is SplitMode.RATIO:
        weights = {p: _ratio_weight(expense, p) for p in involved}
        shares = _distribute(expense.id, amount, involved, weights)
        return ResolvedSplit(amount, shares)

    shares = {}
    for p in involved:
        raw = expense.manual_shares.get(p, ZERO)
        try:
            share = to_decimal(raw)
        except ValueError as ex:
            raise InvalidExpense(f"{expense.id}: bad share for {p}: {ex}", expense.id) from ex
        if share < 0:
            raise InvalidExpense(f"{expense.id}: negative share for {p}", expense.id)
        shares[p] = share
    resolved = ResolvedSplit(amount, shares)
    entered = sum(shares.values(), ZERO)
    if entered != amount:
        warning = ValidationWarning(expense.id, amount, entered)
        logger.warning(str(warning))
        resolved.warnings.append(warning)
    return resolved


# ---------- Balance aggregator ----------

def aggregate_balances(
    expenses: Iterable[Expense],
    payments: Iterable[Payment],
    people: Iterable[str] = (),
    fail_fast: bool = True,
) -> BalanceReport:
    """
    Fold every expense and payment into signed per-person balances.

    Expense: payer += amount, each involved person -= their share.
    Payment: payer += amount, payee -= amount.

    Every id in people or referenced by any record gets a key, starting at 0.
    With fail_fast=False an invalid record is skipped and listed in
    report.rejected instead of aborting the batch.
    """
    expenses = list(expenses)
    payments = list(payments)

    balances: Dict[str, Decimal] = {}
    for pid in people:
        balances.setdefault(pid, ZERO)
    for e in expenses:
        balances.setdefault(e.payer, ZERO)
        for pid in e.involved:
            balances.setdefault(pid, ZERO)
    for pm in payments:
        balances.setdefault(pm.payer, ZERO)
        balances.setdefault(pm.payee, ZERO)

    report = BalanceReport(balances)

    for e in expenses:
        try:
            resolved = resolve_split(e)
        except InvalidExpense as ex:
            if fail_fast:
                raise
            logger.warning("Skipping expense %s: %s", e.id, ex)
            report.rejected.append((e.id, ex))
            continue
        balances[e.payer] += resolved.amount
        for pid, share in resolved.shares.items():
            balances[pid] -= share
        report.warnings.extend(resolved.warnings)

    for pm in payments:
        try:
            amount = _amount_of(pm.id, pm.amount, InvalidPayment)
        except InvalidPayment as ex:
            if fail_fast:
                raise
            logger.warning("Skipping payment %s: %s", pm.id, ex)
            report.rejected.append((pm.id, ex))
            continue
        balances[pm.payer] += amount
        balances[pm.payee] -= amount

    total = sum(balances.values(), ZERO)
    if total != report.drift:
        raise InternalInconsistency(
            f"Balances sum to {total}, expected {report.drift}"
        )
    logger.debug(
        "Aggregated %d expenses and %d payments over %d people",
        len(expenses), len(payments), len(balances),
    )
    return report


def compute_balances(
    expenses: Iterable[Expense],
    payments: Iterable[Payment],
    people: Iterable[str] = (),
) -> Dict[str, Decimal]:
    """Balances only; raises on the first invalid record"""
    return aggregate_balances(expenses, payments, people).balances


# ---------- Settlement planner ----------

def compute_settlements(
    balances: Mapping[str, Decimal], tolerance: Decimal = CENT
) -> List[Settlement]:
    """
    Compute transfers that settle every balance.
    Greedy settlement: the largest debtor pays the largest creditor as much as
    both allow, then whichever side is cleared moves on. Equal balances keep
    the order of the input mapping.

    Raises InternalInconsistency if balances do not sum to zero (within
    tolerance) or the matching leaves money unsettled.
    """
    total = sum(balances.values(), ZERO)
    if abs(total) > tolerance:
        raise InternalInconsistency(f"Cannot settle: balances sum to {total}")

    creditors = [[p, v] for p, v in balances.items() if v > 0]
    debtors = [[p, -v] for p, v in balances.items() if v < 0]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    settlements = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        dname, damt = debtors[i]
        cname, camt = creditors[j]
        x = min(damt, camt)
        if x <= 0 or dname == cname:
            raise InternalInconsistency(f"Invalid transfer {dname} -> {cname}: {x}")
        settlements.append(Settlement(dname, cname, x))
        logger.debug("%s pays %s %s", dname, cname, x)
        debtors[i][1] = damt - x
        creditors[j][1] = camt - x
        if debtors[i][1] == 0:
            i += 1
        if creditors[j][1] == 0:
            j += 1

    leftover = sum((d[1] for d in debtors[i:]), ZERO) + sum((c[1] for c in creditors[j:]), ZERO)
    if leftover > tolerance:
        raise InternalInconsistency(f"Settlement left {leftover} unmatched")
    if leftover:
        logger.debug("Dropping %s of rounding dust", leftover)
    return settlements


def apply_settlements(
    balances: Mapping[str, Decimal], settlements: Iterable[Settlement]
) -> Dict[str, Decimal]:
    """Balances after every suggested transfer has been paid"""
    out = dict(balances)
    for s in settlements:
        out[s.debtor] = out.get(s.debtor, ZERO) + s.amount
        out[s.creditor] = out.get(s.creditor, ZERO) - s.amount
    return out


def settle_ledger(ledger: Ledger, fail_fast: bool = True) -> Tuple[BalanceReport, List[Settlement]]:
    """Balances and suggested settlements over the whole ledger"""
    report = aggregate_balances(
        ledger.expenses, ledger.payments, ledger.person_ids(), fail_fast=fail_fast
    )
    return report, compute_settlements(report.balances)


# ---------- Filters and totals ----------

def filter_expenses(
    expenses: List[Expense],
    person: Optional[str] = None,
    category: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Expense]:
    """
    Filter expenses by person (payer or involved), category and date range.
    Date bounds are inclusive; undated expenses drop out once a bound is set.
    """
    out = []
    for e in expenses:
        if person and e.payer != person and person not in e.involved:
            continue
        if category and e.category != category:
            continue
        if start or end:
            if not e.date:
                continue
            ed = parse_date(e.date)
            if start and ed < start:
                continue
            if end and ed > end:
                continue
        out.append(e)
    return out


def filter_payments(
    payments: List[Payment],
    person: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Payment]:
    """Filter payments by person (either side) and inclusive date range"""
    out = []
    for pm in payments:
        if person and person not in (pm.payer, pm.payee):
            continue
        if start or end:
            if not pm.date:
                continue
            pd = parse_date(pm.date)
            if start and pd < start:
                continue
            if end and pd > end:
                continue
        out.append(pm)
    return out


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    return sum((to_decimal(e.amount) for e in expenses), ZERO)


def totals_by_category(expenses: List[Expense], categories: List[Category]) -> Dict[str, Decimal]:
    """Total spent per category id, in category order, categories with nothing spent left out"""
    out = {}
    for c in categories:
        t = total_amount(e for e in expenses if e.category == c.id)
        if t > 0:
            out[c.id] = t
    return out


def totals_by_date(expenses: List[Expense]) -> List[Tuple[str, Decimal]]:
    """Total spent per day, oldest first"""
    acc: Dict[str, Decimal] = {}
    for e in expenses:
        acc[e.date] = acc.get(e.date, ZERO) + to_decimal(e.amount)
    return sorted(acc.items())


def compute_summary(
    ledger: Ledger,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Dict[str, dict]:
    """
    Compute summary statistics for each person over the records in range.
    Returns dict mapping person -> {paid, consumed, sent, received, net}
    Invalid expenses and payments are left out, so net matches the balance.
    """
    people = ledger.person_ids()
    exps = filter_expenses(ledger.expenses, start=start, end=end)
    pays = filter_payments(ledger.payments, start=start, end=end)

    stats = {p: {"paid": ZERO, "consumed": ZERO, "sent": ZERO, "received": ZERO} for p in people}

    def row(pid):
        return stats.setdefault(pid, {"paid": ZERO, "consumed": ZERO, "sent": ZERO, "received": ZERO})

    for e in exps:
        try:
            resolved = resolve_split(e)
        except InvalidExpense as ex:
            logger.warning("Summary skips expense %s: %s", e.id, ex)
            continue
        row(e.payer)["paid"] += resolved.amount
        for pid, share in resolved.shares.items():
            row(pid)["consumed"] += share

    for pm in pays:
        try:
            amount = _amount_of(pm.id, pm.amount, InvalidPayment)
        except InvalidPayment as ex:
            logger.warning("Summary skips payment %s: %s", pm.id, ex)
            continue
        row(pm.payer)["sent"] += amount
        row(pm.payee)["received"] += amount

    for s in stats.values():
        # positive -> should receive; negative -> should pay
        s["net"] = s["paid"] - s["consumed"] + s["sent"] - s["received"]
    return stats
