"""
ShareLedger command line
- Print each person's balance and the transfers that settle the group.
- Optionally filter the expense listing and export an Excel report.

Run:
  shareledger ledger.json [--start 2024-01-01] [--end 2024-01-31] [--excel report.xlsx]
"""
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from computations import (
    aggregate_balances,
    compute_settlements,
    filter_expenses,
    total_amount,
    totals_by_category,
)
from config import load_ledger
from exceptions import InternalInconsistency, LedgerError
from excel_export import export_excel
from utils import format_money, parse_date

logger = logging.getLogger("shareledger")


def _date_arg(s: str):
    try:
        return parse_date(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shareledger",
        description="Show who owes whom in a shared expense ledger.",
    )
    parser.add_argument("ledger", help="ledger JSON file")
    parser.add_argument("--start", type=_date_arg, help="first day of the listing (YYYY-MM-DD)")
    parser.add_argument("--end", type=_date_arg, help="last day of the listing (YYYY-MM-DD)")
    parser.add_argument("--person", help="only list expenses this person paid for or shares")
    parser.add_argument("--category", help="only list expenses in this category id")
    parser.add_argument("--excel", metavar="OUT.xlsx", help="also write an Excel report")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="more logging (-vv for debug)")
    return parser


def run(args: argparse.Namespace, out=None) -> int:
    out = out or sys.stdout
    ledger = load_ledger(args.ledger)
    report = aggregate_balances(
        ledger.expenses, ledger.payments, ledger.person_ids(), fail_fast=False
    )
    print("Balances:", file=out)
    for pid, bal in report.balances.items():
        print(f"  {ledger.person_name(pid):<20} {format_money(bal):>12}", file=out)
    for w in report.warnings:
        print(f"Warning: {w}", file=out)
    for record_id, ex in report.rejected:
        print(f"Skipped {record_id}: {ex}", file=out)

    settlements = None
    try:
        settlements = compute_settlements(report.balances)
    except InternalInconsistency as ex:
        # balances are still shown when manual splits do not add up
        print(f"Cannot plan settlements: {ex}", file=out)

    if settlements is not None:
        print("Settlements:", file=out)
        if not settlements:
            print("  Nothing to settle.", file=out)
        for s in settlements:
            print(
                f"  {ledger.person_name(s.debtor)} pays {ledger.person_name(s.creditor)} "
                f"{format_money(s.amount)}",
                file=out,
            )

    exps = filter_expenses(ledger.expenses, args.person, args.category, args.start, args.end)
    print(f"Expenses listed: {len(exps)}, total {format_money(total_amount(exps))}", file=out)
    for cid, total in totals_by_category(exps, ledger.categories).items():
        print(f"  {ledger.category_name(cid):<20} {format_money(total):>12}", file=out)

    if args.excel:
        if settlements is None:
            print("Excel report not written.", file=out)
            return 1
        export_excel(ledger, args.excel, args.start, args.end)
        print(f"Report written to {args.excel}", file=out)
    return 0 if settlements is not None else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line"""
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return run(args)
    except (LedgerError, OSError) as ex:
        logger.error("%s", ex)
        return 1


if __name__ == "__main__":
    sys.exit(main())
