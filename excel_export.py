"""
Excel export functionality for ShareLedger
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from exceptions import InvalidExpense
from models import Ledger
from computations import (
    compute_summary,
    filter_expenses,
    filter_payments,
    resolve_split,
    settle_ledger,
    totals_by_category,
)

MONEY_FORMAT = "0.00"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_columns(ws, first_col, last_col):
    for r in range(2, ws.max_row + 1):
        for c in range(first_col, last_col + 1):
            ws.cell(r, c).number_format = MONEY_FORMAT


def _new_sheet(wb, title, headers):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    return ws


def export_excel(
    ledger: Ledger,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export ledger to Excel file with sheets:
    - Expenses and Payments in the date range, with each person's share
    - Summary per person and spending per category for the same range
    - Settlements computed over the whole ledger, not just the range
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    people = ledger.person_ids()
    names = [ledger.person_name(p) for p in people]
    exps = filter_expenses(ledger.expenses, start=start, end=end)
    pays = filter_payments(ledger.payments, start=start, end=end)

    # Expenses: one share column per person
    ws = _new_sheet(wb, "Expenses", ["Date", "Title", "Category", "Paid by", "Amount", "Mode"] + names)
    for e in sorted(exps, key=lambda e: (e.date, e.id)):
        try:
            shares = resolve_split(e).shares
        except InvalidExpense:
            shares = {}
        row = [
            e.date,
            e.title,
            ledger.category_name(e.category),
            ledger.person_name(e.payer),
            e.amount,
            str(getattr(e.split_mode, "value", e.split_mode)),
        ]
        row += [shares.get(p) for p in people]
        ws.append(row)
    if exps:
        ws.append(["TOTALS"] + [None] * (len(people) + 5))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        # Excel formulas keep the totals traceable
        for col in [5] + list(range(7, 7 + len(people))):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"
    _money_columns(ws, 5, 5)
    _money_columns(ws, 7, 6 + len(people))
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Payments", ["Date", "From", "To", "Amount"])
    for pm in sorted(pays, key=lambda p: (p.date, p.id)):
        ws.append([pm.date, ledger.person_name(pm.payer), ledger.person_name(pm.payee), pm.amount])
    _money_columns(ws, 4, 4)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Summary", ["Person", "Paid", "Consumed", "Sent", "Received", "Net"])
    summary = compute_summary(ledger, start, end)
    for p, s in summary.items():
        ws.append([ledger.person_name(p), s["paid"], s["consumed"], s["sent"], s["received"], s["net"]])
    _money_columns(ws, 2, 6)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Categories", ["Category", "Total"])
    for cid, total in totals_by_category(exps, ledger.categories).items():
        ws.append([ledger.category_name(cid), total])
        cat = ledger.find_category(cid)
        if cat and cat.color.startswith("#") and len(cat.color) == 7:
            ws.cell(ws.max_row, 1).fill = PatternFill("solid", fgColor=cat.color[1:].upper())
    _money_columns(ws, 2, 2)
    _autosize_columns(ws)

    # Settlements always use every record
    ws = _new_sheet(wb, "Settlements", ["From (Debtor)", "To (Creditor)", "Amount"])
    _, settlements = settle_ledger(ledger, fail_fast=False)
    for s in settlements:
        ws.append([ledger.person_name(s.debtor), ledger.person_name(s.creditor), s.amount])
    _money_columns(ws, 3, 3)
    _autosize_columns(ws)

    wb.save(filepath)
