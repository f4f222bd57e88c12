"""
Excel export functionality for TripSplit
"""
from __future__ import annotations
import logging
from typing import Dict

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from computations import (
    SETTLE_EPS,
    compute_report,
    compute_summary,
    expense_log,
)
from models import Session

logger = logging.getLogger(__name__)

AMOUNT_FORMAT = "#,##0.00"


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
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _format_column(ws, col: int, first_row: int = 2):
    for r in range(first_row, ws.max_row + 1):
        ws.cell(r, col).number_format = AMOUNT_FORMAT


def _new_sheet(wb: Workbook, title: str, headers):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    return ws


def export_excel(
    session: Session,
    filepath: str,
    currency: str = "",
    eps: float = SETTLE_EPS
) -> None:
    """
    Export session to Excel file with sheets:
    - Expenses (newest first)
    - Summary (paid / consumed / net per member)
    - Transfers (minimal settling payments)
    - Details (per-pair debts with their contributing expenses)
    """
    wb = Workbook()
    wb.remove(wb.active)

    names: Dict[int, str] = {m.id: m.name for m in session.members}

    def known(*ids) -> bool:
        return all(i in names for i in ids)

    amount_header = f"Amount ({currency})" if currency else "Amount"
    report = compute_report(session.members, session.expenses, eps)

    ws = _new_sheet(wb, "Expenses", ["Date", "Description", amount_header, "Paid by", "Paid for"])
    # rows whose payer or party is not a member are not rendered
    for e, payer, paid_for in expense_log(session.members, session.expenses):
        ws.append([e.date, e.description, e.amount, payer, ", ".join(paid_for)])
    _format_column(ws, 3)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Summary", ["Member", "Paid", "Consumed", "Net (Paid-Consumed)"])
    for s in compute_summary(session.members, session.expenses):
        ws.append([s.name, s.paid, s.consumed, s.net])
    for c in range(2, 5):
        _format_column(ws, c)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Transfers", ["From (Debtor)", "To (Creditor)", amount_header])
    for t in report.transactions:
        if known(t.from_id, t.to_id):
            ws.append([names[t.from_id], names[t.to_id], t.amount])
    _format_column(ws, 3)
    _autosize_columns(ws)

    # one bold total row per pair, then its expenses
    ws = _new_sheet(wb, "Details", ["From", "To", amount_header, "Date", "Expense"])
    for agg in report.aggregated:
        if not known(agg.from_id, agg.to_id):
            continue
        ws.append([names[agg.from_id], names[agg.to_id], agg.total_amount, None, None])
        total_row = ws.max_row
        for c in range(1, 4):
            ws.cell(total_row, c).font = Font(bold=True)
            ws.cell(total_row, c).fill = PatternFill("solid", fgColor="D9E1F2")
        for d in agg.details:
            ws.append([None, None, d.amount, d.expense_date, d.expense_description])
    _format_column(ws, 3)
    _autosize_columns(ws)

    wb.save(filepath)
    logger.info("Exported Excel report to %s", filepath)
