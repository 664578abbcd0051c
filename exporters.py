"""
Text, CSV and Excel export functionality for FundLedger
"""
from __future__ import annotations
import csv
from datetime import datetime
from decimal import Decimal
from typing import List, Mapping, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import EntryKind, FundId, LedgerEntry, LedgerState
from computations import fund_totals
from utils import export_stamp, format_amount

EXPORT_HEADER = "FundLedger export"


def _label(labels: Optional[Mapping[FundId, str]], f: FundId) -> str:
    if labels and labels.get(f):
        return labels[f]
    return f


def _entry_lines(e: LedgerEntry, funds: List[FundId], labels) -> List[str]:
    lines = [f"[{e.timestamp}] {e.kind.value}"]
    for f in funds:
        d = e.delta.get(f, Decimal("0"))
        if d == 0:
            continue
        lines.append(
            f"  {_label(labels, f)}: gross {format_amount(e.gross.get(f, Decimal('0')))}"
            f", allocation {e.allocation.get(f, Decimal('0'))}"
            f", change {format_amount(d, signed=True)}"
            f", balance {format_amount(e.resulting_balance.get(f, Decimal('0')))}"
        )
    if e.note:
        lines.append(f"  note: {e.note}")
    return lines


def render_ledger_text(state: LedgerState, labels: Optional[Mapping[FundId, str]] = None) -> str:
    """
    Render the whole ledger as plain text.
    Output depends only on state: header, current balances, then entries newest first.
    """
    lines = [EXPORT_HEADER, ""]
    lines.append("Balances:")
    for f in state.funds:
        lines.append(f"  {_label(labels, f)}: {format_amount(state.balance[f])}")
    lines.append("")
    lines.append(f"History ({len(state.history)} entries, newest first):")
    if not state.history:
        lines.append("  (no entries)")
    for e in state.history:
        lines.extend(_entry_lines(e, state.funds, labels))
    return "\n".join(lines) + "\n"


def export_filename(now: Optional[datetime] = None, ext: str = "txt") -> str:
    """Generated download name, e.g. ledger-export-20261019-140322.txt"""
    return f"ledger-export-{export_stamp(now)}.{ext}"


def write_text_export(state: LedgerState, filepath: str, labels=None) -> None:
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(render_ledger_text(state, labels))


def export_history_to_csv(state: LedgerState, filepath: str) -> None:
    """
    Export history to CSV, newest first.
    Columns: timestamp, created_at, kind, then gross/allocation/delta/balance per fund, note
    """
    funds = state.funds
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        header = ['timestamp', 'created_at', 'kind']
        for fund in funds:
            header += [f'{fund}_gross', f'{fund}_allocation', f'{fund}_delta', f'{fund}_balance']
        header.append('note')
        writer.writerow(header)

        for e in state.history:
            row = [e.timestamp, e.created_at, e.kind.value]
            for fund in funds:
                row += [
                    str(e.gross.get(fund, Decimal("0"))),
                    str(e.allocation.get(fund, Decimal("0"))),
                    str(e.delta.get(fund, Decimal("0"))),
                    str(e.resulting_balance.get(fund, Decimal("0"))),
                ]
            row.append(e.note)
            writer.writerow(row)


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
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_excel(state: LedgerState, filepath: str, labels: Optional[Mapping[FundId, str]] = None) -> None:
    """
    Export ledger to an Excel workbook:
    - History sheet, one row per entry (newest first)
    - Balances sheet with initial amount, income, expense and current balance per fund
    """
    wb = Workbook()
    wb.remove(wb.active)
    funds = state.funds

    ws = wb.create_sheet("History")
    headers = ["time", "kind"]
    for f in funds:
        name = _label(labels, f)
        headers += [f"{name} gross", f"{name} allocation", f"{name} change", f"{name} balance"]
    headers.append("note")
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"

    for e in state.history:
        row = [e.timestamp, e.kind.value]
        for f in funds:
            row += [
                float(e.gross.get(f, 0)),
                float(e.allocation.get(f, 0)),
                float(e.delta.get(f, 0)),
                float(e.resulting_balance.get(f, 0)),
            ]
        row.append(e.note)
        ws.append(row)
        if e.kind is EntryKind.EXPENSE:
            ws.cell(ws.max_row, 2).font = Font(color="C00000")

    for r in range(2, ws.max_row + 1):
        for i in range(len(funds)):
            base = 3 + 4 * i
            for c in (base, base + 2, base + 3):
                ws.cell(r, c).number_format = "0.00"
    _autosize_columns(ws)

    ws = wb.create_sheet("Balances")
    ws.append(["Fund", "Initial", "Income", "Expense", "Net", "Balance"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    totals = fund_totals(state.history, funds)
    for f in funds:
        t = totals[f]
        ws.append([
            _label(labels, f),
            float(state.initial_amount[f]),
            float(t["income"]),
            float(t["expense"]),
            float(t["net"]),
            float(state.balance[f]),
        ])
    for r in range(2, ws.max_row + 1):
        for c in range(2, 7):
            ws.cell(r, c).number_format = "0.00"
    _autosize_columns(ws)

    wb.save(filepath)
