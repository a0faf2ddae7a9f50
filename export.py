# export.py
# Writes the ledger to an Excel workbook

import logging
import pathlib
from typing import Iterable, Union

from openpyxl import Workbook
from openpyxl.styles import Font

from config import EXPORT_SHEET_TITLE
from ledger import Category, Ledger, TimeEntry

HEADERS = ["Owner", "Date", "Project", "Category", "Start", "End", "Hours"]
HOURS_FORMAT = '0.00'
# Column widths in characters, same order as HEADERS
COLUMN_WIDTHS = {"A": 18, "B": 12, "C": 20, "D": 10, "E": 8, "F": 12, "G": 9}


def _hours(minutes: int) -> float:
    return round(minutes / 60, 2)


def export_workbook(entries: Iterable[TimeEntry], path: Union[str, pathlib.Path]) -> pathlib.Path:
    """Writes one row per entry followed by work, break and overtime totals.

    Totals are computed over the given entries. Returns the written path.
    """
    ledger = Ledger(entries=list(entries))
    path = pathlib.Path(path)

    wb = Workbook()
    ws = wb.active
    ws.title = EXPORT_SHEET_TITLE
    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for entry in ledger:
        ws.append([
            entry.owner,
            entry.date,
            entry.project,
            entry.category.label,
            entry.start_time,
            entry.end_time,
            _hours(entry.duration_minutes),
        ])
        ws.cell(row=ws.max_row, column=len(HEADERS)).number_format = HOURS_FORMAT

    trailer = [
        ("Total work", _hours(ledger.total_minutes(Category.WORK))),
        ("Total break", _hours(ledger.total_minutes(Category.BREAK))),
        ("Overtime", round(ledger.overtime_hours(), 2)),
    ]
    for label, value in trailer:
        ws.append(["", "", "", "", "", label, value])
        ws.cell(row=ws.max_row, column=len(HEADERS) - 1).font = Font(bold=True)
        ws.cell(row=ws.max_row, column=len(HEADERS)).number_format = HOURS_FORMAT

    for column, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[column].width = width

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logging.info(f"Exported {len(ledger)} entries to {path}")
    return path
