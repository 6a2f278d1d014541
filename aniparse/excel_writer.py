#!/usr/bin/env python3
"""
Utility helpers for writing Excel reports in a consistent table style.

Thin wrappers around openpyxl used by the evaluation harness: one table per
sheet with a bold frozen header row, auto-sized columns and optional
highlighting of cells that differ from the reference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo


HighlightPredicate = Callable[[Any], bool]

MAX_COLUMN_WIDTH = 60
# Excel rejects longer sheet titles and these characters in them
MAX_SHEET_TITLE = 31
_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


@dataclass(frozen=True)
class ExcelSheetData:
    """
    Describes a sheet to be written to the workbook.

    Attributes:
        name: Sheet/tab name.
        headers: Ordered list of column headers.
        rows: Row values already ordered to match headers.
        highlight_predicate: Cells for which this returns True get a yellow fill.
    """

    name: str
    headers: Sequence[str]
    rows: Sequence[Sequence[Any]]
    highlight_predicate: Optional[HighlightPredicate] = None


def sheet_title(name: str) -> str:
    """Make a name usable as an Excel sheet title."""
    title = _INVALID_TITLE_CHARS.sub("", name).strip() or "Sheet"
    return title[:MAX_SHEET_TITLE]


def table_name(name: str) -> str:
    """Make a name usable as an Excel table display name."""
    cleaned = re.sub(r"\W", "", name)
    if not cleaned or not (cleaned[0].isalpha() or cleaned[0] == "_"):
        cleaned = "T" + cleaned
    return cleaned + "Table"


def _write_excel_sheet(ws, sheet: ExcelSheetData) -> None:
    """Render a single sheet using provided headers/rows and optional highlighting."""
    ws.title = sheet_title(sheet.name)

    headers = list(sheet.headers)
    bold_font = Font(bold=True)
    for col_idx, header in enumerate(headers, 1):
        ws.cell(row=1, column=col_idx, value=header).font = bold_font
    ws.freeze_panes = "A2"

    yellow_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")

    for row_idx, row in enumerate(sheet.rows, 2):
        for col_idx, value in enumerate(row, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if sheet.highlight_predicate is not None and sheet.highlight_predicate(value):
                cell.fill = yellow_fill

    for col_idx in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_idx)
        max_length = len(headers[col_idx - 1])

        for cell in ws[col_letter]:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        ws.column_dimensions[col_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)

    if sheet.rows and headers:
        last_col = get_column_letter(len(headers))
        table = Table(displayName=table_name(sheet.name), ref=f"A1:{last_col}{len(sheet.rows) + 1}")
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)


def write_excel_workbook(output_path: Path | str, sheets: Sequence[ExcelSheetData]) -> Path:
    """
    Write a workbook consisting of the provided sheets.

    Args:
        output_path: Destination path for the workbook.
        sheets: Ordered sheet definitions to render.

    Returns:
        Path to the written workbook.

    Raises:
        ValueError: If no sheets are given.
    """
    if not sheets:
        raise ValueError("At least one sheet must be provided to write a workbook.")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    for idx, sheet in enumerate(sheets):
        ws = wb.active if idx == 0 else wb.create_sheet()
        _write_excel_sheet(ws, sheet)

    wb.save(output_path)
    return output_path
