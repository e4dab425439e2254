"""Log file writers for run reports.

One writer per file format, looked up in ``WRITERS``. A failing format is
logged and collected; the remaining formats are still written.
"""

import csv
import json
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import describe

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
CellStyle = Callable[[Cell, str, Any], None]

CSV_DELIMITER = ";"
DEFAULT_SHEET_NAME = "Overview"
DEFAULT_TABLE_NAME = "Data"
TABLE_STYLE = "TableStyleMedium2"
MAX_COLUMN_WIDTH = 80

_ERROR_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
_ERROR_FONT = Font(color="9C0006")


@dataclass
class SinkWriteOutcome:
    """Paths written and per-format failures of one write call."""

    paths: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SheetOptions:
    sheet_name: str = DEFAULT_SHEET_NAME
    table_name: str = DEFAULT_TABLE_NAME
    cell_style: CellStyle | None = None


def highlight_errors(cell: Cell, column: str, value: Any) -> None:
    """Cell style marking failed actions in red."""
    if column == "Error" and value:
        cell.fill = _ERROR_FILL
        cell.font = _ERROR_FONT
    elif column == "Moved" and value is False:
        cell.font = _ERROR_FONT


def normalize_formats(formats: Iterable[str]) -> list[str]:
    """Strip dots and case, drop duplicates, sort."""
    return sorted({f.strip().lstrip(".").lower() for f in formats if f.strip()})


def _plain(value: Any) -> Any:
    """Convert a row value into something JSON can hold."""
    if isinstance(value, BaseException):
        return describe(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, Path):
        return str(value)
    return value


def _to_text(value: Any) -> str:
    value = _plain(value)
    if value is None:
        return ""
    return str(value)


def _columns(rows: list[Row]) -> list[str]:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def _write_csv(path: Path, rows: list[Row], columns: list[str], append: bool, options: SheetOptions) -> None:
    write_header = not (append and path.exists() and path.stat().st_size > 0)

    with open(path, "a" if append else "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter=CSV_DELIMITER)
        if write_header:
            writer.writerow(columns)
        for row in rows:
            writer.writerow([_to_text(row.get(key)) for key in columns])


def _write_json(path: Path, rows: list[Row], columns: list[str], append: bool, options: SheetOptions) -> None:
    # JSON has no streaming append: read back, extend, rewrite
    existing: list[Any] = []
    if append and path.exists():
        content = path.read_text(encoding="utf-8").strip()
        if content:
            loaded = json.loads(content)
            existing = loaded if isinstance(loaded, list) else [loaded]

    records = [{key: _plain(row.get(key)) for key in columns} for row in rows]
    path.write_text(
        json.dumps(existing + records, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def _write_txt(path: Path, rows: list[Row], columns: list[str], append: bool, options: SheetOptions) -> None:
    width = max(len(key) for key in columns)

    with open(path, "a" if append else "w", encoding="utf-8") as f:
        for row in rows:
            for key in columns:
                f.write(f"{key.ljust(width)} : {_to_text(row.get(key))}\n")
            f.write("\n")


def _cell_value(value: Any) -> Any:
    value = _plain(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _header(sheet: Worksheet) -> list[str]:
    # iter_rows does not create cells, so the append cursor stays put
    first_row = next(sheet.iter_rows(min_row=1, max_row=1, values_only=True), ())
    return [str(v) for v in first_row if v is not None]


def _update_table(sheet: Worksheet, table_name: str, column_count: int) -> None:
    ref = f"A1:{get_column_letter(column_count)}{max(sheet.max_row, 2)}"

    if table_name in sheet.tables:
        table = sheet.tables[table_name]
        table.ref = ref
        if table.autoFilter is not None:
            table.autoFilter.ref = ref
        return

    table = Table(displayName=table_name, ref=ref)
    table.tableStyleInfo = TableStyleInfo(name=TABLE_STYLE, showRowStripes=True)
    sheet.add_table(table)


def _autosize(sheet: Worksheet) -> None:
    for column_cells in sheet.columns:
        length = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
        letter = get_column_letter(column_cells[0].column)
        sheet.column_dimensions[letter].width = min(length + 2, MAX_COLUMN_WIDTH)


def _write_xlsx(path: Path, rows: list[Row], columns: list[str], append: bool, options: SheetOptions) -> None:
    if append and path.exists():
        workbook = load_workbook(path)
    else:
        # No overwrite mode: remove the old workbook first
        if path.exists():
            path.unlink()
        workbook = Workbook()
        workbook.remove(workbook.active)

    header: list[str] = []
    if options.sheet_name in workbook.sheetnames:
        sheet = workbook[options.sheet_name]
        header = _header(sheet)
    else:
        sheet = workbook.create_sheet(title=options.sheet_name)

    if not header:
        header = columns
        sheet.append(header)
        for cell in sheet[1]:
            cell.font = Font(bold=True)

    first_new_row = sheet.max_row + 1
    for row in rows:
        sheet.append([_cell_value(row.get(key)) for key in header])

    if options.cell_style is not None:
        for row_cells in sheet.iter_rows(min_row=first_new_row, max_row=sheet.max_row):
            for cell, key in zip(row_cells, header):
                options.cell_style(cell, key, cell.value)

    _update_table(sheet, options.table_name, len(header))
    sheet.freeze_panes = "A2"
    _autosize(sheet)
    workbook.save(path)


Writer = Callable[[Path, list[Row], list[str], bool, SheetOptions], None]

WRITERS: dict[str, Writer] = {
    "csv": _write_csv,
    "json": _write_json,
    "txt": _write_txt,
    "xlsx": _write_xlsx,
}


def _table_name(name: str) -> str:
    cleaned = re.sub(r"\W", "_", name)
    if not cleaned or not (cleaned[0].isalpha() or cleaned[0] == "_"):
        cleaned = f"_{cleaned}"
    return cleaned


def write_log_files(
    rows: Iterable[Row],
    path_stem: Path,
    formats: Iterable[str],
    append: bool = False,
    *,
    sheet_name: str = DEFAULT_SHEET_NAME,
    table_name: str = DEFAULT_TABLE_NAME,
    cell_style: CellStyle | None = None,
) -> SinkWriteOutcome:
    """Write rows to ``<path_stem>.<format>`` for every requested format.

    Formats are processed in sorted order so the returned paths are the
    same for the same set of formats. Failures never raise; they are
    logged as warnings and listed in the outcome.
    """
    outcome = SinkWriteOutcome()
    rows = list(rows)
    if not rows:
        logger.debug(f"No rows to write for {path_stem.name}")
        return outcome

    columns = _columns(rows)
    options = SheetOptions(
        sheet_name=sheet_name[:31],  # Excel sheet name limit
        table_name=_table_name(table_name),
        cell_style=cell_style,
    )

    for fmt in normalize_formats(formats):
        path = path_stem.with_name(f"{path_stem.name}.{fmt}")
        writer = WRITERS.get(fmt)
        if writer is None:
            message = f"Unsupported log file format '{fmt}' for '{path_stem.name}'"
            logger.warning(message)
            outcome.errors.append(message)
            continue

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            writer(path, rows, columns, append, options)
        except Exception as e:
            message = f"Failed to write log file '{path}': {describe(e)}"
            logger.warning(message)
            outcome.errors.append(message)
            continue

        logger.info(f"Log file written: {path}")
        outcome.paths.append(path)

    return outcome
