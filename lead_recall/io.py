"""Input/output helpers for lead and order exports from the dashboard database."""
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .models import Lead, Order, leads_from_rows, orders_from_rows

_CSV_SUFFIXES = {".csv"}
_JSON_SUFFIXES = {".json"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xltx", ".xltm"}


def load_leads(path: str | Path) -> List[Lead]:
    return leads_from_rows(_load_rows(Path(path)))


def load_orders(path: str | Path) -> List[Order]:
    return orders_from_rows(_load_rows(Path(path)))


def _load_rows(path: Path) -> List[Dict[str, Any]]:
    suffix = path.suffix.lower()
    if suffix in _CSV_SUFFIXES:
        return _load_rows_from_csv(path)
    if suffix in _JSON_SUFFIXES:
        return _load_rows_from_json(path)
    if suffix in _EXCEL_SUFFIXES:
        return _load_rows_from_excel(path)
    raise ValueError(f"Unsupported input format '{path.suffix}'. Use CSV, JSON or Excel")


def _load_rows_from_csv(path: Path) -> List[Dict[str, Any]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        return [{key: value for key, value in row.items() if key} for row in reader]


def _load_rows_from_json(path: Path) -> List[Dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        # Accept the ``{"data": [...]}`` envelope returned by REST exports.
        data = data.get("data", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of rows in '{path}'")
    return [row for row in data if isinstance(row, dict)]


def _load_rows_from_excel(path: Path) -> List[Dict[str, Any]]:
    from openpyxl import load_workbook

    workbook = load_workbook(filename=path, read_only=True)
    try:
        rows = workbook.active.iter_rows(values_only=True)
        try:
            header_row = next(rows)
        except StopIteration:
            return []
        header = [str(cell).strip() if cell is not None else "" for cell in header_row]
        return [
            {header[idx]: value for idx, value in enumerate(cells) if idx < len(header) and header[idx]}
            for cells in rows
            if any(value is not None for value in cells)
        ]
    finally:
        workbook.close()


def write_leads(path: str | Path, leads: Iterable[Lead]) -> Path:
    """Write leads as database rows to a CSV or JSON file."""

    file_path = Path(path)
    rows = [lead.to_row() for lead in leads]
    suffix = file_path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        file_path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
        return file_path
    if suffix in _CSV_SUFFIXES:
        fieldnames = list(Lead("", "").to_row())
        with file_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames)
            writer.writeheader()
            for row in rows:
                writer.writerow({key: "" if value is None else value for key, value in row.items()})
        return file_path
    raise ValueError(f"Unsupported output format '{file_path.suffix}'. Use CSV or JSON")
