"""Utilities for bulk-importing leads from spreadsheets and pasted number lists."""
from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..dates import to_iso
from ..models import PLACEHOLDER_NAME, ImportResult, Lead
from ..phone import normalize_phone

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

PHONE_KEYS: Sequence[str] = ("phone", "mobile", "number", "contact", "customerphone", "cell", "মোবাইল", "ফোন")
NAME_KEYS: Sequence[str] = ("name", "customer", "recipient", "client", "নাম", "কাস্টমার")
ADDRESS_KEYS: Sequence[str] = ("address", "location", "area", "destination", "ঠিকানা")

_KEY_NOISE = re.compile(r"[\s_]")
_MANUAL_SEPARATORS = re.compile(r"[\n,]")


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def read_rows(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Dict[str, str]]:
    """Load the rows of a CSV/XLSX file as dictionaries of strings.

    Parameters
    ----------
    path:
        Path to the CSV/TSV/Excel file to be loaded.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`. Cells are read as text by default so phone
        numbers keep their leading zeros.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    rows: List[Dict[str, str]] = []
    for record in dataframe.fillna("").to_dict(orient="records"):
        row = {str(key): str(value).strip() for key, value in record.items()}
        if any(row.values()):
            rows.append(row)
    return rows


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    loader_kwargs.setdefault("dtype", str)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in {".xls", ".xlsx", ".xlsm"}:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=engine, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _normalize_key(value: str) -> str:
    return _KEY_NOISE.sub("", value.lower())


def _find_column(row: Mapping[str, Any], candidates: Sequence[str], exclude: Iterable[str] = ()) -> Optional[str]:
    """Return the first column whose name overlaps any candidate, either way round."""

    excluded = set(exclude)
    wanted = [_normalize_key(candidate) for candidate in candidates]
    for column in row:
        if column in excluded:
            continue
        key = _normalize_key(str(column))
        if not key:
            continue
        if any(key in candidate or candidate in key for candidate in wanted):
            return column
    return None


def _value(row: Mapping[str, Any], column: Optional[str]) -> str:
    if column is None:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def import_leads(
    rows: Iterable[Mapping[str, Any]],
    existing_leads: Iterable[Lead] = (),
    *,
    now: datetime,
    business_id: str = "",
    moderator_id: str = "",
    assigned_date: str = "",
    min_phone_length: int = 11,
) -> ImportResult:
    """Build new ``pending`` leads from loosely structured rows.

    Columns are matched by name (``Phone``, ``Mobile No``, ``customer_name``
    ...). Rows whose phone is already known, either from ``existing_leads``
    or earlier in the batch, count as duplicates; rows without a usable phone
    are skipped.
    """

    known = {normalize_phone(lead.phone_number) for lead in existing_leads}
    batch: set[str] = set()
    result = ImportResult()
    stamp = int(now.timestamp() * 1000)
    created_at = to_iso(now)

    for index, row in enumerate(rows):
        phone_column = _find_column(row, PHONE_KEYS)
        phone = normalize_phone(_value(row, phone_column))
        if len(phone) < min_phone_length:
            result.skipped += 1
            continue
        if phone in known or phone in batch:
            result.duplicates += 1
            continue
        batch.add(phone)

        used = [phone_column] if phone_column else []
        name = _value(row, _find_column(row, NAME_KEYS, exclude=used))
        address = _value(row, _find_column(row, ADDRESS_KEYS, exclude=used))
        result.leads.append(
            Lead(
                id=f"lead-{stamp}-{index}-{uuid.uuid4().hex[:5]}",
                business_id=business_id,
                phone_number=phone,
                customer_name=name or PLACEHOLDER_NAME,
                address=address,
                moderator_id=moderator_id,
                status="pending",
                assigned_date=assigned_date if moderator_id else "",
                created_at=created_at,
            )
        )

    LOGGER.info(
        "Imported %s leads (%s duplicates, %s without a usable phone)",
        result.imported,
        result.duplicates,
        result.skipped,
    )
    return result


def parse_manual_numbers(text: str, name: str = "", address: str = "") -> List[Dict[str, str]]:
    """Turn a pasted list of numbers into rows for :func:`import_leads`."""

    numbers = [item.strip() for item in _MANUAL_SEPARATORS.split(text or "")]
    return [{"Phone": number, "Name": name, "Address": address} for number in numbers if len(number) >= 10]


__all__ = ["read_rows", "import_leads", "parse_manual_numbers", "UnsupportedFileTypeError"]
