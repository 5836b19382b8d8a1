"""Export utilities for contact worklists and customer registries."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, MutableMapping, Optional, Union

import pandas as pd

from ..models import CustomerSummary, EnrichedContact

PathLike = Union[str, Path]

CONTACT_COLUMNS = [
    "phone",
    "name",
    "address",
    "lead_id",
    "current_status",
    "moderator_id",
    "total_orders",
    "last_call_date",
    "days_since_call",
    "last_order_date",
    "days_since_order",
]
CUSTOMER_COLUMNS = [
    "phone",
    "name",
    "address",
    "kind",
    "total_orders",
    "total_spent",
    "last_activity_at",
    "loyal",
]


def contacts_to_dataframe(contacts: Iterable[EnrichedContact]) -> pd.DataFrame:
    """Convert reconciled contacts into a :class:`pandas.DataFrame`, keeping their order."""

    frame = pd.DataFrame([contact.as_row() for contact in contacts], columns=CONTACT_COLUMNS)
    for column in ("days_since_call", "days_since_order"):
        frame[column] = frame[column].astype("Int64")
    return frame


def customers_to_dataframe(customers: Iterable[CustomerSummary]) -> pd.DataFrame:
    return pd.DataFrame([customer.as_row() for customer in customers], columns=CUSTOMER_COLUMNS)


def export_dataframe(
    dataframe: pd.DataFrame,
    path: PathLike,
    *,
    sheet_name: str = "Contacts",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write ``dataframe`` to a CSV, TSV or Excel file chosen by extension."""

    exporter_kwargs = dict(exporter_kwargs or {})
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(output_path, index=False, **exporter_kwargs)
        return output_path

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(output_path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return output_path

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["contacts_to_dataframe", "customers_to_dataframe", "export_dataframe"]
