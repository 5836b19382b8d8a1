"""Utilities for importing leads from spreadsheets and exporting contact views."""

from .exporters import contacts_to_dataframe, customers_to_dataframe, export_dataframe
from .loaders import UnsupportedFileTypeError, import_leads, parse_manual_numbers, read_rows

__all__ = [
    "contacts_to_dataframe",
    "customers_to_dataframe",
    "export_dataframe",
    "import_leads",
    "parse_manual_numbers",
    "read_rows",
    "UnsupportedFileTypeError",
]
