from datetime import datetime, timezone

import pandas as pd
import pytest

from lead_recall.ingestion.loaders import UnsupportedFileTypeError, import_leads, parse_manual_numbers, read_rows
from lead_recall.models import Lead

NOW = datetime(2024, 3, 1, 9, tzinfo=timezone.utc)


@pytest.fixture()
def sample_dataframe():
    return pd.DataFrame(
        [
            {"Customer Name": "Karim", "Mobile No": "01711112222", "Delivery Area": "Mirpur"},
            {"Customer Name": "", "Mobile No": "+880 1733-334444", "Delivery Area": ""},
            {"Customer Name": "", "Mobile No": "", "Delivery Area": ""},
        ]
    )


def test_read_rows_from_csv_keeps_leading_zeros(sample_dataframe, tmp_path) -> None:
    csv_path = tmp_path / "leads.csv"
    sample_dataframe.to_csv(csv_path, index=False)

    rows = read_rows(csv_path)

    assert len(rows) == 2
    assert rows[0] == {"Customer Name": "Karim", "Mobile No": "01711112222", "Delivery Area": "Mirpur"}
    assert rows[1]["Customer Name"] == ""


def test_read_rows_from_excel(sample_dataframe, tmp_path) -> None:
    excel_path = tmp_path / "leads.xlsx"
    sample_dataframe.to_excel(excel_path, index=False)

    rows = read_rows(excel_path)

    assert [row["Mobile No"] for row in rows] == ["01711112222", "+880 1733-334444"]


def test_unsupported_file_extension(tmp_path) -> None:
    bad_path = tmp_path / "leads.json"
    bad_path.write_text("{}", encoding="utf-8")

    with pytest.raises(UnsupportedFileTypeError):
        read_rows(bad_path)


def test_import_leads_matches_columns_and_fills_defaults() -> None:
    rows = [
        {"Customer Name": "Karim", "Mobile No": "01711112222", "Delivery Area": "Mirpur"},
        {"Customer Name": "", "Mobile No": "+880 1733-334444", "Delivery Area": ""},
    ]

    result = import_leads(rows, now=NOW, business_id="biz-1")

    assert result.imported == 2
    first, second = result.leads
    assert first.phone_number == "01711112222"
    assert first.customer_name == "Karim"
    assert first.address == "Mirpur"
    assert first.status == "pending"
    assert first.moderator_id == ""
    assert first.assigned_date == ""
    assert first.business_id == "biz-1"
    assert first.id.startswith("lead-")
    assert second.phone_number == "01733334444"
    assert second.customer_name == "Prospect"
    assert first.id != second.id


def test_import_leads_counts_duplicates_and_skips() -> None:
    existing = [Lead(id="l1", phone_number="+8801711112222")]
    rows = [
        {"phone": "01711112222", "name": "Known"},
        {"phone": "01799998888", "name": "New"},
        {"phone": "8801799998888", "name": "Repeat in batch"},
        {"phone": "12345", "name": "Too short"},
        {"name": "No phone column"},
    ]

    result = import_leads(rows, existing, now=NOW)

    assert [lead.customer_name for lead in result.leads] == ["New"]
    assert result.duplicates == 2
    assert result.skipped == 2


def test_import_leads_assigns_date_only_with_moderator() -> None:
    rows = [{"phone": "01799998888"}]

    assigned = import_leads(rows, now=NOW, moderator_id="mod-1", assigned_date="2024-03-02").leads[0]
    unassigned = import_leads(rows, now=NOW, assigned_date="2024-03-02").leads[0]

    assert assigned.moderator_id == "mod-1"
    assert assigned.assigned_date == "2024-03-02"
    assert unassigned.assigned_date == ""


def test_import_leads_understands_bengali_headers() -> None:
    rows = [{"নাম": "করিম", "মোবাইল": "01711112222", "ঠিকানা": "ঢাকা"}]

    lead = import_leads(rows, now=NOW).leads[0]

    assert lead.phone_number == "01711112222"
    assert lead.customer_name == "করিম"
    assert lead.address == "ঢাকা"


def test_customer_phone_column_is_not_mistaken_for_the_name() -> None:
    rows = [{"customer_phone": "01711112222", "customer_name": "Karim"}]

    assert import_leads(rows, now=NOW).leads[0].customer_name == "Karim"


def test_parse_manual_numbers_splits_on_commas_and_newlines() -> None:
    rows = parse_manual_numbers("01711112222, 01733334444\n123\n\n+8801799998888", name="Walk-in", address="Shop")

    assert [row["Phone"] for row in rows] == ["01711112222", "01733334444", "+8801799998888"]
    assert all(row["Name"] == "Walk-in" and row["Address"] == "Shop" for row in rows)

    result = import_leads(rows, now=NOW)
    assert result.imported == 3
    assert result.leads[0].customer_name == "Walk-in"
