import pytest

from lead_recall.phone import is_valid_key, normalize_phone


@pytest.mark.parametrize(
    "raw",
    ["+8801712345678", "01712345678", "8801712345678", "1712345678", "+880 1712-345678", "(017) 1234 5678"],
)
def test_international_and_local_forms_share_a_key(raw) -> None:
    assert normalize_phone(raw) == "01712345678"


def test_country_code_without_trunk_is_dropped() -> None:
    assert normalize_phone("881712345678") == "01712345678"


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "+-()"])
def test_empty_and_non_numeric_input_yields_empty_string(raw) -> None:
    assert normalize_phone(raw) == ""


def test_numbers_from_spreadsheets_are_coerced() -> None:
    assert normalize_phone(1712345678) == "01712345678"
    assert normalize_phone(1712345678.0) == "01712345678"


def test_short_numbers_are_returned_unmodified_and_rejected() -> None:
    phone = normalize_phone("12-345")
    assert phone == "12345"
    assert not is_valid_key(phone)


def test_long_numbers_pass_through() -> None:
    assert normalize_phone("017123456789") == "017123456789"


@pytest.mark.parametrize(
    "raw",
    ["+8801712345678", "1712345678", "88017", "8888", "880880171234567", "0088 01712 345678", "12", None],
)
def test_normalization_is_idempotent(raw) -> None:
    once = normalize_phone(raw)
    assert normalize_phone(once) == once
