from datetime import datetime, timezone

import pytest

from lead_recall.merge import find_duplicate_leads, reconcile
from lead_recall.models import Lead, Order
from lead_recall.phone import normalize_phone

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_lead(lead_id: str, phone: str, **overrides) -> Lead:
    values = {"status": "pending", "created_at": "2024-01-01", "moderator_id": "mod-1"}
    values.update(overrides)
    return Lead(id=lead_id, phone_number=phone, **values)


def make_order(order_id: str, phone: str, created_at: str, **overrides) -> Order:
    values = {"customer_name": "Buyer", "customer_address": "Dhaka", "total_amount": 100.0}
    values.update(overrides)
    return Order(id=order_id, customer_phone=phone, created_at=created_at, **values)


def by_phone(contacts):
    return {contact.phone: contact for contact in contacts}


def test_pending_lead_and_international_order_merge_into_one_contact() -> None:
    leads = [make_lead("l1", "01711112222", status="pending", created_at="2024-01-01")]
    orders = [make_order("o1", "8801711112222", "2024-02-01", total_amount=500)]

    contacts = reconcile(leads, orders, now=NOW)

    assert len(contacts) == 1
    contact = contacts[0]
    assert contact.phone == "01711112222"
    assert contact.total_orders == 1
    assert contact.days_since_call is None
    assert contact.last_call_date is None
    assert contact.current_status == "pending"
    assert contact.moderator_id == "mod-1"
    assert contact.lead_id == "l1"
    assert contact.last_order_date == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert contact.days_since_order == 29


def test_called_lead_gets_call_age() -> None:
    contacts = reconcile([make_lead("l1", "01711112222", status="no-response", created_at="2024-02-20T10:00:00Z")], [], now=NOW)

    contact = contacts[0]
    assert contact.last_call_date == datetime(2024, 2, 20, 10, tzinfo=timezone.utc)
    assert contact.days_since_call == 9
    assert contact.last_order_date is None
    assert contact.total_orders == 0


def test_disjoint_leads_and_orders_each_produce_a_contact() -> None:
    leads = [make_lead("l1", "01711111111"), make_lead("l2", "01722222222"), make_lead("bad", "12345")]
    orders = [make_order("o1", "01733333333", "2024-02-01"), make_order("o2", "+880 1744-444444", "2024-02-02")]

    contacts = reconcile(leads, orders, now=NOW)

    assert sorted(contact.phone for contact in contacts) == [
        "01711111111",
        "01722222222",
        "01733333333",
        "01744444444",
    ]


def test_order_only_contact_is_unassigned() -> None:
    contact = reconcile([], [make_order("o1", "01733333333", "2024-02-01", customer_name="Rahim")], now=NOW)[0]

    assert contact.current_status == "unassigned"
    assert contact.moderator_id is None
    assert contact.lead_id is None
    assert contact.name == "Rahim"
    assert contact.total_orders == 1


def test_total_orders_counts_every_order_for_the_key() -> None:
    orders = [
        make_order("o1", "01711112222", "2024-01-01", total_amount=100),
        make_order("o2", "8801711112222", "2024-01-05", total_amount=200),
        make_order("o3", "01799999999", "2024-01-05"),
    ]

    contacts = by_phone(reconcile([], orders, now=NOW))

    for phone, contact in contacts.items():
        expected = sum(1 for order in orders if normalize_phone(order.customer_phone) == phone)
        assert contact.total_orders == expected
    assert contacts["01711112222"].total_orders == 2


def test_first_lead_wins_when_phones_collide() -> None:
    leads = [
        make_lead("first", "01711112222", customer_name="Karim", status="communication", moderator_id="mod-1"),
        make_lead("second", "+8801711112222", customer_name="Someone Else", status="confirmed", moderator_id="mod-2"),
    ]

    contacts = reconcile(leads, [], now=NOW)

    assert len(contacts) == 1
    assert contacts[0].lead_id == "first"
    assert contacts[0].name == "Karim"
    assert contacts[0].current_status == "communication"
    assert contacts[0].moderator_id == "mod-1"


def test_most_recent_order_date_wins_regardless_of_input_order() -> None:
    orders = [
        make_order("o1", "01711112222", "2024-02-10"),
        make_order("o2", "01711112222", "2024-01-10"),
        make_order("o3", "01711112222", "2024-02-20"),
    ]

    contact = reconcile([], orders, now=NOW)[0]

    assert contact.last_order_date == datetime(2024, 2, 20, tzinfo=timezone.utc)
    assert contact.days_since_order == 10


def test_orders_never_change_lead_status_or_owner() -> None:
    leads = [make_lead("l1", "01711112222", status="confirmed", moderator_id="mod-7")]
    orders = [make_order("o1", "01711112222", "2024-02-01")]

    contact = reconcile(leads, orders, now=NOW)[0]

    assert contact.current_status == "confirmed"
    assert contact.moderator_id == "mod-7"


def test_newer_order_refreshes_name_and_address() -> None:
    leads = [make_lead("l1", "01711112222", customer_name="Old Name", address="Old Street", created_at="2024-01-01")]
    orders = [make_order("o1", "01711112222", "2024-02-01", customer_name="New Name", customer_address="New Street")]

    contact = reconcile(leads, orders, now=NOW)[0]

    assert contact.name == "New Name"
    assert contact.address == "New Street"


def test_order_on_the_same_instant_as_the_lead_refreshes_identity() -> None:
    leads = [make_lead("l1", "01711112222", customer_name="Lead Name", created_at="2024-02-01T00:00:00Z")]
    orders = [make_order("o1", "01711112222", "2024-02-01T00:00:00Z", customer_name="Order Name")]

    assert reconcile(leads, orders, now=NOW)[0].name == "Order Name"


def test_older_order_keeps_lead_identity_unless_placeholder() -> None:
    leads = [
        make_lead("l1", "01711112222", customer_name="Lead Name", created_at="2024-02-15"),
        make_lead("l2", "01733334444", customer_name=None, created_at="2024-02-15"),
    ]
    orders = [
        make_order("o1", "01711112222", "2024-01-01", customer_name="Old Order Name"),
        make_order("o2", "01733334444", "2024-01-01", customer_name="Real Name", customer_address="Sylhet"),
    ]

    contacts = by_phone(reconcile(leads, orders, now=NOW))

    assert contacts["01711112222"].name == "Lead Name"
    assert contacts["01733334444"].name == "Real Name"
    assert contacts["01733334444"].address == "Sylhet"


def test_unparsable_dates_are_absent_and_lose_comparisons() -> None:
    leads = [make_lead("l1", "01711112222", status="confirmed", created_at="not a date")]
    orders = [
        make_order("o1", "01711112222", "garbage"),
        make_order("o2", "01711112222", "2024-02-01"),
        make_order("o3", "01711112222", ""),
    ]

    contact = reconcile(leads, orders, now=NOW)[0]

    assert contact.last_call_date is None
    assert contact.days_since_call is None
    assert contact.total_orders == 3
    assert contact.last_order_date == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_future_dates_never_produce_negative_ages() -> None:
    contact = reconcile([], [make_order("o1", "01711112222", "2024-03-05")], now=NOW)[0]

    assert contact.days_since_order == 0


def test_missing_identity_falls_back_to_defaults() -> None:
    contacts = by_phone(
        reconcile(
            [make_lead("l1", "01711112222", customer_name=None, address=None)],
            [make_order("o1", "01799998888", "garbage", customer_name="", customer_address="")],
            now=NOW,
        )
    )

    assert contacts["01711112222"].name == "Prospect"
    assert contacts["01711112222"].address == ""
    assert contacts["01799998888"].name == "Prospect"
    assert contacts["01799998888"].last_order_date is None


def test_reconcile_does_not_mutate_inputs() -> None:
    leads = [make_lead("l1", "+8801711112222")]
    orders = [make_order("o1", "8801711112222", "2024-02-01")]

    reconcile(leads, orders, now=NOW)

    assert leads[0].phone_number == "+8801711112222"
    assert orders[0].customer_phone == "8801711112222"


@pytest.mark.parametrize("now", [NOW, datetime(2025, 1, 1, tzinfo=timezone.utc)])
def test_order_ages_are_never_negative(now) -> None:
    orders = [make_order(f"o{i}", f"0171111222{i}", f"2024-0{i}-01") for i in range(1, 5)]

    for contact in reconcile([], orders, now=now):
        assert contact.days_since_order is not None
        assert contact.days_since_order >= 0


def test_find_duplicate_leads_reports_everything_after_the_first() -> None:
    leads = [
        make_lead("a", "01711112222"),
        make_lead("b", "+8801711112222"),
        make_lead("c", "01733334444"),
        make_lead("d", "1711112222"),
        make_lead("e", "123"),
    ]

    assert find_duplicate_leads(leads) == ["b", "d"]


@pytest.mark.parametrize("keyword", ["now", "Today", " NOW "])
def test_relative_date_keywords_are_treated_as_absent(keyword) -> None:
    leads = [make_lead("l1", "01711112222", status="confirmed", created_at=keyword)]
    orders = [make_order("o1", "01711112222", keyword)]

    contact = reconcile(leads, orders, now=NOW)[0]

    assert contact.last_call_date is None
    assert contact.days_since_call is None
    assert contact.last_order_date is None
    assert contact.days_since_order is None
    assert contact.total_orders == 1
