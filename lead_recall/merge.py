"""Merge leads and orders that share a phone number into unified contact views."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .dates import EPOCH, days_between, parse_timestamp
from .models import (
    PLACEHOLDER_NAME,
    UNASSIGNED,
    CustomerSummary,
    EnrichedContact,
    Lead,
    Order,
)
from .phone import is_valid_key, normalize_phone

LOGGER = logging.getLogger(__name__)


# --- Merge policy ---

def _should_seed(contacts: Dict[str, EnrichedContact], phone: str) -> bool:
    """First lead wins: a key is only seeded by the first lead that produces it."""
    return phone not in contacts


def _is_newer_order(order_date: Optional[datetime], current: Optional[datetime]) -> bool:
    """An order replaces the stored most-recent date only when strictly newer."""
    if order_date is None:
        return False
    return current is None or order_date > current


def _should_refresh_identity(contact: EnrichedContact, order_date: Optional[datetime]) -> bool:
    """Orders refresh name/address when at least as recent as the last activity.

    Contacts still carrying the placeholder name take the order's identity
    regardless of dates.
    """
    if contact.name == PLACEHOLDER_NAME:
        return True
    if order_date is None:
        return False
    return contact.last_activity_at is None or order_date >= contact.last_activity_at


def _call_date(lead: Lead) -> Optional[datetime]:
    # A pending lead has not been called yet, so it has no call age.
    if lead.status == "pending":
        return None
    return parse_timestamp(lead.created_at)


def _contact_from_lead(phone: str, lead: Lead, now: datetime) -> EnrichedContact:
    call_date = _call_date(lead)
    return EnrichedContact(
        phone=phone,
        name=(lead.customer_name or "").strip() or PLACEHOLDER_NAME,
        address=(lead.address or "").strip(),
        lead_id=lead.id,
        last_call_date=call_date,
        days_since_call=days_between(now, call_date) if call_date else None,
        total_orders=0,
        current_status=lead.status,
        moderator_id=lead.moderator_id,
        last_activity_at=parse_timestamp(lead.created_at),
    )


def _contact_from_order(phone: str, order: Order, order_date: Optional[datetime], now: datetime) -> EnrichedContact:
    return EnrichedContact(
        phone=phone,
        name=order.customer_name.strip() or PLACEHOLDER_NAME,
        address=order.customer_address.strip(),
        lead_id=None,
        last_order_date=order_date,
        days_since_order=days_between(now, order_date) if order_date else None,
        total_orders=1,
        current_status=UNASSIGNED,
        moderator_id=None,
        last_activity_at=order_date,
    )


def _apply_order(contact: EnrichedContact, order: Order, order_date: Optional[datetime], now: datetime) -> None:
    contact.total_orders += 1

    if _is_newer_order(order_date, contact.last_order_date):
        contact.last_order_date = order_date
        contact.days_since_order = days_between(now, order_date)

    if _should_refresh_identity(contact, order_date):
        if order.customer_name.strip():
            contact.name = order.customer_name.strip()
        if order.customer_address.strip():
            contact.address = order.customer_address.strip()
        if order_date is not None and (contact.last_activity_at is None or order_date > contact.last_activity_at):
            contact.last_activity_at = order_date


def reconcile(leads: Iterable[Lead], orders: Iterable[Order], *, now: datetime) -> List[EnrichedContact]:
    """Unify leads and orders into one contact per normalized phone number.

    Leads are applied first and the first lead seen for a phone seeds the
    contact. Orders then either create order-only ``unassigned`` contacts or
    add to existing ones without changing their status or owner. Ages are
    computed against ``now``. Inputs are not modified and the result is in
    first-seen order.
    """

    contacts: Dict[str, EnrichedContact] = {}
    skipped = 0

    for lead in leads:
        phone = normalize_phone(lead.phone_number)
        if not is_valid_key(phone):
            skipped += 1
            continue
        if not _should_seed(contacts, phone):
            LOGGER.debug("Ignoring lead %s: phone %s already seeded by lead %s", lead.id, phone, contacts[phone].lead_id)
            continue
        contacts[phone] = _contact_from_lead(phone, lead, now)

    for order in orders:
        phone = normalize_phone(order.customer_phone)
        if not is_valid_key(phone):
            skipped += 1
            continue
        order_date = parse_timestamp(order.created_at)
        if phone not in contacts:
            contacts[phone] = _contact_from_order(phone, order, order_date, now)
        else:
            _apply_order(contacts[phone], order, order_date, now)

    if skipped:
        LOGGER.debug("Skipped %s records with unusable phone numbers", skipped)
    return list(contacts.values())


def find_duplicate_leads(leads: Iterable[Lead]) -> List[str]:
    """Return ids of leads whose phone was already taken by an earlier lead."""

    seen: set[str] = set()
    duplicates: List[str] = []
    for lead in leads:
        phone = normalize_phone(lead.phone_number)
        if not is_valid_key(phone):
            continue
        if phone in seen:
            duplicates.append(lead.id)
        else:
            seen.add(phone)
    return duplicates


# --- Customer registry ---

def _by_created_at(record) -> datetime:
    return parse_timestamp(record.created_at) or EPOCH


def build_customer_registry(leads: Iterable[Lead], orders: Iterable[Order]) -> List[CustomerSummary]:
    """Lifetime value per unique phone, most recently active first.

    Leads and orders are replayed oldest to newest so the newest name and
    address win. Any order turns the row into a ``customer``.
    """

    registry: Dict[str, CustomerSummary] = {}

    for lead in sorted(leads, key=_by_created_at):
        phone = normalize_phone(lead.phone_number)
        if not is_valid_key(phone):
            continue
        created = parse_timestamp(lead.created_at)
        summary = registry.get(phone)
        if summary is None:
            registry[phone] = CustomerSummary(
                phone=phone,
                name=(lead.customer_name or "").strip() or PLACEHOLDER_NAME,
                address=(lead.address or "").strip(),
                last_activity_at=created,
                kind="lead",
            )
            continue
        if created is not None and (summary.last_activity_at is None or created >= summary.last_activity_at):
            summary.last_activity_at = created
            if lead.customer_name:
                summary.name = lead.customer_name.strip()
            if lead.address:
                summary.address = lead.address.strip()

    for order in sorted(orders, key=_by_created_at):
        phone = normalize_phone(order.customer_phone)
        if not is_valid_key(phone):
            continue
        created = parse_timestamp(order.created_at)
        summary = registry.get(phone)
        if summary is None:
            summary = registry[phone] = CustomerSummary(
                phone=phone,
                name=order.customer_name.strip() or PLACEHOLDER_NAME,
                address=order.customer_address.strip(),
                last_activity_at=created,
            )
        summary.kind = "customer"
        summary.total_orders += 1
        summary.total_spent += order.total_amount or 0.0

        newer = created is not None and (summary.last_activity_at is None or created >= summary.last_activity_at)
        if newer or summary.name == PLACEHOLDER_NAME:
            if created is not None:
                summary.last_activity_at = created
            if order.customer_name.strip():
                summary.name = order.customer_name.strip()
            if order.customer_address.strip():
                summary.address = order.customer_address.strip()

    return sorted(registry.values(), key=lambda item: item.last_activity_at or EPOCH, reverse=True)


def search_customers(registry: Iterable[CustomerSummary], term: str) -> List[CustomerSummary]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(registry)
    return [item for item in registry if needle in item.phone or needle in item.name.lower()]


__all__ = ["reconcile", "find_duplicate_leads", "build_customer_registry", "search_customers"]
