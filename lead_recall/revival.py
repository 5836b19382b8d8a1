"""Turn a campaign selection into lead writes for the persistence layer."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Sequence

from .dates import to_iso
from .models import EnrichedContact, Lead, RevivalPlan


def plan_revival(
    contacts: Sequence[EnrichedContact],
    phones: Iterable[str],
    *,
    moderator_id: str,
    assigned_date: str,
    now: datetime,
    business_id: str = "",
) -> RevivalPlan:
    """Split the selected contacts into lead reassignments and new leads.

    Contacts that already have a lead are reassigned by id. Contacts known
    only from orders are revived as new ``pending`` leads for the moderator.
    """

    if not moderator_id:
        raise ValueError("A moderator is required to deploy a selection")
    wanted = set(phones)
    if not wanted:
        raise ValueError("Select at least one contact to deploy")

    selected = [contact for contact in contacts if contact.phone in wanted]
    stamp = int(now.timestamp() * 1000)
    created_at = to_iso(now)

    existing_ids: List[str] = [contact.lead_id for contact in selected if contact.lead_id is not None]
    new_leads: List[Lead] = [
        Lead(
            id=f"revived-{stamp}-{index}",
            business_id=business_id,
            phone_number=contact.phone,
            customer_name=contact.name,
            address=contact.address,
            moderator_id=moderator_id,
            status="pending",
            assigned_date=assigned_date,
            created_at=created_at,
        )
        for index, contact in enumerate(contact for contact in selected if contact.lead_id is None)
    ]
    return RevivalPlan(
        moderator_id=moderator_id,
        assigned_date=assigned_date,
        existing_lead_ids=existing_ids,
        new_leads=new_leads,
    )


__all__ = ["plan_revival"]
