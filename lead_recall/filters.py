"""Predicate filtering and ordering over reconciled contacts and lead queues."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .dates import EPOCH, local_date
from .models import LEAD_STATUSES, STATUS_FILTER_ALL, UNASSIGNED, EnrichedContact, Lead

STATUS_FILTERS = (STATUS_FILTER_ALL, UNASSIGNED) + LEAD_STATUSES
QUEUE_DAYS = ("today", "tomorrow", "all")


@dataclass(slots=True)
class ContactFilter:
    """Criteria applied to the contact worklist. ``None`` thresholds are inactive."""

    search: str = ""
    status: str = STATUS_FILTER_ALL
    min_days_since_call: Optional[int] = None
    min_days_since_order: Optional[int] = None

    def __post_init__(self) -> None:
        if self.status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter '{self.status}'. Expected one of {list(STATUS_FILTERS)}")

    def matches(self, contact: EnrichedContact) -> bool:
        needle = (self.search or "").strip().lower()
        if needle and needle not in contact.phone.lower() and needle not in contact.name.lower():
            return False

        if self.status == UNASSIGNED:
            if contact.moderator_id:
                return False
        elif self.status != STATUS_FILTER_ALL and contact.current_status != self.status:
            return False

        if not _meets_threshold(contact.days_since_call, self.min_days_since_call):
            return False
        if not _meets_threshold(contact.days_since_order, self.min_days_since_order):
            return False
        return True


def _meets_threshold(days: Optional[int], threshold: Optional[int]) -> bool:
    if threshold is None:
        return True
    # Staleness cannot be shown without a date for that dimension.
    return days is not None and days >= threshold


def _activity_key(contact: EnrichedContact) -> datetime:
    return contact.last_order_date or contact.last_call_date or EPOCH


def sort_contacts(contacts: Iterable[EnrichedContact]) -> List[EnrichedContact]:
    """Most recently active first; contacts without any date sink to the end."""

    return sorted(contacts, key=_activity_key, reverse=True)


def filter_contacts(
    contacts: Iterable[EnrichedContact],
    criteria: Optional[ContactFilter] = None,
    **overrides,
) -> List[EnrichedContact]:
    """Return the contacts matching every active criterion, sorted by activity.

    Keyword ``overrides`` replace individual fields of ``criteria``, e.g.
    ``filter_contacts(contacts, status="unassigned")``.
    """

    criteria = criteria or ContactFilter()
    if overrides:
        criteria = replace(criteria, **overrides)
    return sort_contacts(contact for contact in contacts if criteria.matches(contact))


# --- Moderator calling queue ---

def _queue_date(day: str, now: datetime) -> Optional[str]:
    if day not in QUEUE_DAYS:
        raise ValueError(f"Unknown queue day '{day}'. Expected one of {list(QUEUE_DAYS)}")
    if day == "today":
        return local_date(now)
    if day == "tomorrow":
        return local_date(now, days=1)
    return None


def moderator_queue(leads: Iterable[Lead], moderator_id: str, *, now: datetime, day: str = "today") -> List[Lead]:
    """Leads assigned to ``moderator_id`` for ``day``, newest assignment first."""

    wanted = _queue_date(day, now)
    queue = [
        lead
        for lead in leads
        if lead.moderator_id == moderator_id and (wanted is None or lead.assigned_date == wanted)
    ]
    return sorted(queue, key=lambda lead: (lead.assigned_date or "", lead.created_at or ""), reverse=True)


def queue_stats(leads: Iterable[Lead], moderator_id: str, *, now: datetime) -> Dict[str, int]:
    today = local_date(now)
    tomorrow = local_date(now, days=1)
    own = [lead for lead in leads if lead.moderator_id == moderator_id]
    return {
        "pending_today": sum(1 for lead in own if lead.assigned_date == today and lead.status == "pending"),
        "confirmed_today": sum(1 for lead in own if lead.assigned_date == today and lead.status == "confirmed"),
        "tomorrow": sum(1 for lead in own if lead.assigned_date == tomorrow),
        "total": len(own),
    }


__all__ = [
    "ContactFilter",
    "STATUS_FILTERS",
    "filter_contacts",
    "sort_contacts",
    "moderator_queue",
    "queue_stats",
]
