"""Persistence collaborator interface and an in-memory implementation."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from .models import LEAD_STATUSES, Lead

LOGGER = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"moderator_id", "assigned_date", "status", "customer_name", "phone_number", "address"}


class PersistenceError(RuntimeError):
    """Raised when the backing store rejects a write."""


class LeadStore(Protocol):
    """Operations the campaign tools need from the lead database."""

    def assign_leads(self, leads: Sequence[Lead]) -> None:  # pragma: no cover - runtime protocol
        """Insert or upsert the supplied leads."""

    def bulk_update_leads(self, lead_ids: Sequence[str], moderator_id: str, assigned_date: str) -> None:  # pragma: no cover - runtime protocol
        """Hand existing leads to a moderator for a given date."""

    def update_lead(self, lead_id: str, **changes: Any) -> None:  # pragma: no cover - runtime protocol
        """Apply field changes to one lead."""

    def delete_lead(self, lead_id: str) -> None:  # pragma: no cover - runtime protocol
        """Remove a lead."""


class InMemoryLeadStore:
    """List-backed store; new leads are placed first, as the dashboard shows them."""

    def __init__(self, leads: Optional[Iterable[Lead]] = None) -> None:
        self._leads: List[Lead] = list(leads or [])

    @property
    def leads(self) -> List[Lead]:
        return list(self._leads)

    def get(self, lead_id: str) -> Lead:
        for lead in self._leads:
            if lead.id == lead_id:
                return lead
        raise PersistenceError(f"Lead '{lead_id}' does not exist")

    def assign_leads(self, leads: Sequence[Lead]) -> None:
        incoming = {lead.id: lead for lead in leads}
        kept = [lead for lead in self._leads if lead.id not in incoming]
        self._leads = list(incoming.values()) + kept
        LOGGER.debug("Stored %s leads", len(incoming))

    def bulk_update_leads(self, lead_ids: Sequence[str], moderator_id: str, assigned_date: str) -> None:
        for lead_id in lead_ids:
            self.update_lead(lead_id, moderator_id=moderator_id, assigned_date=assigned_date)

    def update_lead(self, lead_id: str, **changes: Any) -> None:
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise PersistenceError(f"Cannot update lead fields {sorted(unknown)}")
        status = changes.get("status")
        if status is not None and status not in LEAD_STATUSES:
            raise PersistenceError(f"Invalid lead status '{status}'")
        lead = self.get(lead_id)
        for key, value in changes.items():
            setattr(lead, key, value)

    def delete_lead(self, lead_id: str) -> None:
        lead = self.get(lead_id)
        self._leads.remove(lead)


__all__ = ["LeadStore", "InMemoryLeadStore", "PersistenceError"]
