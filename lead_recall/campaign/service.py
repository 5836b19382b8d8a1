"""Campaign orchestrator that ties reconciliation, filtering and lead writes together."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from ..config import Settings
from ..dates import local_date, local_now
from ..filters import ContactFilter, filter_contacts
from ..merge import find_duplicate_leads, reconcile
from ..models import EnrichedContact, Lead, Order, RevivalPlan
from ..revival import plan_revival
from ..store import LeadStore

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DeploymentResult:
    """Outcome of handing a selection to a moderator.

    ``error`` carries a retryable notice when the store rejected a write; the
    plan is returned either way so the caller can retry it.
    """

    plan: RevivalPlan
    reassigned: int = 0
    created: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CampaignOrchestrator:
    """Builds contact worklists and pushes selected contacts to the lead store."""

    def __init__(
        self,
        store: LeadStore,
        *,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        raise_on_error: bool = False,
    ) -> None:
        self._store = store
        self._settings = settings or Settings()
        self._clock = clock or (lambda: local_now(self._settings.utc_offset_hours))
        self._raise_on_error = raise_on_error

    @property
    def settings(self) -> Settings:
        return self._settings

    def now(self) -> datetime:
        return self._clock()

    def contacts(self, leads: Iterable[Lead], orders: Iterable[Order], now: Optional[datetime] = None) -> List[EnrichedContact]:
        return reconcile(leads, orders, now=now or self.now())

    def worklist(
        self,
        leads: Iterable[Lead],
        orders: Iterable[Order],
        criteria: Optional[ContactFilter] = None,
        now: Optional[datetime] = None,
    ) -> List[EnrichedContact]:
        """Reconcile, filter and sort in one step."""

        contacts = self.contacts(leads, orders, now=now)
        worklist = filter_contacts(contacts, criteria)
        LOGGER.debug("Worklist has %s of %s contacts", len(worklist), len(contacts))
        return worklist

    def deploy(
        self,
        contacts: Sequence[EnrichedContact],
        phones: Iterable[str],
        moderator_id: str,
        assigned_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DeploymentResult:
        """Reassign existing leads and create revived ones for ``moderator_id``."""

        now = now or self.now()
        plan = plan_revival(
            contacts,
            phones,
            moderator_id=moderator_id,
            assigned_date=assigned_date or local_date(now),
            now=now,
            business_id=self._settings.business_id,
        )
        result = DeploymentResult(plan=plan)
        try:
            if plan.existing_lead_ids:
                self._store.bulk_update_leads(plan.existing_lead_ids, plan.moderator_id, plan.assigned_date)
                result.reassigned = len(plan.existing_lead_ids)
            if plan.new_leads:
                self._store.assign_leads(plan.new_leads)
                result.created = len(plan.new_leads)
        except Exception as exc:
            LOGGER.exception("Deploying %s contacts to moderator %s failed", plan.size, moderator_id)
            if self._raise_on_error:
                raise
            result.error = f"Deployment failed, please retry: {exc}"
            return result

        LOGGER.info(
            "Deployed %s contacts to moderator %s (%s reassigned, %s new)",
            plan.size,
            moderator_id,
            result.reassigned,
            result.created,
        )
        return result

    def remove_duplicates(self, leads: Iterable[Lead]) -> List[str]:
        """Delete every lead whose phone was already taken by an earlier lead."""

        duplicate_ids = find_duplicate_leads(leads)
        for lead_id in duplicate_ids:
            self._store.delete_lead(lead_id)
        LOGGER.info("Removed %s duplicate leads", len(duplicate_ids))
        return duplicate_ids
