"""Reconcile phone-keyed leads and orders into contact worklists for recall campaigns."""

from . import models  # noqa: F401
from .campaign import CampaignOrchestrator, DeploymentResult  # noqa: F401
from .filters import ContactFilter, filter_contacts, sort_contacts  # noqa: F401
from .merge import build_customer_registry, find_duplicate_leads, reconcile  # noqa: F401
from .models import (
    CustomerSummary,
    EnrichedContact,
    Lead,
    Order,
    RevivalPlan,
)
from .phone import normalize_phone  # noqa: F401
from .selection import CampaignSelection, apply_preset, select_range  # noqa: F401

__all__ = [
    "Lead",
    "Order",
    "EnrichedContact",
    "CustomerSummary",
    "RevivalPlan",
    "ContactFilter",
    "CampaignSelection",
    "CampaignOrchestrator",
    "DeploymentResult",
    "normalize_phone",
    "reconcile",
    "filter_contacts",
    "sort_contacts",
    "select_range",
    "apply_preset",
    "build_customer_registry",
    "find_duplicate_leads",
    "ingestion",
    "campaign",
]
