"""Unified data models for leads, orders, and the contacts reconciled from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence


LEAD_STATUSES = ("pending", "confirmed", "communication", "no-response")
UNASSIGNED = "unassigned"
STATUS_FILTER_ALL = "all"
PLACEHOLDER_NAME = "Prospect"


def _pick(row: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-null value found under any of ``keys``."""

    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _amount(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _isoformat(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else ""


# --- Persisted records ---

@dataclass(slots=True)
class Lead:
    """A prospective customer captured before any purchase."""

    id: str
    phone_number: str
    customer_name: Optional[str] = None
    address: Optional[str] = None
    moderator_id: str = ""
    status: str = "pending"
    assigned_date: str = ""
    created_at: str = ""
    business_id: str = ""

    @property
    def is_assigned(self) -> bool:
        return bool(self.moderator_id)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Lead":
        """Build a lead from a database row in snake_case or camelCase."""

        return cls(
            id=_text(_pick(row, "id")),
            phone_number=_text(_pick(row, "phone_number", "phoneNumber", "phone")),
            customer_name=_text(_pick(row, "customer_name", "customerName")) or None,
            address=_text(_pick(row, "address")) or None,
            moderator_id=_text(_pick(row, "moderator_id", "moderatorId")),
            status=_text(_pick(row, "status", default="pending")) or "pending",
            assigned_date=_text(_pick(row, "assigned_date", "assignedDate")),
            created_at=_text(_pick(row, "created_at", "createdAt")),
            business_id=_text(_pick(row, "business_id", "businessId")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "phone_number": self.phone_number,
            "customer_name": self.customer_name,
            "address": self.address,
            "moderator_id": self.moderator_id,
            "status": self.status,
            "assigned_date": self.assigned_date,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class Order:
    """A confirmed transaction. Only the fields the contact views need are kept."""

    id: str
    customer_phone: str
    customer_name: str = ""
    customer_address: str = ""
    total_amount: float = 0.0
    created_at: str = ""
    moderator_id: str = ""
    business_id: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Order":
        return cls(
            id=_text(_pick(row, "id")),
            customer_phone=_text(_pick(row, "customer_phone", "customerPhone", "phone")),
            customer_name=_text(_pick(row, "customer_name", "customerName")),
            customer_address=_text(_pick(row, "customer_address", "customerAddress")),
            total_amount=_amount(_pick(row, "total_amount", "totalAmount")),
            created_at=_text(_pick(row, "created_at", "createdAt")),
            moderator_id=_text(_pick(row, "moderator_id", "moderatorId")),
            business_id=_text(_pick(row, "business_id", "businessId")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "moderator_id": self.moderator_id,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_address": self.customer_address,
            "total_amount": self.total_amount,
            "created_at": self.created_at,
        }


# --- Derived views ---

@dataclass
class EnrichedContact:
    """One phone number's merged lead/order timeline.

    ``last_activity_at`` is the date the current ``name``/``address`` were
    taken from; it drives the identity refresh when later orders arrive.
    """

    phone: str
    name: str = PLACEHOLDER_NAME
    address: str = ""
    lead_id: Optional[str] = None
    last_call_date: Optional[datetime] = None
    days_since_call: Optional[int] = None
    last_order_date: Optional[datetime] = None
    days_since_order: Optional[int] = None
    total_orders: int = 0
    current_status: str = UNASSIGNED
    moderator_id: Optional[str] = None
    last_activity_at: Optional[datetime] = None

    @property
    def is_unassigned(self) -> bool:
        return not self.moderator_id

    @property
    def last_active(self) -> Optional[datetime]:
        return self.last_order_date or self.last_call_date

    def as_row(self) -> Dict[str, Any]:
        """Return a flat, serialisable representation of the contact."""
        return {
            "phone": self.phone,
            "name": self.name,
            "address": self.address,
            "lead_id": self.lead_id or "",
            "current_status": self.current_status,
            "moderator_id": self.moderator_id or "",
            "total_orders": self.total_orders,
            "last_call_date": _isoformat(self.last_call_date),
            "days_since_call": self.days_since_call,
            "last_order_date": _isoformat(self.last_order_date),
            "days_since_order": self.days_since_order,
        }


@dataclass
class CustomerSummary:
    """Lifetime view of a unique phone number across leads and orders."""

    phone: str
    name: str
    address: str = ""
    total_orders: int = 0
    total_spent: float = 0.0
    last_activity_at: Optional[datetime] = None
    kind: str = "lead"

    @property
    def is_loyal(self) -> bool:
        return self.total_orders > 2

    def as_row(self) -> Dict[str, Any]:
        return {
            "phone": self.phone,
            "name": self.name,
            "address": self.address,
            "kind": self.kind,
            "total_orders": self.total_orders,
            "total_spent": self.total_spent,
            "last_activity_at": _isoformat(self.last_activity_at),
            "loyal": self.is_loyal,
        }


@dataclass(slots=True)
class RevivalPlan:
    """Writes needed to hand a selection of contacts to a moderator."""

    moderator_id: str
    assigned_date: str
    existing_lead_ids: List[str] = field(default_factory=list)
    new_leads: List[Lead] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.existing_lead_ids) + len(self.new_leads)


@dataclass(slots=True)
class ImportResult:
    """Outcome of a bulk lead import."""

    leads: List[Lead] = field(default_factory=list)
    duplicates: int = 0
    skipped: int = 0

    @property
    def imported(self) -> int:
        return len(self.leads)


def leads_from_rows(rows: Sequence[Mapping[str, Any]]) -> List[Lead]:
    return [Lead.from_row(row) for row in rows]


def orders_from_rows(rows: Sequence[Mapping[str, Any]]) -> List[Order]:
    return [Order.from_row(row) for row in rows]
