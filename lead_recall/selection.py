"""Worklist selection helpers for re-engagement campaigns."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import Settings
from .filters import ContactFilter
from .models import EnrichedContact

PRESETS = ("dormant", "follow-up", "fresh")
_PRESET_ALIASES = {"followup": "follow-up", "follow_up": "follow-up"}


def select_range(contacts: Sequence[EnrichedContact], start: int, end: int) -> List[str]:
    """Phone keys of the 1-based inclusive ``[start, end]`` slice, clamped to the list."""

    first = max(0, start - 1)
    last = max(0, min(len(contacts), end))
    return [contact.phone for contact in contacts[first:last]]


class CampaignSelection:
    """Ordered, duplicate-free set of selected phone keys."""

    def __init__(self, phones: Optional[Iterable[str]] = None) -> None:
        self._phones: dict[str, None] = {}
        for phone in phones or ():
            self.add(phone)

    def add(self, phone: str) -> None:
        self._phones.setdefault(phone, None)

    def add_range(self, contacts: Sequence[EnrichedContact], start: int, end: int) -> List[str]:
        """Union a range into the selection and return the phones newly added."""

        added: List[str] = []
        for phone in select_range(contacts, start, end):
            if phone not in self._phones:
                self.add(phone)
                added.append(phone)
        return added

    def toggle(self, phone: str) -> bool:
        """Flip ``phone`` in or out of the selection; returns whether it is now selected."""

        if phone in self._phones:
            del self._phones[phone]
            return False
        self.add(phone)
        return True

    def toggle_all(self, contacts: Sequence[EnrichedContact]) -> None:
        visible = [contact.phone for contact in contacts]
        if visible and all(phone in self._phones for phone in visible):
            for phone in visible:
                self._phones.pop(phone, None)
        else:
            for phone in visible:
                self.add(phone)

    def clear(self) -> None:
        self._phones.clear()

    @property
    def phones(self) -> List[str]:
        return list(self._phones)

    def __contains__(self, phone: object) -> bool:
        return phone in self._phones

    def __len__(self) -> int:
        return len(self._phones)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._phones))


def apply_preset(criteria: Optional[ContactFilter], name: str, settings: Optional[Settings] = None) -> ContactFilter:
    """Return ``criteria`` with a named staleness preset applied.

    ``dormant`` looks for contacts without an order for ``dormant_days``,
    ``follow-up`` for contacts not called for ``follow_up_days`` and ``fresh``
    for leads that have never been called.
    """

    settings = settings or Settings()
    criteria = criteria or ContactFilter()
    preset = _PRESET_ALIASES.get(name, name)

    if preset == "dormant":
        return replace(criteria, min_days_since_order=settings.dormant_days, min_days_since_call=None)
    if preset == "follow-up":
        return replace(criteria, min_days_since_call=settings.follow_up_days, min_days_since_order=None)
    if preset == "fresh":
        return replace(criteria, min_days_since_call=None, min_days_since_order=None, status="pending")
    raise ValueError(f"Unknown preset '{name}'. Expected one of {list(PRESETS)}")


__all__ = ["select_range", "CampaignSelection", "apply_preset", "PRESETS"]
