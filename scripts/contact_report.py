"""CLI helper to eyeball the reconciled worklist for a pair of exports."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from lead_recall.config import load_settings
from lead_recall.dates import local_now
from lead_recall.filters import STATUS_FILTERS, ContactFilter, filter_contacts
from lead_recall.io import load_leads, load_orders
from lead_recall.merge import reconcile
from lead_recall.models import EnrichedContact
from lead_recall.selection import PRESETS, apply_preset

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the contact worklist for debugging.")
    parser.add_argument("leads", help="Lead export (CSV, JSON or XLSX)")
    parser.add_argument("orders", help="Order export (CSV, JSON or XLSX)")
    parser.add_argument("--status", choices=STATUS_FILTERS, default="all")
    parser.add_argument("--preset", choices=PRESETS)
    parser.add_argument("--limit", type=int, default=20, help="Number of contacts to print")
    parser.add_argument("--config", help="Settings file (YAML or JSON)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Console log level",
    )
    return parser.parse_args(argv)


def _age(days: int | None) -> str:
    if days is None:
        return "-"
    if days == 0:
        return "today"
    if days == 1:
        return "yesterday"
    return f"{days}d ago"


def pretty_print_contacts(contacts: Sequence[EnrichedContact], total: int) -> None:
    print(f"{len(contacts)} of {total} contacts")
    for position, contact in enumerate(contacts, start=1):
        owner = contact.moderator_id or "unassigned"
        print(
            f"{position:>4}. {contact.phone}  {contact.name:<24} {contact.current_status:<13} "
            f"owner={owner:<12} orders={contact.total_orders:<3} "
            f"call={_age(contact.days_since_call):<10} order={_age(contact.days_since_order)}"
        )


def run_report(args: argparse.Namespace) -> None:
    logging.basicConfig(level=getattr(logging, args.log_level))
    settings = load_settings(args.config)

    criteria = ContactFilter(status=args.status)
    if args.preset:
        criteria = apply_preset(criteria, args.preset, settings)

    contacts = reconcile(load_leads(args.leads), load_orders(args.orders), now=local_now(settings.utc_offset_hours))
    worklist = filter_contacts(contacts, criteria)
    pretty_print_contacts(worklist[: args.limit], len(worklist))


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv or sys.argv[1:])
    try:
        run_report(args)
    except Exception as exc:  # pragma: no cover - CLI convenience
        LOGGER.exception("Report failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
