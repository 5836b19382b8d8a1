"""Command line interface for building contact worklists and managing leads."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .campaign import CampaignOrchestrator
from .config import Settings, load_settings
from .filters import STATUS_FILTERS, ContactFilter
from .ingestion import contacts_to_dataframe, customers_to_dataframe, export_dataframe, import_leads, read_rows
from .io import load_leads, load_orders, write_leads
from .merge import build_customer_registry, search_customers
from .selection import PRESETS, CampaignSelection, apply_preset
from .store import InMemoryLeadStore


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to a settings file (YAML or JSON)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )


def _add_filter_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", default="", help="Case-insensitive phone or name fragment")
    parser.add_argument("--status", choices=STATUS_FILTERS, default="all", help="Lead status to keep")
    parser.add_argument("--min-days-since-call", type=int, default=None, help="Keep contacts not called for N days")
    parser.add_argument("--min-days-since-order", type=int, default=None, help="Keep contacts without an order for N days")
    parser.add_argument(
        "--preset",
        choices=PRESETS,
        default=None,
        help="Apply a staleness preset after the explicit filters",
    )


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Reconcile leads and orders into recall worklists")
    commands = parser.add_subparsers(dest="command", required=True)

    contacts = commands.add_parser("contacts", help="Export the filtered contact worklist")
    contacts.add_argument("leads", help="Lead export (CSV, JSON or XLSX)")
    contacts.add_argument("orders", help="Order export (CSV, JSON or XLSX)")
    contacts.add_argument("output", help="Where to write the worklist (CSV or XLSX)")
    _add_filter_options(contacts)
    _add_common_options(contacts)

    customers = commands.add_parser("customers", help="Export lifetime value per unique customer")
    customers.add_argument("leads", help="Lead export (CSV, JSON or XLSX)")
    customers.add_argument("orders", help="Order export (CSV, JSON or XLSX)")
    customers.add_argument("output", help="Where to write the registry (CSV or XLSX)")
    customers.add_argument("--search", default="", help="Case-insensitive phone or name fragment")
    _add_common_options(customers)

    assign = commands.add_parser("assign", help="Hand a range of the worklist to a moderator")
    assign.add_argument("leads", help="Lead export (CSV, JSON or XLSX)")
    assign.add_argument("orders", help="Order export (CSV, JSON or XLSX)")
    assign.add_argument("output_leads", help="Where to write the updated leads (CSV or JSON)")
    assign.add_argument("--moderator", required=True, help="Moderator id receiving the contacts")
    assign.add_argument(
        "--range",
        nargs=2,
        type=int,
        metavar=("FROM", "TO"),
        required=True,
        help="1-based inclusive positions in the sorted worklist",
    )
    assign.add_argument("--date", default=None, help="Assignment date (defaults to today)")
    _add_filter_options(assign)
    _add_common_options(assign)

    importer = commands.add_parser("import", help="Import new leads from a spreadsheet")
    importer.add_argument("spreadsheet", help="CSV or XLSX file with phone/name/address columns")
    importer.add_argument("leads", help="Existing lead export used for duplicate detection")
    importer.add_argument("output_leads", help="Where to write the combined leads (CSV or JSON)")
    importer.add_argument("--moderator", default="", help="Assign imported leads to this moderator")
    importer.add_argument("--date", default=None, help="Assignment date (defaults to today)")
    _add_common_options(importer)

    dedupe = commands.add_parser("dedupe", help="Remove leads whose phone repeats an earlier lead")
    dedupe.add_argument("leads", help="Lead export (CSV, JSON or XLSX)")
    dedupe.add_argument("output_leads", help="Where to write the remaining leads (CSV or JSON)")
    _add_common_options(dedupe)

    return parser


def parse_args(argv: list[str] | None = None, prog: str | None = None) -> argparse.Namespace:
    return build_parser(prog=prog).parse_args(argv)


def _criteria(args: argparse.Namespace, settings: Settings) -> ContactFilter:
    criteria = ContactFilter(
        search=args.search,
        status=args.status,
        min_days_since_call=args.min_days_since_call,
        min_days_since_order=args.min_days_since_order,
    )
    if args.preset:
        criteria = apply_preset(criteria, args.preset, settings)
    return criteria


def _run_contacts(args: argparse.Namespace, orchestrator: CampaignOrchestrator) -> int:
    worklist = orchestrator.worklist(
        load_leads(args.leads),
        load_orders(args.orders),
        _criteria(args, orchestrator.settings),
    )
    export_dataframe(contacts_to_dataframe(worklist), args.output)
    logging.info("Wrote %s contacts to %s", len(worklist), Path(args.output).resolve())
    return 0


def _run_customers(args: argparse.Namespace, orchestrator: CampaignOrchestrator) -> int:
    registry = build_customer_registry(load_leads(args.leads), load_orders(args.orders))
    registry = search_customers(registry, args.search)
    export_dataframe(customers_to_dataframe(registry), args.output, sheet_name="Customers")
    logging.info("Wrote %s customers to %s", len(registry), Path(args.output).resolve())
    return 0


def _run_assign(args: argparse.Namespace, orchestrator: CampaignOrchestrator, store: InMemoryLeadStore) -> int:
    now = orchestrator.now()
    worklist = orchestrator.worklist(store.leads, load_orders(args.orders), _criteria(args, orchestrator.settings), now=now)
    selection = CampaignSelection()
    selection.add_range(worklist, *args.range)
    if not selection:
        logging.warning("The requested range selects no contacts - nothing to do")
        return 0

    result = orchestrator.deploy(worklist, selection.phones, args.moderator, assigned_date=args.date, now=now)
    if not result.ok:
        logging.error("%s", result.error)
        return 1
    write_leads(args.output_leads, store.leads)
    logging.info("Updated leads written to %s", Path(args.output_leads).resolve())
    return 0


def _run_import(args: argparse.Namespace, orchestrator: CampaignOrchestrator, store: InMemoryLeadStore) -> int:
    settings = orchestrator.settings
    now = orchestrator.now()
    result = import_leads(
        read_rows(args.spreadsheet),
        store.leads,
        now=now,
        business_id=settings.business_id,
        moderator_id=args.moderator,
        assigned_date=args.date or now.date().isoformat(),
        min_phone_length=settings.import_min_phone_length,
    )
    if not result.leads:
        logging.warning("No new valid leads found in %s", args.spreadsheet)
    else:
        store.assign_leads(result.leads)
    write_leads(args.output_leads, store.leads)
    return 0


def _run_dedupe(args: argparse.Namespace, orchestrator: CampaignOrchestrator, store: InMemoryLeadStore) -> int:
    orchestrator.remove_duplicates(store.leads)
    write_leads(args.output_leads, store.leads)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    settings = load_settings(args.config)
    if args.command in {"contacts", "customers"}:
        orchestrator = CampaignOrchestrator(InMemoryLeadStore(), settings=settings)
        if args.command == "contacts":
            return _run_contacts(args, orchestrator)
        return _run_customers(args, orchestrator)

    store = InMemoryLeadStore(load_leads(args.leads))
    orchestrator = CampaignOrchestrator(store, settings=settings)
    if args.command == "assign":
        return _run_assign(args, orchestrator, store)
    if args.command == "import":
        return _run_import(args, orchestrator, store)
    return _run_dedupe(args, orchestrator, store)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
