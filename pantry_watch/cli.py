"""CLI entry point for pantry-watch."""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from .app import create_coordinator
from .config import load_config
from .db import InventoryDB, RecipientDB
from .errors import FetchFailure, StoreUnavailable
from .models import Status
from .snapshot import build_snapshot

_STATUS_LABELS = {
    Status.ACTIVE: "active",
    Status.EXPIRING_SOON: "expiring soon",
    Status.EXPIRED: "expired",
}


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="pantry-watch",
        description="Track perishable items and alert before they expire",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="Path to a TOML config file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # add
    add_parser = sub.add_parser("add", help="Add an item")
    add_parser.add_argument("name")
    add_parser.add_argument("expiry", help="Expiry date (YYYY-MM-DD)")
    add_parser.add_argument("--produced", default=None, help="Production date")
    add_parser.add_argument("--quantity", "-q", type=float, default=None)
    add_parser.add_argument("--location", "-l", default=None)

    # update
    upd_parser = sub.add_parser("update", help="Change fields of an item")
    upd_parser.add_argument("id")
    upd_parser.add_argument("--name", default=None)
    upd_parser.add_argument("--expiry", default=None)
    upd_parser.add_argument("--produced", default=None)
    upd_parser.add_argument("--quantity", "-q", type=float, default=None)
    upd_parser.add_argument("--location", "-l", default=None)

    # remove
    rm_parser = sub.add_parser("remove", help="Delete an item")
    rm_parser.add_argument("id")

    # list
    list_parser = sub.add_parser("list", help="List items with their status")
    list_parser.add_argument(
        "--status", choices=[s.value for s in Status], default=None,
        help="Only items with this status",
    )
    list_parser.add_argument("--location", default=None, help="Only items stored here")
    list_parser.add_argument(
        "--search", default=None, help="Match against name or storage location"
    )
    list_parser.add_argument(
        "--sort", choices=["expiry", "created", "name"], default="expiry",
        help="Sort key (default: expiry)",
    )
    list_parser.add_argument("--desc", action="store_true", help="Reverse the order")
    list_format = list_parser.add_mutually_exclusive_group()
    list_format.add_argument("--json", action="store_true", help="Output JSON")
    list_format.add_argument("--csv", action="store_true", help="Output CSV")

    # summary
    sub.add_parser("summary", help="Counts per status")

    # check
    check_parser = sub.add_parser("check", help="Run one refresh and send alerts")
    check_parser.add_argument("--json", action="store_true", help="Output JSON")

    # watch
    sub.add_parser("watch", help="Keep refreshing on a timer until interrupted")

    # emails
    em_parser = sub.add_parser("emails", help="Manage alert recipients")
    em_sub = em_parser.add_subparsers(dest="email_command")
    em_sub.add_parser("list", help="Show recipients")
    em_add = em_sub.add_parser("add", help="Add a recipient")
    em_add.add_argument("email")
    em_rm = em_sub.add_parser("remove", help="Remove a recipient")
    em_rm.add_argument("email")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = InventoryDB(config.database.path)
    try:
        match args.command:
            case "add":
                _cmd_add(db, args)
            case "update":
                _cmd_update(db, args)
            case "remove":
                _cmd_remove(db, args)
            case "list":
                _cmd_list(db, config, args)
            case "summary":
                _cmd_summary(db, config)
            case "check":
                asyncio.run(_cmd_check(db, config, args))
            case "watch":
                try:
                    asyncio.run(_cmd_watch(db, config))
                except KeyboardInterrupt:
                    print("Stopped.")
            case "emails":
                _cmd_emails(config, args)
    except StoreUnavailable as e:
        print(f"Store unavailable: {e}", file=sys.stderr)
        sys.exit(2)
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


def _cmd_add(db: InventoryDB, args) -> None:
    item_id = db.add_item(
        args.name,
        args.expiry,
        production_date=args.produced,
        quantity=args.quantity,
        storage_location=args.location,
    )
    print(item_id)


def _cmd_update(db: InventoryDB, args) -> None:
    fields = {
        "name": args.name,
        "expiry_date": args.expiry,
        "production_date": args.produced,
        "quantity": args.quantity,
        "storage_location": args.location,
    }
    fields = {k: v for k, v in fields.items() if v is not None}
    if not fields:
        print("Nothing to update.")
        return
    db.update_item(args.id, **fields)
    print(f"Updated {args.id}")


def _cmd_remove(db: InventoryDB, args) -> None:
    if db.delete_item(args.id):
        print(f"Removed {args.id}")
    else:
        print(f"No such item: {args.id}", file=sys.stderr)
        sys.exit(1)


def _select_entries(entries: list, items: list, args) -> list:
    """Filter and order snapshot entries the way the ``list`` options ask."""
    if args.status:
        entries = [e for e in entries if e.status.value == args.status]
    if args.location:
        wanted = args.location.lower()
        entries = [e for e in entries if e.item.storage_location.lower() == wanted]
    if args.search:
        term = args.search.lower()
        entries = [
            e for e in entries
            if term in e.item.name.lower() or term in e.item.storage_location.lower()
        ]

    match args.sort:
        case "created":
            # get_all() is newest first
            age = {item.id: i for i, item in enumerate(items)}
            entries = sorted(entries, key=lambda e: age[e.item.id], reverse=True)
        case "name":
            entries = sorted(entries, key=lambda e: (e.item.name.lower(), e.item.id))
    if args.desc:
        entries = list(reversed(entries))
    return entries


def _cmd_list(db: InventoryDB, config, args) -> None:
    items = db.get_all()
    snapshot, rejected = build_snapshot(
        items, date.today(), soon_days=config.engine.soon_days
    )
    entries = _select_entries(snapshot.items_by_expiry(), items, args)

    if args.json:
        data = [
            {
                "id": e.item.id,
                "name": e.item.name,
                "expiry_date": e.expiry.isoformat(),
                "days_left": e.days_left,
                "quantity": e.item.quantity,
                "storage_location": e.item.storage_location,
                "status": e.status.value,
            }
            for e in entries
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if args.csv:
        writer = csv.writer(sys.stdout, lineterminator="\n")
        writer.writerow(
            ["name", "production_date", "expiry_date", "quantity",
             "storage_location", "status"]
        )
        for e in entries:
            produced = e.item.production_date
            writer.writerow([
                e.item.name,
                str(produced) if produced else "",
                e.expiry.isoformat(),
                f"{e.item.quantity:g}",
                e.item.storage_location,
                e.status.value,
            ])
        return

    if not entries and not rejected:
        print("No items tracked.")
        return
    for e in entries:
        print(
            f"  {e.item.id[:8]}  {e.item.name:<20} {e.expiry.isoformat()}  "
            f"{e.days_left:>4}d  {_STATUS_LABELS[e.status]:<14} "
            f"x{e.item.quantity:g} @ {e.item.storage_location}"
        )
    for r in rejected:
        print(f"  {r.item.id[:8]}  {r.item.name:<20} (invalid expiry: {r.item.expiry_date!r})")


def _cmd_summary(db: InventoryDB, config) -> None:
    snapshot, _ = build_snapshot(
        db.get_all(), date.today(), soon_days=config.engine.soon_days
    )
    counts = snapshot.counts()
    print(f"Total:         {counts['total']}")
    print(f"Active:        {counts[Status.ACTIVE.value]}")
    print(f"Expiring soon: {counts[Status.EXPIRING_SOON.value]}")
    print(f"Expired:       {counts[Status.EXPIRED.value]}")


async def _cmd_check(db: InventoryDB, config, args) -> None:
    recipients = RecipientDB(config.database.path)
    try:
        coordinator = create_coordinator(config, db, recipients)
        await coordinator.refresh("timer")
    finally:
        recipients.close()

    if coordinator.stale:
        print(FetchFailure.user_message, file=sys.stderr)
        sys.exit(2)

    notifications = coordinator.notifications()
    if args.json:
        print(json.dumps([n.to_dict() for n in notifications], ensure_ascii=False, indent=2))
        return
    if not notifications:
        print("Nothing is expiring soon.")
    report = coordinator.last_report
    if report is not None and not report.ok:
        for failure in report.failures:
            print(f"Delivery failed: {failure}", file=sys.stderr)


async def _cmd_watch(db: InventoryDB, config) -> None:
    from .scheduler import RefreshScheduler

    recipients = RecipientDB(config.database.path)

    def _on_error(failure: FetchFailure) -> None:
        print(f"⚠ {failure.user_message}", file=sys.stderr)

    coordinator = create_coordinator(config, db, recipients, on_error=_on_error)
    unsubscribe = coordinator.attach()
    scheduler = RefreshScheduler(config, coordinator)
    try:
        await coordinator.refresh("timer")
        scheduler.start()
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        unsubscribe()
        recipients.close()


def _cmd_emails(config, args) -> None:
    recipients = RecipientDB(config.database.path)
    try:
        match args.email_command:
            case "add":
                recipients.add(args.email)
                print(f"Added {args.email}")
            case "remove":
                if not recipients.delete(args.email):
                    print(f"Not registered: {args.email}", file=sys.stderr)
                    sys.exit(1)
                print(f"Removed {args.email}")
            case _:
                emails = recipients.get_all()
                if not emails:
                    print("No recipients registered.")
                for email in emails:
                    print(f"  {email}")
    finally:
        recipients.close()
