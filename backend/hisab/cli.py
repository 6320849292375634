"""
Command line for the ledger store.

Usage:
    hisab init-db [--reset]
    hisab export [-o backup.json]
    hisab import backup.json
    hisab clear --yes
    hisab seed products.json
    hisab serve
"""
import argparse
import json
import sys
from typing import List, Optional

from hisab.config import settings
from hisab.db import SessionLocal, init_db
from hisab.errors import LedgerError
from hisab.services.backup_service import BackupService
from hisab.services.product_service import ProductService
from hisab.utils.log import get_logger

log = get_logger("cli")


def _normalize_entry(entry: dict) -> dict:
    """Accept a few common shapes: salePrice/price, quantity/stock."""
    return {
        "name": entry.get("name") or entry.get("title") or "",
        "sale_price": entry.get("salePrice", entry.get("sale_price", entry.get("price", 0))),
        "quantity": int(entry.get("quantity", entry.get("stock", 0)) or 0),
    }


def seed_from_file(path: str) -> int:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("products") or data.get("items") or []

    db = SessionLocal()
    try:
        svc = ProductService(db)
        created = 0
        for entry in data:
            e = _normalize_entry(entry)
            svc.add_product(e["name"], e["sale_price"], e["quantity"])
            created += 1
        return created
    finally:
        db.close()


def cmd_init_db(args) -> int:
    init_db(reset=args.reset)
    return 0


def cmd_export(args) -> int:
    db = SessionLocal()
    try:
        payload = BackupService(db).export_json()
    finally:
        db.close()
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        print(f"Exported to {args.output}")
    else:
        print(payload)
    return 0


def cmd_import(args) -> int:
    with open(args.file, "r", encoding="utf-8") as f:
        content = f.read()
    db = SessionLocal()
    try:
        counts = BackupService(db).import_all(content)
    finally:
        db.close()
    print(f"Imported {counts['products']} products, {counts['customers']} customers, "
          f"{counts['transactions']} transactions")
    return 0


def cmd_clear(args) -> int:
    if not args.yes:
        print("Refusing to clear all data without --yes", file=sys.stderr)
        return 2
    db = SessionLocal()
    try:
        BackupService(db).clear_all()
    finally:
        db.close()
    print("All data cleared")
    return 0


def cmd_seed(args) -> int:
    print("Seeded products:", seed_from_file(args.file))
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("hisab.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hisab", description="Small-business ledger store")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="create or migrate the schema")
    p.add_argument("--reset", action="store_true", help="drop all tables first")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("export", help="write the dataset as JSON")
    p.add_argument("--output", "-o", help="file to write (default: stdout)")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="replace the dataset with a JSON backup")
    p.add_argument("file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("clear", help="delete all products, customers and transactions")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("seed", help="add products from a JSON list")
    p.add_argument("file")
    p.set_defaults(func=cmd_seed)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command != "init-db":
        init_db()
    try:
        return args.func(args)
    except LedgerError as e:
        log.error(f"{args.command} failed: {e}")
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
