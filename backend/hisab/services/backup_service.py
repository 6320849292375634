"""
Backup and restore of the whole dataset as one JSON document.

Export is bounded: only the most recent ``EXPORT_TRANSACTION_LIMIT``
transactions are included, older history is left out of the document.

Import is destructive but validated first: the document is parsed into
buffered records before anything is deleted, and the delete + re-insert
runs as a single unit of work, so a bad document leaves the store as it was.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from filelock import FileLock, Timeout
from pydantic import ValidationError as SchemaError
from sqlalchemy import text
from sqlalchemy.orm import Session

from hisab.config import settings
from hisab.errors import FormatError, StorageFailure
from hisab.repositories.customer_repo import CustomerRepository
from hisab.repositories.product_repo import ProductRepository
from hisab.repositories.transaction_repo import TransactionRepository
from hisab.schemas.backup_schema import FORMAT_VERSION, BackupDocument
from hisab.utils.log import get_logger
from hisab.utils.money import from_cents, to_cents
from hisab.utils.timestamps import epoch_now, file_stamp, iso_now
from hisab.utils.transactions import atomic, reading

log = get_logger("backup")

DATASET_TABLES = ["transaction_lines", "transactions", "customers", "products"]
BACKUP_PREFIX = "hisab-backup-"


class BackupService:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.customers = CustomerRepository(db)
        self.transactions = TransactionRepository(db)

    # ---- export ---------------------------------------------------------

    def export_all(self, transaction_limit: Optional[int] = None) -> Dict[str, Any]:
        limit = transaction_limit if transaction_limit is not None else settings.EXPORT_TRANSACTION_LIMIT
        with reading("export"):
            products = self.products.all()
            customers = self.customers.all()
            transactions = self.transactions.recent(limit)
            total = self.transactions.count()

            if total > len(transactions):
                log.warning(
                    f"Export carries {len(transactions)} of {total} transactions "
                    f"(limit {limit}); older history is not included"
                )

            doc = {
                "products": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "salePrice": from_cents(p.sale_price_cents),
                        "quantity": p.quantity,
                        "createdAt": p.created_at,
                        "updatedAt": p.updated_at,
                    }
                    for p in products
                ],
                "customers": [
                    {
                        "id": c.id,
                        "name": c.name,
                        "phoneNumber": c.phone_number,
                        "outstandingBalance": from_cents(c.outstanding_balance_cents),
                        "createdAt": c.created_at,
                        "updatedAt": c.updated_at,
                    }
                    for c in customers
                ],
                "transactions": [
                    {
                        "id": t.id,
                        "timestamp": t.timestamp,
                        "totalAmount": from_cents(t.total_amount_cents),
                        "isCreditSale": bool(t.is_credit_sale),
                        "customerId": t.customer_id,
                        "createdAt": t.created_at,
                        "updatedAt": t.updated_at,
                        "lines": [
                            {
                                "productId": ln.product_id,
                                "productName": ln.product_name,
                                "quantity": ln.quantity,
                                "unitPrice": from_cents(ln.unit_price_cents),
                            }
                            for ln in t.lines
                        ],
                    }
                    for t in transactions
                ],
                "exportDate": iso_now(),
                "version": FORMAT_VERSION,
            }
        log.info(
            f"Exported {len(doc['products'])} products, {len(doc['customers'])} customers, "
            f"{len(doc['transactions'])} transactions"
        )
        return doc

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(self.export_all(), indent=indent)

    # ---- import ---------------------------------------------------------

    @staticmethod
    def parse_document(document: Union[str, bytes, Dict[str, Any]]) -> BackupDocument:
        """Validate the whole document up front; raises FormatError."""
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as e:
                raise FormatError(f"Backup is not valid JSON: {e}")
        if not isinstance(document, dict):
            raise FormatError("Backup must be a JSON object")
        missing = [k for k in ("products", "customers", "transactions") if k not in document]
        if missing:
            raise FormatError(f"Backup is missing required collections: {', '.join(missing)}")
        try:
            doc = BackupDocument.model_validate(document)
        except SchemaError as e:
            raise FormatError(f"Invalid backup document: {e}")
        if doc.version and doc.version != FORMAT_VERSION:
            log.warning(f"Importing backup version {doc.version!r} (expected {FORMAT_VERSION!r})")
        return doc

    def import_all(self, document: Union[str, bytes, Dict[str, Any]]) -> Dict[str, int]:
        doc = self.parse_document(document)
        now = epoch_now()

        def ts(value):
            return value if value is not None else now

        with atomic(self.db, "import"):
            self._wipe()

            product_ids: Dict[int, int] = {}
            for rec in doc.products:
                p = self.products.add(
                    rec.name,
                    to_cents(rec.salePrice),
                    rec.quantity,
                    created_at=ts(rec.createdAt),
                    updated_at=ts(rec.updatedAt),
                )
                if rec.id is not None:
                    product_ids[rec.id] = p.id

            customer_ids: Dict[int, int] = {}
            for rec in doc.customers:
                c = self.customers.add(
                    rec.name,
                    rec.phoneNumber,
                    to_cents(rec.outstandingBalance),
                    created_at=ts(rec.createdAt),
                    updated_at=ts(rec.updatedAt),
                )
                if rec.id is not None:
                    customer_ids[rec.id] = c.id

            # oldest first so new ids follow sale order
            ordered = sorted(
                doc.transactions,
                key=lambda r: (ts(r.timestamp), r.id if r.id is not None else 0),
            )
            for rec in ordered:
                customer_id = None
                if rec.customerId is not None:
                    customer_id = customer_ids.get(rec.customerId)
                    if customer_id is None:
                        log.warning(
                            f"Transaction {rec.id} references unknown customer {rec.customerId}; dropping link"
                        )
                lines = []
                for ln in rec.lines:
                    product_id = None
                    if ln.productId is not None:
                        product_id = product_ids.get(ln.productId)
                        if product_id is None:
                            log.warning(
                                f"Transaction {rec.id} line references unknown product {ln.productId}; dropping link"
                            )
                    lines.append(
                        {
                            "product_id": product_id,
                            "product_name": ln.productName,
                            "quantity": ln.quantity,
                            "unit_price_cents": to_cents(ln.unitPrice),
                        }
                    )
                self.transactions.add(
                    total_amount_cents=to_cents(rec.totalAmount),
                    is_credit_sale=rec.isCreditSale,
                    customer_id=customer_id,
                    lines=lines,
                    timestamp=ts(rec.timestamp),
                    created_at=ts(rec.createdAt),
                    updated_at=ts(rec.updatedAt),
                )

        counts = {
            "products": len(doc.products),
            "customers": len(doc.customers),
            "transactions": len(doc.transactions),
        }
        log.info(f"Imported {counts}")
        return counts

    # ---- clear ----------------------------------------------------------

    def clear_all(self):
        """Empty the dataset tables and reset their id counters. Schema stays."""
        with atomic(self.db, "clear all"):
            self._wipe()
        log.info("All products, customers and transactions cleared")

    def _wipe(self):
        self.transactions.delete_all()
        self.customers.delete_all()
        self.products.delete_all()
        self._reset_identity_counters()

    def _reset_identity_counters(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            self.db.execute(
                text("DELETE FROM sqlite_sequence WHERE name IN ('transaction_lines', 'transactions', 'customers', 'products')")
            )
        elif dialect == "postgresql":
            for table in DATASET_TABLES:
                self.db.execute(text(f"ALTER SEQUENCE {table}_id_seq RESTART WITH 1"))
        else:
            log.warning(f"Identity counters are not reset on {dialect}")


def _backup_files(directory: Path) -> List[Path]:
    return sorted(directory.glob(f"{BACKUP_PREFIX}*.json"))


def write_backup_file(db: Session, directory: Union[str, Path], keep: int = 10) -> Path:
    """
    Write exportAll() to ``directory`` and keep only the newest ``keep`` backups.
    The file is written next to its final name and renamed into place while
    holding a lock on the directory.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    payload = BackupService(db).export_json()

    target = directory / f"{BACKUP_PREFIX}{file_stamp()}.json"
    tmp = target.with_suffix(".json.tmp")
    lock = FileLock(str(directory / ".backup.lock"))
    try:
        with lock.acquire(timeout=10):
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, target)
            if keep > 0:
                for old in _backup_files(directory)[:-keep]:
                    old.unlink()
                    log.debug(f"Pruned backup {old.name}")
    except Timeout:
        raise StorageFailure("Could not acquire backup lock; try again")
    except OSError as e:
        log.error(f"Writing backup failed: {e}")
        tmp.unlink(missing_ok=True)
        raise StorageFailure(f"Writing backup failed: {e}")
    log.info(f"Backup written to {target}")
    return target


def run_auto_backup(session_factory, directory: Union[str, Path, None] = None, keep: Optional[int] = None) -> Optional[Path]:
    """
    Scheduler job: write a backup when the autoBackup preference is on.
    Returns the written path, or None when auto backup is off.
    """
    from hisab.services.preferences_service import PreferencesService

    db = session_factory()
    try:
        if not PreferencesService(db).load().auto_backup:
            log.debug("Auto backup disabled; skipping")
            return None
        return write_backup_file(
            db,
            directory if directory is not None else settings.BACKUP_DIR,
            keep=keep if keep is not None else settings.BACKUP_KEEP,
        )
    finally:
        db.close()
