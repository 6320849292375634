from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hisab.models.transaction import Transaction, TransactionLine
from hisab.utils.timestamps import epoch_now


class TransactionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: int) -> Optional[Transaction]:
        return self.db.get(Transaction, transaction_id)

    def add(
        self,
        total_amount_cents: int,
        is_credit_sale: bool,
        customer_id: Optional[int] = None,
        lines: Iterable[dict] = (),
        timestamp=None,
        created_at=None,
        updated_at=None,
    ) -> Transaction:
        """
        lines: iterable of {product_id, product_name, quantity, unit_price_cents}
        """
        now = epoch_now()
        t = Transaction(
            timestamp=timestamp if timestamp is not None else now,
            total_amount_cents=total_amount_cents,
            is_credit_sale=is_credit_sale,
            customer_id=customer_id,
            created_at=created_at if created_at is not None else now,
            updated_at=updated_at if updated_at is not None else now,
        )
        for ln in lines:
            t.lines.append(TransactionLine(**ln))
        self.db.add(t)
        self.db.flush()
        return t

    def delete(self, transaction: Transaction):
        self.db.delete(transaction)
        self.db.flush()

    def recent(self, limit: int) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Transaction.id)).scalar() or 0

    def delete_all(self) -> int:
        self.db.query(TransactionLine).delete(synchronize_session="fetch")
        return self.db.query(Transaction).delete(synchronize_session="fetch")
