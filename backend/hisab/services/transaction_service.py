from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from hisab.errors import NotFound, ValidationError
from hisab.models.transaction import Transaction
from hisab.repositories.product_repo import ProductRepository
from hisab.repositories.transaction_repo import TransactionRepository
from hisab.services.customer_service import CustomerLedger
from hisab.services.sale_draft import SaleDraft, SaleLine
from hisab.utils.log import get_logger
from hisab.utils.transactions import atomic, reading

log = get_logger("sales")


class TransactionEngine:
    """
    Turns a finished sale draft into a persisted transaction.

    ``complete_sale`` runs as one unit of work: customer upsert, transaction
    row, balance increase and every stock decrement commit together or not
    at all. ``delete_transaction`` reverses the balance effect only; stock
    decremented by the sale is not put back.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.transactions = TransactionRepository(db)
        self.ledger = CustomerLedger(db)

    def build_draft(self, items: Iterable[Tuple[int, int]]) -> SaleDraft:
        """
        items: iterable of (product_id, qty). Applies the same checks as
        adding lines interactively, against the stock currently on hand.
        """
        draft = SaleDraft()
        with reading("build sale"):
            for product_id, qty in items:
                product = self.products.get(product_id)
                if not product:
                    raise NotFound("Product", product_id)
                draft.add_item(product, qty)
        return draft

    def complete_sale(
        self,
        lines: List[SaleLine],
        is_credit_sale: bool = False,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> int:
        lines = list(lines)
        if not lines:
            raise ValidationError("A sale needs at least one line item")
        for ln in lines:
            if isinstance(ln.quantity, bool) or not isinstance(ln.quantity, int) or ln.quantity <= 0:
                raise ValidationError("Quantity must be a positive whole number")
        if is_credit_sale and not (customer_name or "").strip():
            raise ValidationError("Customer name is required for a credit sale")

        total_cents = sum(ln.unit_price_cents * ln.quantity for ln in lines)

        with atomic(self.db, "complete sale"):
            customer_id = None
            if is_credit_sale:
                customer_id = self.ledger.upsert_customer(customer_name, customer_phone)

            t = self.transactions.add(
                total_amount_cents=total_cents,
                is_credit_sale=is_credit_sale,
                customer_id=customer_id,
                lines=[
                    {
                        "product_id": ln.product_id,
                        "product_name": ln.product_name,
                        "quantity": ln.quantity,
                        "unit_price_cents": ln.unit_price_cents,
                    }
                    for ln in lines
                ],
            )
            transaction_id = t.id

            if is_credit_sale:
                self.ledger.adjust_balance_cents(customer_id, total_cents)

            for ln in lines:
                remaining = self.products.decrement_stock(ln.product_id, ln.quantity)
                if remaining is None:
                    raise NotFound("Product", ln.product_id)
                if remaining < 0:
                    log.warning(f"Product id={ln.product_id} stock is now {remaining}")

        log.info(
            f"Completed sale id={transaction_id} total={total_cents} "
            f"credit={is_credit_sale} customer={customer_id}"
        )
        return transaction_id

    def delete_transaction(self, transaction_id: int):
        with atomic(self.db, "delete transaction"):
            t = self.transactions.get(transaction_id)
            if not t:
                raise NotFound("Transaction", transaction_id)
            if t.is_credit_sale and t.customer_id is not None:
                self.ledger.adjust_balance_cents(t.customer_id, -t.total_amount_cents)
            # product stock is intentionally left as the sale left it
            self.transactions.delete(t)
        log.info(f"Deleted transaction id={transaction_id}")

    def get_transaction_by_id(self, transaction_id: int) -> Optional[Transaction]:
        with reading("get transaction"):
            return self.transactions.get(transaction_id)

    def list_transactions(self, limit: int = 50) -> List[Transaction]:
        if limit < 0:
            raise ValidationError("Limit must not be negative")
        with reading("list transactions"):
            return self.transactions.recent(limit)
