from typing import List, NamedTuple, Optional

from sqlalchemy.orm import Session

from hisab.errors import NotFound, ValidationError
from hisab.models.customer import Customer
from hisab.repositories.customer_repo import CustomerRepository
from hisab.utils.log import get_logger
from hisab.utils.money import Number, to_cents
from hisab.utils.transactions import atomic, reading

log = get_logger("ledger")


class PaymentResult(NamedTuple):
    customer_id: int
    outstanding_balance_cents: int
    overpaid: bool


class CustomerLedger:
    """
    Customer records and their outstanding balances.

    Every balance change, from a credit sale or from a payment, goes through
    ``adjust_balance`` so the balance always equals credit sales minus
    payments.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository(db)

    def upsert_customer(self, name: str, phone_number: Optional[str] = None) -> int:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Customer name must not be empty")
        phone_number = (phone_number or "").strip() or None
        with atomic(self.db, "upsert customer"):
            c = self.repo.get_by_name(name)
            if c:
                # an empty phone keeps the number on file
                self.repo.touch(c, phone_number)
                log.debug(f"Matched customer id={c.id} name={name!r}")
            else:
                c = self.repo.add(name, phone_number)
                log.info(f"Registered customer id={c.id} name={name!r}")
            customer_id = c.id
        return customer_id

    def adjust_balance(self, customer_id: int, delta: Number) -> int:
        """
        Add ``delta`` (may be negative) to the outstanding balance and return
        the new balance in cents. The balance is allowed to go below zero.
        """
        try:
            delta_cents = to_cents(delta)
        except ValueError as e:
            raise ValidationError(str(e))
        return self.adjust_balance_cents(customer_id, delta_cents)

    def adjust_balance_cents(self, customer_id: int, delta_cents: int) -> int:
        with atomic(self.db, "adjust balance"):
            balance = self.repo.add_to_balance(customer_id, delta_cents)
            if balance is None:
                raise NotFound("Customer", customer_id)
        log.info(f"Customer id={customer_id} balance {delta_cents:+d} -> {balance}")
        return balance

    def record_payment(self, customer_id: int, amount: Number) -> PaymentResult:
        try:
            cents = to_cents(amount)
        except ValueError as e:
            raise ValidationError(str(e))
        if cents <= 0:
            raise ValidationError("Payment amount must be positive")
        balance = self.adjust_balance_cents(customer_id, -cents)
        overpaid = balance < 0
        if overpaid:
            log.warning(f"Customer id={customer_id} overpaid; balance is now {balance}")
        return PaymentResult(customer_id, balance, overpaid)

    def get_customer_by_id(self, customer_id: int) -> Optional[Customer]:
        with reading("get customer"):
            return self.repo.get(customer_id)

    def list_customers_with_balance(self) -> List[Customer]:
        with reading("list customers with balance"):
            return self.repo.list_with_balance()

    def list_all_customers(self) -> List[Customer]:
        with reading("list customers"):
            return self.repo.list_all()
