from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from hisab.models.customer import Customer
from hisab.utils.timestamps import epoch_now


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, customer_id: int) -> Optional[Customer]:
        return self.db.get(Customer, customer_id)

    def get_by_name(self, name: str) -> Optional[Customer]:
        # exact, case-sensitive; lowest id wins if a restored backup carried duplicates
        return (
            self.db.query(Customer)
            .filter(Customer.name == name)
            .order_by(Customer.id)
            .first()
        )

    def add(
        self,
        name: str,
        phone_number: Optional[str] = None,
        outstanding_balance_cents: int = 0,
        created_at=None,
        updated_at=None,
    ) -> Customer:
        now = epoch_now()
        c = Customer(
            name=name,
            phone_number=phone_number,
            outstanding_balance_cents=outstanding_balance_cents,
            created_at=created_at if created_at is not None else now,
            updated_at=updated_at if updated_at is not None else now,
        )
        self.db.add(c)
        self.db.flush()
        return c

    def touch(self, customer: Customer, phone_number: Optional[str] = None) -> Customer:
        if phone_number:
            customer.phone_number = phone_number
        customer.updated_at = epoch_now()
        self.db.flush()
        return customer

    def add_to_balance(self, customer_id: int, delta_cents: int) -> Optional[int]:
        """
        outstanding_balance = outstanding_balance + delta in a single UPDATE.
        Returns the new balance, or None if the customer does not exist.
        """
        result = self.db.execute(
            update(Customer)
            .where(Customer.id == customer_id)
            .values(
                outstanding_balance_cents=Customer.outstanding_balance_cents + delta_cents,
                updated_at=epoch_now(),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            return None
        self.db.flush()
        c = self.get(customer_id)
        self.db.refresh(c)
        return c.outstanding_balance_cents

    def list_with_balance(self) -> List[Customer]:
        return (
            self.db.query(Customer)
            .filter(Customer.outstanding_balance_cents > 0)
            .order_by(Customer.updated_at.desc(), Customer.id.desc())
            .all()
        )

    def list_all(self) -> List[Customer]:
        return self.db.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()

    def all(self) -> List[Customer]:
        return self.db.query(Customer).order_by(Customer.id).all()

    def delete_all(self) -> int:
        return self.db.query(Customer).delete(synchronize_session="fetch")
