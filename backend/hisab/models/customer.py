from sqlalchemy import Column, Integer, String

from hisab.db import Base
from hisab.utils.timestamps import epoch_now


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    # natural key for upsert; exact, case-sensitive match
    name = Column(String(256), nullable=False, index=True)
    phone_number = Column(String(64), nullable=True)
    outstanding_balance_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(Integer, nullable=False, default=epoch_now)
    updated_at = Column(Integer, nullable=False, default=epoch_now)

    def __repr__(self):
        return f"<Customer id={self.id} name={self.name} balance={self.outstanding_balance_cents}>"
