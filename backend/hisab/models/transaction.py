from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from hisab.db import Base
from hisab.utils.timestamps import epoch_now


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, default=epoch_now, index=True)  # sale time
    total_amount_cents = Column(Integer, nullable=False, default=0)
    is_credit_sale = Column(Boolean, nullable=False, default=False)
    # set only for credit sales; by convention, not a hard constraint
    customer_id = Column(Integer, nullable=True, index=True)
    created_at = Column(Integer, nullable=False, default=epoch_now)
    updated_at = Column(Integer, nullable=False, default=epoch_now)

    lines = relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.id",
    )

    def __repr__(self):
        return f"<Transaction id={self.id} total={self.total_amount_cents} credit={self.is_credit_sale}>"


class TransactionLine(Base):
    __tablename__ = "transaction_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(
        Integer,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # informal reference: deleting a product keeps its history
    product_id = Column(Integer, nullable=True)
    product_name = Column(String(256), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)

    transaction = relationship("Transaction", back_populates="lines")
