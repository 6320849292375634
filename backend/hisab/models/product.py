from sqlalchemy import Column, Integer, String

from hisab.db import Base
from hisab.utils.timestamps import epoch_now


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False, index=True)
    sale_price_cents = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)  # units on hand
    created_at = Column(Integer, nullable=False, default=epoch_now)
    updated_at = Column(Integer, nullable=False, default=epoch_now)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name} qty={self.quantity}>"
