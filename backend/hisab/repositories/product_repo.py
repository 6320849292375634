from typing import List, Optional

from sqlalchemy import asc, desc, update
from sqlalchemy.orm import Session

from hisab.models.product import Product
from hisab.schemas.product_schema import ProductFilter
from hisab.utils.money import to_cents
from hisab.utils.timestamps import epoch_now

SORT_COLUMNS = {
    "name": Product.name,
    "price": Product.sale_price_cents,
    "quantity": Product.quantity,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(
        self,
        filters: ProductFilter,
        default_sort_by: str = "createdAt",
        default_sort_order: str = "DESC",
    ) -> List[Product]:
        """
        All filters compose with AND. Ties on the sort key are broken by id in
        the same direction so repeated calls return the same order.
        """
        query = self.db.query(Product)
        search = (filters.search_text or "").strip()
        if search:
            query = query.filter(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
        if filters.min_price is not None:
            query = query.filter(Product.sale_price_cents >= to_cents(filters.min_price))
        if filters.max_price is not None:
            query = query.filter(Product.sale_price_cents <= to_cents(filters.max_price))
        if filters.min_stock is not None:
            query = query.filter(Product.quantity >= filters.min_stock)
        if filters.max_stock is not None:
            query = query.filter(Product.quantity <= filters.max_stock)

        sort_by = filters.sort_by or default_sort_by
        sort_order = filters.sort_order or default_sort_order
        column = SORT_COLUMNS.get(sort_by, Product.created_at)
        direction = asc if sort_order == "ASC" else desc
        return query.order_by(direction(column), direction(Product.id)).all()

    def all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def add(self, name: str, sale_price_cents: int, quantity: int, created_at=None, updated_at=None) -> Product:
        now = epoch_now()
        p = Product(
            name=name,
            sale_price_cents=sale_price_cents,
            quantity=quantity,
            created_at=created_at if created_at is not None else now,
            updated_at=updated_at if updated_at is not None else now,
        )
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product_id: int, name: str, sale_price_cents: int, quantity: int) -> bool:
        p = self.get(product_id)
        if not p:
            return False
        p.name = name
        p.sale_price_cents = sale_price_cents
        p.quantity = quantity
        p.updated_at = epoch_now()
        self.db.flush()
        return True

    def delete(self, product_id: int) -> bool:
        deleted = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return deleted > 0

    def decrement_stock(self, product_id: int, qty: int) -> Optional[int]:
        """
        quantity = quantity - qty in a single UPDATE. Returns the new quantity,
        or None if the product does not exist.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity - qty, updated_at=epoch_now())
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            return None
        self.db.flush()
        p = self.get(product_id)
        self.db.refresh(p)
        return p.quantity

    def delete_all(self) -> int:
        return self.db.query(Product).delete(synchronize_session="fetch")
