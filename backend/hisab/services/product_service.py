from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from hisab.config import settings
from hisab.errors import ValidationError
from hisab.models.product import Product
from hisab.repositories.product_repo import ProductRepository
from hisab.schemas.product_schema import ProductFilter
from hisab.utils.log import get_logger
from hisab.utils.money import MAX_STORED_INT, Number, to_cents
from hisab.utils.transactions import atomic, reading

log = get_logger("products")


def validate_product(name: str, sale_price: Number, quantity: int) -> Tuple[str, int, int]:
    """Return (trimmed name, price in cents, quantity) or raise ValidationError."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Product name must not be empty")
    try:
        price_cents = to_cents(sale_price)
    except ValueError as e:
        raise ValidationError(str(e))
    if price_cents < 0:
        raise ValidationError("Sale price must not be negative")
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be a whole number")
    if quantity < 0:
        raise ValidationError("Quantity must not be negative")
    if quantity > MAX_STORED_INT:
        raise ValidationError("Quantity is too large")
    return name, price_cents, quantity


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository(db)

    def add_product(self, name: str, sale_price: Number, quantity: int) -> int:
        name, price_cents, quantity = validate_product(name, sale_price, quantity)
        with atomic(self.db, "add product"):
            p = self.repo.add(name, price_cents, quantity)
            product_id = p.id
        log.info(f"Added product id={product_id} name={name!r} qty={quantity}")
        return product_id

    def update_product(self, product_id: int, name: str, sale_price: Number, quantity: int) -> bool:
        """
        Returns False (and writes nothing) when the product does not exist.
        created_at is never touched.
        """
        name, price_cents, quantity = validate_product(name, sale_price, quantity)
        with atomic(self.db, "update product"):
            updated = self.repo.update(product_id, name, price_cents, quantity)
        if updated:
            log.info(f"Updated product id={product_id}")
        else:
            log.debug(f"update_product: no product id={product_id}")
        return updated

    def delete_product(self, product_id: int) -> bool:
        # past transaction lines keep their informal product reference
        with atomic(self.db, "delete product"):
            deleted = self.repo.delete(product_id)
        if deleted:
            log.info(f"Deleted product id={product_id}")
        return deleted

    def get_product_by_id(self, product_id: int) -> Optional[Product]:
        with reading("get product"):
            return self.repo.get(product_id)

    def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        filters = filters or ProductFilter()
        with reading("list products"):
            return self.repo.list(
                filters,
                default_sort_by=settings.DEFAULT_SORT_BY,
                default_sort_order=settings.DEFAULT_SORT_ORDER,
            )
