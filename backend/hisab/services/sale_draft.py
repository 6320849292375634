"""
In-progress sales.

A ``SaleDraft`` accumulates line items in memory while the cashier picks
products. Nothing is written to the store until the draft's lines are handed
to ``TransactionEngine.complete_sale``; abandoning a draft simply discards it.
"""
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from hisab.errors import InsufficientStock, NotFound, ValidationError


@dataclass
class SaleLine:
    product_id: int
    product_name: str
    unit_price_cents: int  # price snapshot taken when the line was added
    quantity: int

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.quantity


def _check_quantity(qty) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise ValidationError("Quantity must be a positive whole number")
    return qty


class SaleDraft:
    def __init__(self):
        self._lines: Dict[int, SaleLine] = {}

    @property
    def lines(self) -> List[SaleLine]:
        return list(self._lines.values())

    @property
    def total_cents(self) -> int:
        return sum(ln.subtotal_cents for ln in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def add_item(self, product, qty: int) -> SaleLine:
        """
        Add ``qty`` units of ``product`` (anything with id, name,
        sale_price_cents and quantity). A product already in the draft is
        merged into its existing line; the merged quantity must still fit in
        stock, otherwise the draft is left unchanged.
        """
        qty = _check_quantity(qty)
        existing = self._lines.get(product.id)
        wanted = qty + (existing.quantity if existing else 0)
        if wanted > product.quantity:
            raise InsufficientStock(product.id, wanted, product.quantity)
        if existing:
            existing.quantity = wanted
            existing.unit_price_cents = product.sale_price_cents
            existing.product_name = product.name
            return existing
        line = SaleLine(product.id, product.name, product.sale_price_cents, qty)
        self._lines[product.id] = line
        return line

    def set_quantity(self, product, qty: int) -> SaleLine:
        qty = _check_quantity(qty)
        line = self._lines.get(product.id)
        if not line:
            raise NotFound("Sale line", product.id)
        if qty > product.quantity:
            raise InsufficientStock(product.id, qty, product.quantity)
        line.quantity = qty
        return line

    def remove_item(self, product_id: int) -> bool:
        return self._lines.pop(product_id, None) is not None

    def clear(self):
        self._lines.clear()


class SaleDraftRegistry:
    """Open drafts keyed by an opaque token (one per till/browser)."""

    def __init__(self):
        self._drafts: Dict[str, SaleDraft] = {}

    def get(self, token: Optional[str]) -> Optional[SaleDraft]:
        if not token:
            return None
        return self._drafts.get(token)

    def get_or_create(self, token: Optional[str] = None) -> Tuple[str, SaleDraft]:
        """
        Return the draft held under ``token``. Tokens this registry did not
        issue are ignored and a fresh draft with a new token is opened.
        """
        draft = self.get(token)
        if draft is not None:
            return token, draft
        new_token = uuid.uuid4().hex
        draft = SaleDraft()
        self._drafts[new_token] = draft
        return new_token, draft

    def discard(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self._drafts.pop(token, None) is not None

    def __len__(self):
        return len(self._drafts)
