from typing import List, Optional
from pydantic import BaseModel, Field

from hisab.utils.money import from_cents


class SaleItemIn(BaseModel):
    product_id: int
    qty: int


class SaleQuantityIn(BaseModel):
    qty: int


class CompleteSaleIn(BaseModel):
    is_credit_sale: bool = False
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class CreateTransactionIn(CompleteSaleIn):
    lines: List[SaleItemIn] = Field(default_factory=list)


class TransactionLineOut(BaseModel):
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: int
    unit_price: float


class TransactionOut(BaseModel):
    id: int
    timestamp: int
    total_amount: float
    is_credit_sale: bool
    customer_id: Optional[int] = None
    created_at: int
    updated_at: int
    lines: List[TransactionLineOut] = Field(default_factory=list)

    @classmethod
    def from_model(cls, t) -> "TransactionOut":
        return cls(
            id=t.id,
            timestamp=t.timestamp,
            total_amount=from_cents(t.total_amount_cents),
            is_credit_sale=bool(t.is_credit_sale),
            customer_id=t.customer_id,
            created_at=t.created_at,
            updated_at=t.updated_at,
            lines=[
                TransactionLineOut(
                    product_id=ln.product_id,
                    product_name=ln.product_name,
                    quantity=ln.quantity,
                    unit_price=from_cents(ln.unit_price_cents),
                )
                for ln in t.lines
            ],
        )
