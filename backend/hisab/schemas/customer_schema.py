from typing import Optional, Union
from pydantic import BaseModel

from hisab.utils.money import from_cents


class CustomerIn(BaseModel):
    name: str
    phone_number: Optional[str] = None


class PaymentIn(BaseModel):
    amount: Union[float, str]


class CustomerOut(BaseModel):
    id: int
    name: str
    phone_number: Optional[str] = None
    outstanding_balance: float
    created_at: int
    updated_at: int

    @classmethod
    def from_model(cls, c) -> "CustomerOut":
        return cls(
            id=c.id,
            name=c.name,
            phone_number=c.phone_number,
            outstanding_balance=from_cents(c.outstanding_balance_cents),
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
