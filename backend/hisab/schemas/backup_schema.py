"""
Records of the portable backup document (format version "1.0").

Keys are camelCase because the document is shared with the mobile client.
Only ``products``, ``customers`` and ``transactions`` are required; unknown
keys are ignored. Missing timestamps are backfilled at import time.

Every amount and integer must fit the store's 64-bit INTEGER columns, so an
oversized value fails here, before import deletes anything.
"""
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from hisab.utils.money import MAX_STORED_INT, to_cents

FORMAT_VERSION = "1.0"


def _storable_amount(v: Decimal) -> Decimal:
    to_cents(v)  # raises ValueError when out of range
    return v


StoredInt = Annotated[int, Field(ge=-MAX_STORED_INT, le=MAX_STORED_INT)]
Amount = Annotated[Decimal, AfterValidator(_storable_amount)]


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ProductRecord(_Record):
    id: Optional[StoredInt] = None
    name: str
    salePrice: Amount = Field(ge=0)
    quantity: StoredInt
    createdAt: Optional[StoredInt] = None
    updatedAt: Optional[StoredInt] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v


class CustomerRecord(_Record):
    id: Optional[StoredInt] = None
    name: str
    phoneNumber: Optional[str] = None
    outstandingBalance: Amount = Decimal("0")
    createdAt: Optional[StoredInt] = None
    updatedAt: Optional[StoredInt] = None


class LineRecord(_Record):
    productId: Optional[StoredInt] = None
    productName: Optional[str] = None
    quantity: StoredInt
    unitPrice: Amount


class TransactionRecord(_Record):
    id: Optional[StoredInt] = None
    timestamp: Optional[StoredInt] = None
    totalAmount: Amount = Field(ge=0)
    isCreditSale: bool
    customerId: Optional[StoredInt] = None
    createdAt: Optional[StoredInt] = None
    updatedAt: Optional[StoredInt] = None
    lines: List[LineRecord] = Field(default_factory=list)


class BackupDocument(_Record):
    products: List[ProductRecord]
    customers: List[CustomerRecord]
    transactions: List[TransactionRecord]
    exportDate: Optional[str] = None
    version: Optional[str] = None
