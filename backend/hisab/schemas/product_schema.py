# backend/hisab/schemas/product_schema.py
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from hisab.utils.money import from_cents

SortBy = Literal["name", "price", "quantity", "createdAt", "updatedAt"]
SortOrder = Literal["ASC", "DESC"]


class ProductFilter(BaseModel):
    """Recognized listing options; an absent field imposes no constraint."""

    model_config = ConfigDict(populate_by_name=True)

    search_text: Optional[str] = Field(None, alias="searchText")
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")
    min_stock: Optional[int] = Field(None, alias="minStock")
    max_stock: Optional[int] = Field(None, alias="maxStock")
    sort_by: Optional[SortBy] = Field(None, alias="sortBy")
    sort_order: Optional[SortOrder] = Field(None, alias="sortOrder")


class ProductIn(BaseModel):
    name: str
    sale_price: Union[float, str]
    quantity: int


class ProductOut(BaseModel):
    id: int
    name: str
    sale_price: float
    quantity: int
    created_at: int
    updated_at: int

    @classmethod
    def from_model(cls, p) -> "ProductOut":
        return cls(
            id=p.id,
            name=p.name,
            sale_price=from_cents(p.sale_price_cents),
            quantity=p.quantity,
            created_at=p.created_at,
            updated_at=p.updated_at,
        )
