from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hisab.api.deps import get_filter_context, http_error
from hisab.db import get_db
from hisab.errors import LedgerError, NotFound
from hisab.schemas.product_schema import ProductFilter, ProductIn, ProductOut, SortBy, SortOrder
from hisab.services.filter_context import FilterContext
from hisab.services.product_service import ProductService

router = APIRouter(tags=["products"])


@router.get("", summary="List products")
def list_products(
    search_text: Optional[str] = Query(None, alias="searchText", description="name contains (case-insensitive)"),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    min_stock: Optional[int] = Query(None, alias="minStock"),
    max_stock: Optional[int] = Query(None, alias="maxStock"),
    sort_by: Optional[SortBy] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    context: FilterContext = Depends(get_filter_context),
):
    # omitted parameters fall back to the session's current selection
    given = {
        "search_text": search_text,
        "min_price": min_price,
        "max_price": max_price,
        "min_stock": min_stock,
        "max_stock": max_stock,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    current = context.get().model_dump()
    filters = ProductFilter(**{k: (v if v is not None else current[k]) for k, v in given.items()})
    try:
        items = ProductService(db).list_products(filters)
    except LedgerError as e:
        raise http_error(e)
    return {
        "items": [ProductOut.from_model(p).model_dump() for p in items],
        "total": len(items),
        "filters": filters.model_dump(by_alias=True),
    }


@router.post("", summary="Add product")
def add_product(payload: ProductIn, db: Session = Depends(get_db)):
    try:
        product_id = ProductService(db).add_product(payload.name, payload.sale_price, payload.quantity)
    except LedgerError as e:
        raise http_error(e)
    return {"id": product_id}


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        p = ProductService(db).get_product_by_id(product_id)
    except LedgerError as e:
        raise http_error(e)
    if not p:
        raise http_error(NotFound("Product", product_id))
    return ProductOut.from_model(p).model_dump()


@router.put("/{product_id}", summary="Update product")
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)):
    try:
        updated = ProductService(db).update_product(product_id, payload.name, payload.sale_price, payload.quantity)
    except LedgerError as e:
        raise http_error(e)
    return {"ok": True, "updated": updated}


@router.delete("/{product_id}", summary="Delete product")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        deleted = ProductService(db).delete_product(product_id)
    except LedgerError as e:
        raise http_error(e)
    return {"ok": True, "deleted": deleted}
