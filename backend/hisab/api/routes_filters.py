from fastapi import APIRouter, Depends

from hisab.api.deps import get_filter_context, http_error
from hisab.errors import LedgerError
from hisab.schemas.product_schema import ProductFilter
from hisab.services.filter_context import FilterContext

router = APIRouter(prefix="/api/filters", tags=["filters"])


@router.get("", summary="Current product filters")
def get_filters(context: FilterContext = Depends(get_filter_context)):
    return context.get().model_dump(by_alias=True)


@router.put("", summary="Replace product filters")
def set_filters(payload: ProductFilter, context: FilterContext = Depends(get_filter_context)):
    return context.set(payload).model_dump(by_alias=True)


@router.patch("", summary="Merge partial product filters")
def merge_filters(payload: dict, context: FilterContext = Depends(get_filter_context)):
    """
    payload: any subset of { "searchText", "minPrice", "maxPrice", "minStock",
    "maxStock", "sortBy", "sortOrder" }; null clears a field.
    """
    try:
        merged = context.merge(**payload)
    except LedgerError as e:
        raise http_error(e)
    return merged.model_dump(by_alias=True)
