from fastapi import HTTPException, Request

from hisab.errors import (
    FormatError,
    InsufficientStock,
    LedgerError,
    NotFound,
    StorageFailure,
    ValidationError,
)
from hisab.services.filter_context import FilterContext
from hisab.services.sale_draft import SaleDraftRegistry

STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFound: 404,
    InsufficientStock: 409,
    FormatError: 422,
    StorageFailure: 503,
}


def http_error(e: LedgerError) -> HTTPException:
    """
    Map a ledger failure to an HTTPException whose detail tells the UI
    whether anything was written (``changed``).
    """
    status = next((code for cls, code in STATUS_BY_ERROR.items() if isinstance(e, cls)), 500)
    return HTTPException(status_code=status, detail=e.to_dict())


def get_filter_context(request: Request) -> FilterContext:
    return request.app.state.filter_context


def get_draft_registry(request: Request) -> SaleDraftRegistry:
    return request.app.state.sale_drafts
