from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from hisab.api.deps import get_draft_registry, http_error
from hisab.db import get_db
from hisab.errors import LedgerError, NotFound
from hisab.schemas.transaction_schema import CompleteSaleIn, SaleItemIn, SaleQuantityIn
from hisab.services.product_service import ProductService
from hisab.services.sale_draft import SaleDraft, SaleDraftRegistry
from hisab.services.transaction_service import TransactionEngine
from hisab.utils.money import from_cents

router = APIRouter(prefix="/api/sale-draft", tags=["sales"])

COOKIE = "sale_draft"


def _get_draft_token(request: Request) -> Optional[str]:
    return request.cookies.get(COOKIE)


def _draft_out(token: Optional[str], draft: Optional[SaleDraft]) -> dict:
    lines = draft.lines if draft is not None else []
    return {
        "draft": token if draft is not None else None,
        "items": [
            {
                "product_id": ln.product_id,
                "product_name": ln.product_name,
                "quantity": ln.quantity,
                "unit_price": from_cents(ln.unit_price_cents),
                "subtotal": from_cents(ln.subtotal_cents),
            }
            for ln in lines
        ],
        "total": from_cents(draft.total_cents) if draft is not None else 0.0,
    }


def _load_product(db: Session, product_id: int):
    p = ProductService(db).get_product_by_id(product_id)
    if not p:
        raise NotFound("Product", product_id)
    return p


@router.get("", summary="Get the sale in progress")
def get_draft(request: Request, drafts: SaleDraftRegistry = Depends(get_draft_registry)):
    # reading never opens a draft; only adding the first line does
    token = _get_draft_token(request)
    return _draft_out(token, drafts.get(token))


@router.post("/items", summary="Add a line item")
def add_item(
    payload: SaleItemIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    drafts: SaleDraftRegistry = Depends(get_draft_registry),
):
    token, draft = drafts.get_or_create(_get_draft_token(request))
    try:
        draft.add_item(_load_product(db, payload.product_id), payload.qty)
    except LedgerError as e:
        if draft.is_empty():
            drafts.discard(token)
        raise http_error(e)
    response.set_cookie(COOKIE, token, httponly=False, samesite="Lax")
    return _draft_out(token, draft)


@router.put("/items/{product_id}", summary="Change a line's quantity")
def set_quantity(
    product_id: int,
    payload: SaleQuantityIn,
    request: Request,
    db: Session = Depends(get_db),
    drafts: SaleDraftRegistry = Depends(get_draft_registry),
):
    token = _get_draft_token(request)
    draft = drafts.get(token)
    try:
        if draft is None:
            raise NotFound("Sale line", product_id)
        draft.set_quantity(_load_product(db, product_id), payload.qty)
    except LedgerError as e:
        raise http_error(e)
    return _draft_out(token, draft)


@router.delete("/items/{product_id}", summary="Remove a line")
def remove_item(product_id: int, request: Request, drafts: SaleDraftRegistry = Depends(get_draft_registry)):
    token = _get_draft_token(request)
    draft = drafts.get(token)
    if draft is not None:
        draft.remove_item(product_id)
    return _draft_out(token, draft)


@router.delete("", summary="Abandon the sale in progress")
def abandon(request: Request, drafts: SaleDraftRegistry = Depends(get_draft_registry)):
    return {"ok": True, "discarded": drafts.discard(_get_draft_token(request))}


@router.post("/complete", summary="Finalize the sale")
def complete(
    payload: CompleteSaleIn,
    request: Request,
    db: Session = Depends(get_db),
    drafts: SaleDraftRegistry = Depends(get_draft_registry),
):
    token = _get_draft_token(request)
    draft = drafts.get(token)
    try:
        transaction_id = TransactionEngine(db).complete_sale(
            draft.lines if draft is not None else [],
            is_credit_sale=payload.is_credit_sale,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
        )
    except LedgerError as e:
        raise http_error(e)
    drafts.discard(token)
    return {"transaction_id": transaction_id, "total": from_cents(draft.total_cents)}
