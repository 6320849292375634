from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hisab.api.deps import http_error
from hisab.db import get_db
from hisab.errors import LedgerError, NotFound
from hisab.schemas.transaction_schema import CreateTransactionIn, TransactionOut
from hisab.services.transaction_service import TransactionEngine

router = APIRouter(tags=["transactions"])


@router.post("", summary="Record a sale in one call")
def create_transaction(payload: CreateTransactionIn, db: Session = Depends(get_db)):
    engine = TransactionEngine(db)
    try:
        draft = engine.build_draft((it.product_id, it.qty) for it in payload.lines)
        transaction_id = engine.complete_sale(
            draft.lines,
            is_credit_sale=payload.is_credit_sale,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
        )
    except LedgerError as e:
        raise http_error(e)
    return {"transaction_id": transaction_id}


@router.get("", summary="Most recent transactions")
def list_transactions(limit: int = Query(50, ge=0, le=1000), db: Session = Depends(get_db)):
    try:
        items = TransactionEngine(db).list_transactions(limit)
    except LedgerError as e:
        raise http_error(e)
    return [TransactionOut.from_model(t).model_dump() for t in items]


@router.get("/{transaction_id}", summary="Get transaction by id")
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    try:
        t = TransactionEngine(db).get_transaction_by_id(transaction_id)
    except LedgerError as e:
        raise http_error(e)
    if not t:
        raise http_error(NotFound("Transaction", transaction_id))
    return TransactionOut.from_model(t).model_dump()


@router.delete("/{transaction_id}", summary="Delete a transaction (reverses the balance, not the stock)")
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    try:
        TransactionEngine(db).delete_transaction(transaction_id)
    except LedgerError as e:
        raise http_error(e)
    return {"ok": True}
