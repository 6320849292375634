from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hisab.api.deps import http_error
from hisab.db import get_db
from hisab.errors import LedgerError, NotFound
from hisab.schemas.customer_schema import CustomerIn, CustomerOut, PaymentIn
from hisab.services.customer_service import CustomerLedger
from hisab.utils.money import from_cents

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", summary="All customers by name")
def list_customers(db: Session = Depends(get_db)):
    try:
        customers = CustomerLedger(db).list_all_customers()
    except LedgerError as e:
        raise http_error(e)
    return [CustomerOut.from_model(c).model_dump() for c in customers]


@router.get("/with-balance", summary="Customers who owe money, most recently updated first")
def list_customers_with_balance(db: Session = Depends(get_db)):
    try:
        customers = CustomerLedger(db).list_customers_with_balance()
    except LedgerError as e:
        raise http_error(e)
    return [CustomerOut.from_model(c).model_dump() for c in customers]


@router.post("", summary="Register or update a customer by name")
def upsert_customer(payload: CustomerIn, db: Session = Depends(get_db)):
    try:
        customer_id = CustomerLedger(db).upsert_customer(payload.name, payload.phone_number)
    except LedgerError as e:
        raise http_error(e)
    return {"id": customer_id}


@router.get("/{customer_id}", summary="Get customer by id")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        c = CustomerLedger(db).get_customer_by_id(customer_id)
    except LedgerError as e:
        raise http_error(e)
    if not c:
        raise http_error(NotFound("Customer", customer_id))
    return CustomerOut.from_model(c).model_dump()


@router.post("/{customer_id}/payments", summary="Record a payment against the balance")
def record_payment(customer_id: int, payload: PaymentIn, db: Session = Depends(get_db)):
    try:
        result = CustomerLedger(db).record_payment(customer_id, payload.amount)
    except LedgerError as e:
        raise http_error(e)
    return {
        "customer_id": result.customer_id,
        "outstanding_balance": from_cents(result.outstanding_balance_cents),
        "overpaid": result.overpaid,
    }
