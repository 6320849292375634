from fastapi import APIRouter
from sqlalchemy import text

from hisab.db import engine
from hisab.db.schema import list_tables

router = APIRouter()

LEDGER_TABLES = ["customers", "preferences", "products", "transaction_lines", "transactions"]


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    tables = []
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
        tables = [t for t in list_tables(engine) if t in LEDGER_TABLES]
    except Exception:
        db_ok = False

    return {
        "status": "ok" if db_ok and tables == LEDGER_TABLES else "degraded",
        "db": db_ok,
        "tables": tables,
    }
