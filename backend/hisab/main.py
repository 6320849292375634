from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hisab.api.health import router as health_router
from hisab.api.routes_backup import router as backup_router
from hisab.api.routes_customers import router as customers_router
from hisab.api.routes_filters import router as filters_router
from hisab.api.routes_products import router as products_router
from hisab.api.routes_sale_draft import router as sale_draft_router
from hisab.api.routes_transactions import router as transactions_router
from hisab.config import settings
from hisab.db import SessionLocal, init_db
from hisab.errors import LedgerError
from hisab.services.backup_service import run_auto_backup
from hisab.services.filter_context import FilterContext
from hisab.services.sale_draft import SaleDraftRegistry
from hisab.utils.log import get_logger

log = get_logger("app")


def auto_backup_job():
    try:
        run_auto_backup(SessionLocal)
    except LedgerError as e:
        log.error(f"Auto backup failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup; schema failures are fatal
    init_db()

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            auto_backup_job,
            "interval",
            seconds=settings.BACKUP_INTERVAL_SECONDS,
            id="auto_backup",
        )
        scheduler.start()

    try:
        yield
    finally:
        if scheduler:
            scheduler.shutdown(wait=False)


app = FastAPI(title="Hisab - Ledger Backend", version="0.1.0", lifespan=lifespan)

# per-process UI session state, handed to handlers through dependencies
app.state.filter_context = FilterContext()
app.state.sale_drafts = SaleDraftRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(products_router, prefix="/api/products", tags=["products"])

app.include_router(filters_router, tags=["filters"])

app.include_router(customers_router, tags=["customers"])

app.include_router(sale_draft_router, tags=["sales"])

app.include_router(transactions_router, prefix="/api/transactions", tags=["transactions"])

app.include_router(backup_router, tags=["backup"])
