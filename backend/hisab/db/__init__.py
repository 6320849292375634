from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from hisab.config import settings
from hisab.utils.log import get_logger

log = get_logger("schema")

DATABASE_URL = settings.DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # request handlers run in a threadpool; the process is still a single writer
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(reset: bool = False, bind=None):
    """
    Initialize the store. Safe to call on every process start.

    Behavior:
      - reset=True (or RESET_DB=1) drops every table first; used by tests and
        by ``hisab init-db --reset``.
      - Otherwise existing tables and rows are kept and only additive
        migrations are applied (see ``hisab.db.schema.ensure_schema``).
    """
    from hisab.db.schema import ensure_schema

    bind = bind if bind is not None else engine
    if reset or settings.RESET_DB:
        import hisab.models  # noqa: F401  populate metadata before drop_all

        log.info("Resetting database (reset requested)...")
        Base.metadata.drop_all(bind=bind)

    ensure_schema(bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
