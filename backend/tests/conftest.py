import os
import tempfile

# point the app at a throwaway store before hisab.config is imported
_TMP = tempfile.mkdtemp(prefix="hisab-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["BACKUP_DIR"] = os.path.join(_TMP, "backups")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RESET_DB"] = "false"

import pytest
from fastapi.testclient import TestClient

from hisab.db import SessionLocal, init_db
from hisab.main import app
from hisab.services.filter_context import FilterContext
from hisab.services.sale_draft import SaleDraftRegistry


@pytest.fixture()
def db():
    """Fresh schema and a session per test."""
    init_db(reset=True)
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(db):
    app.state.filter_context = FilterContext()
    app.state.sale_drafts = SaleDraftRegistry()
    with TestClient(app) as c:
        yield c
