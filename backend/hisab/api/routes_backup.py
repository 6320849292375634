from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from hisab.api.deps import http_error
from hisab.db import get_db
from hisab.errors import LedgerError
from hisab.schemas.preferences_schema import PreferencesUpdate
from hisab.services.backup_service import BackupService
from hisab.services.preferences_service import PreferencesService

router = APIRouter(tags=["backup"])

CLEAR_CONFIRMATION = "DELETE EVERYTHING"


@router.get("/api/backup/export", summary="Export the whole dataset")
def export_all(db: Session = Depends(get_db)):
    try:
        return BackupService(db).export_all()
    except LedgerError as e:
        raise http_error(e)


@router.post("/api/backup/import", summary="Replace the dataset with a backup")
def import_all(document: dict = Body(...), db: Session = Depends(get_db)):
    try:
        counts = BackupService(db).import_all(document)
    except LedgerError as e:
        raise http_error(e)
    return {"ok": True, "imported": counts}


@router.post("/api/backup/clear", summary="Delete all products, customers and transactions")
def clear_all(payload: dict = Body(...), db: Session = Depends(get_db)):
    if payload.get("confirm") != CLEAR_CONFIRMATION:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "ValidationError",
                "message": f'Send {{"confirm": "{CLEAR_CONFIRMATION}"}} to proceed',
                "changed": False,
            },
        )
    try:
        BackupService(db).clear_all()
    except LedgerError as e:
        raise http_error(e)
    return {"ok": True}


@router.get("/api/preferences", summary="Stored preferences")
def get_preferences(db: Session = Depends(get_db)):
    return PreferencesService(db).load().model_dump(by_alias=True)


@router.patch("/api/preferences", summary="Update preferences")
def update_preferences(payload: PreferencesUpdate, db: Session = Depends(get_db)):
    try:
        prefs = PreferencesService(db).save(payload)
    except LedgerError as e:
        raise http_error(e)
    return prefs.model_dump(by_alias=True)
