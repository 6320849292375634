from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hisab.models.preference import Preference
from hisab.schemas.preferences_schema import Preferences, PreferencesUpdate
from hisab.utils.log import get_logger
from hisab.utils.transactions import atomic

log = get_logger("preferences")

KEYS = {"auto_backup": "autoBackup", "analytics_enabled": "analyticsEnabled"}


class PreferencesService:
    def __init__(self, db: Session):
        self.db = db

    def load(self) -> Preferences:
        """Stored preferences, or the defaults if the store cannot be read."""
        try:
            rows = {
                p.key: p.value
                for p in self.db.query(Preference).filter(Preference.key.in_(KEYS.values())).all()
            }
        except SQLAlchemyError as e:
            self.db.rollback()
            log.warning(f"Failed to load preferences, using defaults: {e}")
            return Preferences()
        prefs = Preferences()
        for field, key in KEYS.items():
            if key in rows:
                setattr(prefs, field, rows[key] == "true")
        return prefs

    def save(self, update: PreferencesUpdate) -> Preferences:
        with atomic(self.db, "save preferences"):
            for field, key in KEYS.items():
                value = getattr(update, field)
                if value is None:
                    continue
                row = self.db.get(Preference, key)
                if row:
                    row.value = "true" if value else "false"
                else:
                    self.db.add(Preference(key=key, value="true" if value else "false"))
            self.db.flush()
        log.info(f"Saved preferences {update.model_dump(exclude_none=True)}")
        return self.load()
