from sqlalchemy import Column, Integer, String

from hisab.db import Base
from hisab.utils.timestamps import epoch_now


class Preference(Base):
    __tablename__ = "preferences"

    key = Column(String(64), primary_key=True)
    value = Column(String(256), nullable=False)
    updated_at = Column(Integer, nullable=False, default=epoch_now, onupdate=epoch_now)
