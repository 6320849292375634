from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Preferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auto_backup: bool = Field(False, alias="autoBackup")
    analytics_enabled: bool = Field(True, alias="analyticsEnabled")


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auto_backup: Optional[bool] = Field(None, alias="autoBackup")
    analytics_enabled: Optional[bool] = Field(None, alias="analyticsEnabled")
