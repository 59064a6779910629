"""Site setting schema definitions."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class Setting(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    value: str
    group: str


class NewSetting(BaseModel):
    name: str
    value: str
    group: str


class SettingsUpdateRequest(BaseModel):
    """Body of ``POST /api/settings``.

    ``group`` is informational; entries are matched by name only.
    """

    group: Optional[str] = None
    settings: Dict[str, str]
