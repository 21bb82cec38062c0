# teamtasks/schemas/notification.py
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from teamtasks.schemas.response import as_utc

class NotificationRead(BaseModel):
    id: int
    user_id: int
    message: str
    type: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)
