# teamtasks/schemas/user.py
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from typing import Optional
from datetime import datetime

from teamtasks.schemas.response import as_utc

class UserSummary(BaseModel):
    """
    UserSummary — краткая карточка пользователя (в задачах, командах, списках).
    """
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)

class UserRead(UserSummary):
    """
    UserRead — профиль пользователя.
    """
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)

class UserUpdate(BaseModel):
    """
    UserUpdate — обновление профиля (все поля опциональны).
    """
    name: Optional[str] = Field(None, min_length=2, max_length=128, description="Имя")
    email: Optional[EmailStr] = Field(None, description="Email")
    password: Optional[str] = Field(None, min_length=6, description="Новый пароль")
