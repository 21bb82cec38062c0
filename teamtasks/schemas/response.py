# teamtasks/schemas/response.py
from pydantic import BaseModel, Field
from typing import Generic, Optional, TypeVar
from datetime import datetime, timezone

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    """
    Envelope — единый формат ответа API: {success, data?, message?}.
    """
    success: bool = Field(True, description="Успешно ли выполнен запрос")
    data: Optional[T] = Field(None, description="Полезная нагрузка")
    message: Optional[str] = Field(None, examples=["Task deleted successfully"], description="Сообщение для клиента")

class MessageResponse(BaseModel):
    """
    MessageResponse — ответ без данных, только с сообщением.
    """
    success: bool = True
    message: str = Field(..., examples=["Action completed successfully"])

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite отдаёт naive datetime; всё хранится в UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
