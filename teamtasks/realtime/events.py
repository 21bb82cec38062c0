# teamtasks/realtime/events.py
from datetime import datetime, timezone
from typing import Any, Protocol
from pydantic import BaseModel, Field

TASK_CREATED = "task-created"
TASK_UPDATED = "task-updated"
TASK_DELETED = "task-deleted"
TASK_ASSIGNED = "task-assigned"
TEAM_CREATED = "team-created"
TEAM_UPDATED = "team-updated"
TEAM_DELETED = "team-deleted"
TEAM_REMOVED = "team-removed"
TEAM_INVITATION = "team-invitation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RealtimeEvent(BaseModel):
    """
    RealtimeEvent — сообщение, уходящее клиентам по WebSocket.
    """
    event: str = Field(..., examples=[TASK_ASSIGNED])
    data: Any = None
    timestamp: datetime = Field(default_factory=_utcnow)


class EventPublisher(Protocol):
    """
    То, что сервисы получают при создании для рассылки событий.
    Доставка best-effort: без подтверждений и повторов.
    """

    def publish_to_user(self, user_id: int, event: RealtimeEvent) -> None:
        ...

    def broadcast(self, event: RealtimeEvent) -> None:
        ...
