# teamtasks/schemas/task.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from teamtasks.models.task import TaskPriority, TaskStatus
from teamtasks.schemas.response import as_utc
from teamtasks.schemas.user import UserSummary


class TaskCreate(BaseModel):
    """
    TaskCreate — создание задачи. Статус всегда TODO, автор — текущий пользователь.
    """
    title: str = Field(..., min_length=1, max_length=100, examples=["Prepare release notes"])
    description: str = Field(..., min_length=1, examples=["Collect merged PRs since v1.2"])
    due_date: datetime = Field(..., examples=["2030-01-01T09:00:00Z"], description="ISO datetime")
    priority: TaskPriority = Field(..., examples=["HIGH"])
    assignee_ids: List[int] = Field(default_factory=list, description="ID исполнителей")
    team_id: Optional[int] = Field(None, description="ID команды (нужно быть её участником)")


class TaskUpdate(BaseModel):
    """
    TaskUpdate — частичное обновление. assignee_ids заменяет весь набор исполнителей.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assignee_ids: Optional[List[int]] = None


class TaskRead(BaseModel):
    """
    TaskRead — задача с автором и исполнителями.
    """
    id: int
    title: str
    description: str
    due_date: datetime
    priority: TaskPriority
    status: TaskStatus
    creator_id: int
    team_id: Optional[int] = None
    creator: Optional[UserSummary] = None
    assignees: List[UserSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("due_date", "created_at", "updated_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)


class DashboardRead(BaseModel):
    """
    DashboardRead — назначенные пользователю, созданные им и просроченные задачи.
    """
    assigned_tasks: List[TaskRead]
    created_tasks: List[TaskRead]
    overdue_tasks: List[TaskRead]
