# teamtasks/schemas/team.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from teamtasks.models.team import TeamRole, InvitationStatus
from teamtasks.schemas.response import as_utc
from teamtasks.schemas.task import TaskRead
from teamtasks.schemas.user import UserSummary

class TeamCreate(BaseModel):
    """
    TeamCreate — создание команды; создатель становится admin.
    """
    name: str = Field(..., min_length=1, max_length=100, examples=["Platform"])
    description: Optional[str] = Field(None, examples=["Infrastructure and tooling"])
    member_ids: List[int] = Field(default_factory=list, description="ID пользователей, добавляемых как member")

class TeamUpdate(BaseModel):
    """
    TeamUpdate — обновление названия/описания (все поля опциональны).
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None

class TeamMemberRead(BaseModel):
    user_id: int
    role: TeamRole
    joined_at: Optional[datetime] = None
    user: UserSummary

    model_config = ConfigDict(from_attributes=True)

    @field_validator("joined_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)

class TeamRead(BaseModel):
    """
    TeamRead — команда со списком участников и числом задач.
    """
    id: int
    name: str
    description: Optional[str] = None
    creator_id: int
    creator: Optional[UserSummary] = None
    members: List[TeamMemberRead] = Field(default_factory=list)
    task_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)

class TeamDetail(TeamRead):
    """
    TeamDetail — команда вместе с задачами.
    """
    tasks: List[TaskRead] = Field(default_factory=list)

class AddMemberRequest(BaseModel):
    user_id: int
    role: TeamRole = TeamRole.MEMBER

class InvitationCreate(BaseModel):
    user_id: int
    message: Optional[str] = Field(None, max_length=500)

class TeamShort(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class InvitationRead(BaseModel):
    id: int
    team_id: int
    user_id: int
    invited_by: int
    message: Optional[str] = None
    status: InvitationStatus
    created_at: Optional[datetime] = None
    team: Optional[TeamShort] = None
    inviter: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)
