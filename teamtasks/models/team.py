# teamtasks/models/team.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base


class TeamRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class InvitationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Team(Base):
    """
    Team — команда пользователей. Создатель всегда admin и не может быть удалён из команды.
    """
    __tablename__ = "teams"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = Column(Integer, primary_key=True)
    name: str = Column(String(100), nullable=False, index=True, doc="Название команды")
    description: str = Column(Text, nullable=True, doc="Описание")
    creator_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, doc="ID создателя")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата обновления")

    creator = relationship("User", back_populates="created_teams")
    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMember.id",
    )
    tasks = relationship("Task", back_populates="team", cascade="all, delete", order_by="Task.due_date")
    invitations = relationship("TeamInvitation", back_populates="team", cascade="all, delete")

    @property
    def task_count(self) -> int:
        return len(self.tasks)

    @property
    def member_ids(self) -> list:
        return [m.user_id for m in self.members]

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}', creator_id={self.creator_id})>"


class TeamMember(Base):
    """
    TeamMember — членство пользователя в команде, (team_id, user_id) уникальна.
    """
    __tablename__ = "team_members"

    id: int = Column(Integer, primary_key=True)
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: str = Column(String(16), nullable=False, default=TeamRole.MEMBER.value, doc="admin или member")
    joined_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    team = relationship("Team", back_populates="members")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, role='{self.role}')>"


class TeamInvitation(Base):
    """
    TeamInvitation — приглашение в команду; принимает или отклоняет только приглашённый.
    """
    __tablename__ = "team_invitations"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = Column(Integer, primary_key=True)
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message: str = Column(String(500), nullable=True)
    status: str = Column(String(16), nullable=False, default=InvitationStatus.PENDING.value)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship("Team", back_populates="invitations")
    user = relationship("User", foreign_keys=[user_id], back_populates="invitations")
    inviter = relationship("User", foreign_keys=[invited_by], back_populates="sent_invitations")

    def __repr__(self):
        return f"<TeamInvitation(id={self.id}, team_id={self.team_id}, user_id={self.user_id}, status='{self.status}')>"
