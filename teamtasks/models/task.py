# teamtasks/models/task.py
import enum
from datetime import datetime
from typing import List
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"


class Task(Base):
    """
    Task — задача с автором, набором исполнителей (через TaskAssignment) и
    необязательной командой.
    """
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(100), nullable=False, doc="Название задачи")
    description: str = Column(Text, nullable=False, doc="Описание")
    due_date: datetime = Column(DateTime(timezone=True), nullable=False, doc="Срок выполнения (UTC)")
    priority: str = Column(String(16), nullable=False, default=TaskPriority.MEDIUM.value, doc="LOW, MEDIUM, HIGH, URGENT")
    status: str = Column(String(16), nullable=False, default=TaskStatus.TODO.value, doc="TODO, IN_PROGRESS, REVIEW, COMPLETED")
    creator_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, doc="ID автора")
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=True, index=True, doc="ID команды")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата изменения")

    creator = relationship("User", back_populates="created_tasks")
    team = relationship("Team", back_populates="tasks")
    assignments = relationship(
        "TaskAssignment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskAssignment.id",
    )

    __table_args__ = (
        Index("ix_tasks_due_date", "due_date"),
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_priority", "priority"),
        {"sqlite_autoincrement": True},
    )

    @property
    def assignees(self) -> list:
        return [a.user for a in self.assignments]

    @property
    def assignee_ids(self) -> List[int]:
        return [a.user_id for a in self.assignments]

    def __repr__(self):
        return (
            f"<Task(id={self.id}, title='{self.title}', status={self.status}, "
            f"priority={self.priority}, due_date={self.due_date}, creator_id={self.creator_id})>"
        )


class TaskAssignment(Base):
    """
    TaskAssignment — связь задача ↔ исполнитель (many-to-many).
    """
    __tablename__ = "task_assignments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="assignments")
    user = relationship("User", back_populates="task_assignments")

    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_task_assignments_task_user"),
    )

    def __repr__(self):
        return f"<TaskAssignment(task_id={self.task_id}, user_id={self.user_id})>"
