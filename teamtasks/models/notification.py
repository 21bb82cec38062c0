# teamtasks/models/notification.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base


class NotificationType(str, enum.Enum):
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TEAM_INVITATION = "TEAM_INVITATION"
    TEAM_MEMBER_ADDED = "TEAM_MEMBER_ADDED"


class Notification(Base):
    """
    Notification — уведомление пользователя; читать и менять его может только владелец.
    """
    __tablename__ = "notifications"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = Column(Integer, primary_key=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message: str = Column(String(500), nullable=False)
    type: str = Column(String(32), nullable=True)
    read: bool = Column(Boolean, default=False, nullable=False)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}', read={self.read})>"
