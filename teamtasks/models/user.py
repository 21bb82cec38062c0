# teamtasks/models/user.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base

class User(Base):
    """
    User — аккаунт пользователя. Удаление каскадно удаляет его задачи, команды,
    членства, назначения, приглашения и уведомления.
    """
    __tablename__ = "users"
    # id не переиспользуются после удаления: на них ссылаются выданные токены
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = Column(Integer, primary_key=True, index=True)
    email: str = Column(String(255), unique=True, nullable=False, index=True, doc="Email (уникальный)")
    name: str = Column(String(128), nullable=False, doc="Отображаемое имя")
    password_hash: str = Column(String(255), nullable=False, doc="Хэш пароля (никогда не хранить сырой пароль!)")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата обновления")

    # --- Связи ---
    created_tasks = relationship("Task", back_populates="creator", cascade="all, delete")
    task_assignments = relationship("TaskAssignment", back_populates="user", cascade="all, delete")
    created_teams = relationship("Team", back_populates="creator", cascade="all, delete")
    memberships = relationship("TeamMember", back_populates="user", cascade="all, delete")
    invitations = relationship(
        "TeamInvitation",
        foreign_keys="TeamInvitation.user_id",
        back_populates="user",
        cascade="all, delete",
    )
    sent_invitations = relationship(
        "TeamInvitation",
        foreign_keys="TeamInvitation.invited_by",
        back_populates="inviter",
        cascade="all, delete",
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', name='{self.name}')>"
