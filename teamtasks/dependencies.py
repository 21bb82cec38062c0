# teamtasks/dependencies.py

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from teamtasks.core.exceptions import AuthenticationError
from teamtasks.core.security import CallerIdentity, identity_from_token, oauth2_scheme
from teamtasks.core.settings import settings
from teamtasks.crud.user import get_user as get_user_crud
from teamtasks.database import get_db
from teamtasks.models.user import User
from teamtasks.realtime.events import EventPublisher
from teamtasks.services.tasks import TaskService
from teamtasks.services.teams import TeamService

__all__ = [
    "get_db",
    "get_current_identity",
    "get_current_user",
    "get_event_publisher",
    "get_task_service",
    "get_team_service",
]


def get_current_identity(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> CallerIdentity:
    """
    Достаёт токен из HTTP-only cookie или заголовка Authorization: Bearer
    и возвращает личность вызывающего. Cookie проверяется первой.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME) or bearer_token
    if not token:
        raise AuthenticationError("Authentication required")
    identity = identity_from_token(token)
    if identity is None:
        raise AuthenticationError("Invalid or expired token")
    return identity


def get_current_user(
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    """
    Загружает пользователя по токену. Токен удалённого аккаунта или выданный
    на прежний email — ошибка аутентификации.
    """
    user = get_user_crud(db, identity.user_id)
    if user is None or user.email != identity.email:
        raise AuthenticationError("User no longer exists. Please log in again.")
    return user


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_hub


def get_task_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> TaskService:
    return TaskService(db, publisher)


def get_team_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> TeamService:
    return TeamService(db, publisher)
