#teamtasks/api/user.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List
import logging

from teamtasks.schemas.user import UserRead, UserSummary, UserUpdate
from teamtasks.schemas.response import Envelope, MessageResponse
from teamtasks.crud.user import (
    get_users,
    get_user_by_email,
    update_user,
    delete_user,
)
from teamtasks.core.exceptions import UserNotFound
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.api.auth import clear_auth_cookie, set_auth_cookie
from teamtasks.core.security import create_access_token
from teamtasks.models.user import User as UserModel

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger("TeamTasks.UsersAPI")

@router.get("/profile", response_model=Envelope[UserRead])
def get_profile(current_user: UserModel = Depends(get_current_user)):
    """
    Профиль текущего пользователя.
    """
    return Envelope(data=UserRead.model_validate(current_user))

@router.put("/profile", response_model=Envelope[UserRead])
def update_profile(
    data: UserUpdate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Обновить имя, email или пароль текущего пользователя.
    """
    old_email = current_user.email
    user = update_user(db, current_user.id, data.model_dump(exclude_unset=True))
    # старый токен привязан к прежнему email
    if user.email != old_email:
        token, _ = create_access_token(user.id, user.email)
        set_auth_cookie(response, token)
    return Envelope(data=UserRead.model_validate(user), message="Profile updated successfully")

@router.delete("/profile", response_model=MessageResponse)
def delete_profile(
    response: Response,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Удалить аккаунт вместе со всеми его задачами, командами и уведомлениями.
    """
    delete_user(db, current_user.id)
    clear_auth_cookie(response)
    logger.info(f"User {current_user.id} deleted their account")
    return MessageResponse(message="Account deleted successfully")

@router.get("", response_model=Envelope[List[UserSummary]])
def list_users(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Все пользователи (id, имя, email) для выбора исполнителей и участников.
    """
    return Envelope(data=[UserSummary.model_validate(u) for u in get_users(db)])

@router.get("/search", response_model=Envelope[UserSummary])
def search_user(
    email: str = Query(..., min_length=1, description="Точный email пользователя"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Найти пользователя по email.
    """
    user = get_user_by_email(db, email)
    if not user:
        raise UserNotFound()
    return Envelope(data=UserSummary.model_validate(user))
