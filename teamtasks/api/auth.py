#teamtasks/api/auth.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
import logging

from teamtasks.schemas.auth import RegisterRequest, LoginRequest, AuthResult
from teamtasks.schemas.user import UserRead
from teamtasks.schemas.response import Envelope, MessageResponse
from teamtasks.crud.user import authenticate_user, create_user
from teamtasks.core.exceptions import AuthenticationError
from teamtasks.core.security import create_access_token
from teamtasks.core.settings import settings
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as UserModel

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("TeamTasks.Auth")


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, httponly=True, samesite="lax")


def _issue_token(response: Response, user: UserModel) -> AuthResult:
    token, _ = create_access_token(user.id, user.email)
    set_auth_cookie(response, token)
    return AuthResult(user=UserRead.model_validate(user), token=token)


@router.post("/register", response_model=Envelope[AuthResult], status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Регистрация. Выдаёт токен сразу: в теле ответа и в HTTP-only cookie.
    """
    user = create_user(db, data.model_dump())
    return Envelope(data=_issue_token(response, user), message="User registered successfully")


@router.post("/login", response_model=Envelope[AuthResult])
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Логин по email + password.
    """
    user = authenticate_user(db, data.email, data.password)
    if not user:
        logger.info(f"Failed login attempt for {data.email}")
        raise AuthenticationError("Invalid credentials")
    logger.info(f"User {user.id} logged in")
    return Envelope(data=_issue_token(response, user), message="Login successful")


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """
    Logout: стирает cookie. Bearer-токен клиент просто забывает.
    """
    clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=Envelope[UserRead])
def get_me(current_user: UserModel = Depends(get_current_user)):
    """
    Получить данные текущего пользователя.
    """
    return Envelope(data=UserRead.model_validate(current_user))
