# teamtasks/crud/user.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from datetime import datetime, timezone
import logging

from teamtasks.models.user import User
from teamtasks.core.exceptions import UserAlreadyExists, UserNotFound, ValidationError
from teamtasks.core.security import get_password_hash, verify_password

logger = logging.getLogger("TeamTasks.Users")

def _normalize_email(email: str) -> str:
    return email.strip().lower()

def create_user(db: Session, data: dict) -> User:
    """
    Создаёт пользователя с хэшированным паролем. Email должен быть уникальным.
    """
    email = _normalize_email(data["email"])
    if get_user_by_email(db, email):
        raise UserAlreadyExists("User already exists")
    name = data.get("name", "").strip()
    if not name:
        raise ValidationError("Name is required.")

    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(data["password"]),
    )
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.email})")
        return user
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error while creating user {email}: {e}")
        raise UserAlreadyExists("User already exists")

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).first()

def get_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.name.asc()).all()

def get_existing_user_ids(db: Session, user_ids: List[int]) -> set:
    """
    Возвращает те ID из списка, которым соответствуют реальные пользователи.
    """
    if not user_ids:
        return set()
    rows = db.query(User.id).filter(User.id.in_(set(user_ids))).all()
    return {row[0] for row in rows}

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Проверяет email+пароль. Не различает «нет такого пользователя» и «неверный пароль».
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user

def update_user(db: Session, user_id: int, data: dict) -> User:
    """
    Обновляет профиль: имя, email, пароль.
    """
    user = get_user(db, user_id)
    if not user:
        raise UserNotFound()
    if data.get("name") is not None:
        name = data["name"].strip()
        if not name:
            raise ValidationError("Name is required.")
        user.name = name
    if data.get("email") is not None:
        email = _normalize_email(data["email"])
        existing = get_user_by_email(db, email)
        if existing and existing.id != user.id:
            raise UserAlreadyExists("Email is already in use")
        user.email = email
    if data.get("password"):
        user.password_hash = get_password_hash(data["password"])
    user.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(user)
        logger.info(f"Updated profile of user {user.id}")
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Failed to update user {user_id}: {e}")
        raise UserAlreadyExists("Email is already in use")

def delete_user(db: Session, user_id: int) -> None:
    """
    Удаляет аккаунт вместе с задачами, командами, членствами и уведомлениями.
    """
    user = get_user(db, user_id)
    if not user:
        raise UserNotFound()
    db.delete(user)
    try:
        db.commit()
        logger.info(f"Deleted user {user_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise
