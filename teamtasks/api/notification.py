#teamtasks/api/notification.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from teamtasks.schemas.notification import NotificationRead
from teamtasks.schemas.response import Envelope, MessageResponse
from teamtasks.crud import notification as crud_notification
from teamtasks.core.security import CallerIdentity
from teamtasks.dependencies import get_db, get_current_identity

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("", response_model=Envelope[List[NotificationRead]])
def list_notifications(
    unread_only: bool = Query(False, description="Только непрочитанные"),
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_identity),
):
    """
    Уведомления текущего пользователя, новые первыми.
    """
    notifications = crud_notification.get_notifications(db, caller.user_id, unread_only=unread_only)
    return Envelope(data=[NotificationRead.model_validate(n) for n in notifications])

# read-all объявлен до /{notification_id}/read
@router.put("/read-all", response_model=MessageResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_identity),
):
    count = crud_notification.mark_all_as_read(db, caller.user_id)
    return MessageResponse(message=f"Marked {count} notifications as read")

@router.put("/{notification_id}/read", response_model=Envelope[NotificationRead])
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_identity),
):
    notification = crud_notification.mark_as_read(db, notification_id, caller.user_id)
    return Envelope(data=NotificationRead.model_validate(notification))

@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_identity),
):
    crud_notification.delete_notification(db, notification_id, caller.user_id)
    return MessageResponse(message="Notification deleted")

@router.delete("", response_model=MessageResponse)
def clear_notifications(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_identity),
):
    """
    Удалить все уведомления текущего пользователя.
    """
    count = crud_notification.clear_all(db, caller.user_id)
    return MessageResponse(message=f"Cleared {count} notifications")
