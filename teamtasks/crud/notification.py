# teamtasks/crud/notification.py
"""
Уведомления. Каждая функция принимает user_id владельца и работает только
с его записями: чужое уведомление неотличимо от несуществующего.
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from teamtasks.models.notification import Notification
from teamtasks.core.exceptions import NotificationNotFound

logger = logging.getLogger("TeamTasks.Notifications")

def create_notification(db: Session, user_id: int, message: str, type: Optional[str] = None, commit: bool = True) -> Notification:
    notification = Notification(user_id=user_id, message=message, type=type, read=False)
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
        logger.info(f"Created {type or 'generic'} notification {notification.id} for user {user_id}")
    return notification

def get_notifications(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read == False)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

def get_notification(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        raise NotificationNotFound()
    return notification

def mark_as_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = get_notification(db, notification_id, user_id)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification

def mark_all_as_read(db: Session, user_id: int) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read == False)
        .update({Notification.read: True})
    )
    db.commit()
    logger.info(f"Marked {count} notifications as read for user {user_id}")
    return count

def delete_notification(db: Session, notification_id: int, user_id: int) -> None:
    notification = get_notification(db, notification_id, user_id)
    db.delete(notification)
    db.commit()

def clear_all(db: Session, user_id: int) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .delete()
    )
    db.commit()
    logger.info(f"Cleared {count} notifications for user {user_id}")
    return count
