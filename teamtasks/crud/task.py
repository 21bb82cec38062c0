# teamtasks/crud/task.py
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import List, Dict, Any, Optional, Tuple
import logging

from teamtasks.models.task import Task, TaskAssignment, TaskPriority, TaskStatus
from teamtasks.crud.user import get_existing_user_ids
from teamtasks.core.exceptions import (
    AuthenticationError,
    TaskNotFound,
    TaskValidationError,
)

logger = logging.getLogger("TeamTasks.Tasks")

TITLE_MAX_LENGTH = 100
SORTABLE_FIELDS = {"due_date": Task.due_date, "created_at": Task.created_at}

def _to_utc(value: Any) -> datetime:
    """
    Приводит срок к aware-datetime в UTC. Naive-значения считаются UTC.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise TaskValidationError("Invalid due date format. Use an ISO 8601 datetime.")
    if not isinstance(value, datetime):
        raise TaskValidationError("Due date is required.")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def _enum_value(value: Any, enum_cls, field: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise TaskValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}.")

def _validated_title(raw: Optional[str]) -> str:
    title = (raw or "").strip()
    if not title:
        raise TaskValidationError("Title is required.")
    if len(title) > TITLE_MAX_LENGTH:
        raise TaskValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
    return title

def _validated_description(raw: Optional[str]) -> str:
    description = (raw or "").strip()
    if not description:
        raise TaskValidationError("Description is required.")
    return description

def _validated_assignee_ids(db: Session, assignee_ids: Optional[List[int]]) -> List[int]:
    if assignee_ids is None:
        return []
    if not isinstance(assignee_ids, list):
        raise TaskValidationError("Assignees must be a list of user ids.")
    unique_ids = list(dict.fromkeys(assignee_ids))
    missing = set(unique_ids) - get_existing_user_ids(db, unique_ids)
    if missing:
        raise TaskValidationError(f"Assignee not found: {', '.join(str(i) for i in sorted(missing))}")
    return unique_ids

def create_task(db: Session, data: dict, creator_id: int) -> Task:
    """
    Создать задачу вместе с назначениями одной транзакцией.
    """
    title = _validated_title(data.get("title"))
    description = _validated_description(data.get("description"))
    due_date = _to_utc(data.get("due_date"))
    priority = _enum_value(data.get("priority"), TaskPriority, "priority")
    assignee_ids = _validated_assignee_ids(db, data.get("assignee_ids"))

    task = Task(
        title=title,
        description=description,
        due_date=due_date,
        priority=priority,
        status=TaskStatus.TODO.value,
        creator_id=creator_id,
        team_id=data.get("team_id"),
    )
    for user_id in assignee_ids:
        task.assignments.append(TaskAssignment(user_id=user_id))
    db.add(task)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # Исполнители и команда уже проверены: остаётся только автор из токена
        logger.error(f"Failed to create task for user {creator_id}: {e}")
        raise AuthenticationError("User no longer exists. Please log in again.")
    db.refresh(task)
    logger.info(f"Created task {task.id} by user {creator_id} (assignees: {assignee_ids})")
    return task

def get_task(db: Session, task_id: int) -> Task:
    """
    Получить задачу по ID.
    """
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise TaskNotFound("Task not found")
    return task

def get_all_tasks(
    db: Session,
    filters: Optional[Dict[str, Any]] = None,
    sort_by: str = "due_date",
    sort_order: str = "asc",
) -> List[Task]:
    """
    Список задач с фильтрами и сортировкой (по умолчанию due_date по возрастанию).
    """
    query = db.query(Task)
    filters = filters or {}

    if filters.get("status") is not None:
        query = query.filter(Task.status == _enum_value(filters["status"], TaskStatus, "status"))
    if filters.get("priority") is not None:
        query = query.filter(Task.priority == _enum_value(filters["priority"], TaskPriority, "priority"))
    if filters.get("creator_id") is not None:
        query = query.filter(Task.creator_id == filters["creator_id"])
    if filters.get("assigned_to") is not None:
        query = query.filter(Task.assignments.any(TaskAssignment.user_id == filters["assigned_to"]))
    if filters.get("team_id") is not None:
        query = query.filter(Task.team_id == filters["team_id"])

    column = SORTABLE_FIELDS.get(sort_by)
    if column is None:
        raise TaskValidationError(f"Cannot sort by '{sort_by}'. Allowed: {', '.join(SORTABLE_FIELDS)}.")
    if sort_order == "desc":
        query = query.order_by(column.desc(), Task.id.desc())
    elif sort_order == "asc":
        query = query.order_by(column.asc(), Task.id.asc())
    else:
        raise TaskValidationError("Sort order must be 'asc' or 'desc'.")
    return query.all()

def get_assigned_tasks(db: Session, user_id: int) -> List[Task]:
    return get_all_tasks(db, {"assigned_to": user_id})

def get_created_tasks(db: Session, user_id: int) -> List[Task]:
    return get_all_tasks(db, {"creator_id": user_id})

def get_overdue_tasks(db: Session, user_id: int, now: Optional[datetime] = None) -> List[Task]:
    """
    Просроченные задачи пользователя: он автор или исполнитель, срок прошёл, статус не COMPLETED.
    """
    now = now or datetime.now(timezone.utc)
    return (
        db.query(Task)
        .filter(
            or_(
                Task.creator_id == user_id,
                Task.assignments.any(TaskAssignment.user_id == user_id),
            ),
            Task.due_date < now,
            Task.status != TaskStatus.COMPLETED.value,
        )
        .order_by(Task.due_date.asc(), Task.id.asc())
        .all()
    )

def update_task(db: Session, task_id: int, data: dict) -> Tuple[Task, List[int]]:
    """
    Обновить задачу. Если передан assignee_ids, набор исполнителей заменяется целиком
    в той же транзакции. Возвращает (задача, ID впервые назначенных исполнителей).
    """
    task = get_task(db, task_id)
    previous_assignees = set(task.assignee_ids)
    added: List[int] = []

    if data.get("title") is not None:
        task.title = _validated_title(data["title"])
    if data.get("description") is not None:
        task.description = _validated_description(data["description"])
    if data.get("due_date") is not None:
        task.due_date = _to_utc(data["due_date"])
    if data.get("priority") is not None:
        task.priority = _enum_value(data["priority"], TaskPriority, "priority")
    if data.get("status") is not None:
        # Любой переход статуса разрешён, порядок TODO → COMPLETED не навязывается
        task.status = _enum_value(data["status"], TaskStatus, "status")
    if data.get("assignee_ids") is not None:
        new_ids = _validated_assignee_ids(db, data["assignee_ids"])
        task.assignments[:] = [a for a in task.assignments if a.user_id in new_ids]
        for user_id in new_ids:
            if user_id not in previous_assignees:
                task.assignments.append(TaskAssignment(user_id=user_id))
                added.append(user_id)

    task.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Failed to update task {task_id}: {e}")
        raise TaskValidationError("Database error while updating task.")
    db.refresh(task)
    logger.info(f"Updated task {task.id} (new assignees: {added})")
    return task, added

def delete_task(db: Session, task_id: int) -> None:
    """
    Удалить задачу (вместе с назначениями).
    """
    task = get_task(db, task_id)
    db.delete(task)
    try:
        db.commit()
        logger.info(f"Deleted task {task_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete task {task_id}: {e}")
        raise TaskValidationError("Database error while deleting task.")
