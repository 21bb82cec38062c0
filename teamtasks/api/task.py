#teamtasks/api/task.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from teamtasks.schemas.task import (
    TaskCreate, TaskRead, TaskUpdate, DashboardRead
)
from teamtasks.schemas.response import Envelope, MessageResponse
from teamtasks.models.task import TaskPriority, TaskStatus
from teamtasks.core.security import CallerIdentity
from teamtasks.dependencies import get_current_identity, get_task_service
from teamtasks.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])

def _many(tasks) -> List[TaskRead]:
    return [TaskRead.model_validate(t) for t in tasks]

@router.post("", response_model=Envelope[TaskRead], status_code=status.HTTP_201_CREATED)
def create_new_task(
    data: TaskCreate,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Создать задачу. Автор — текущий пользователь, статус — TODO.
    """
    task = service.create_task(data.model_dump(), caller.user_id)
    return Envelope(data=TaskRead.model_validate(task), message="Task created successfully")

@router.get("", response_model=Envelope[List[TaskRead]])
def list_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    creator_id: Optional[int] = Query(None),
    assigned_to: Optional[int] = Query(None),
    team_id: Optional[int] = Query(None),
    sort_by: str = Query("due_date", description="due_date или created_at"),
    sort_order: str = Query("asc", description="asc или desc"),
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Список задач с фильтрами и сортировкой.
    """
    filters = {
        "status": task_status,
        "priority": priority,
        "creator_id": creator_id,
        "assigned_to": assigned_to,
        "team_id": team_id,
    }
    return Envelope(data=_many(service.get_tasks(filters, sort_by=sort_by, sort_order=sort_order)))

# Статичные пути объявлены до /{task_id}
@router.get("/dashboard", response_model=Envelope[DashboardRead])
def get_dashboard(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Дашборд: назначенные, созданные и просроченные задачи текущего пользователя.
    """
    dashboard = service.get_dashboard(caller.user_id)
    return Envelope(data=DashboardRead(**{key: _many(tasks) for key, tasks in dashboard.items()}))

@router.get("/my/assigned", response_model=Envelope[List[TaskRead]])
def my_assigned_tasks(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    return Envelope(data=_many(service.get_assigned_tasks(caller.user_id)))

@router.get("/my/created", response_model=Envelope[List[TaskRead]])
def my_created_tasks(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    return Envelope(data=_many(service.get_created_tasks(caller.user_id)))

@router.get("/overdue", response_model=Envelope[List[TaskRead]])
def overdue_tasks(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Просроченные незавершённые задачи, где пользователь автор или исполнитель.
    """
    return Envelope(data=_many(service.get_overdue_tasks(caller.user_id)))

@router.get("/{task_id}", response_model=Envelope[TaskRead])
def get_one_task(
    task_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Получить задачу по ID.
    """
    return Envelope(data=TaskRead.model_validate(service.get_task(task_id, caller.user_id)))

@router.put("/{task_id}", response_model=Envelope[TaskRead])
def update_existing_task(
    task_id: int,
    data: TaskUpdate,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Обновить задачу. Разрешено автору и исполнителям.
    """
    task = service.update_task(task_id, data.model_dump(exclude_unset=True), caller.user_id)
    return Envelope(data=TaskRead.model_validate(task), message="Task updated successfully")

@router.delete("/{task_id}", response_model=MessageResponse)
def delete_existing_task(
    task_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
):
    """
    Удалить задачу. Разрешено только автору.
    """
    service.delete_task(task_id, caller.user_id)
    return MessageResponse(message="Task deleted successfully")
