# teamtasks/services/tasks.py
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from teamtasks.crud import task as crud_task
from teamtasks.crud import team as crud_team
from teamtasks.crud.notification import create_notification
from teamtasks.crud.user import get_user
from teamtasks.core.exceptions import AuthorizationError
from teamtasks.core.permissions import can_delete_task, can_mutate_task
from teamtasks.models.notification import NotificationType
from teamtasks.models.task import Task
from teamtasks.realtime import events
from teamtasks.realtime.events import EventPublisher, RealtimeEvent
from teamtasks.schemas.task import TaskRead

logger = logging.getLogger("TeamTasks.TaskService")


def task_payload(task: Task) -> dict:
    return TaskRead.model_validate(task).model_dump(mode="json")


class TaskService:
    """
    Task operations plus their side effects: assignment notifications and
    real-time events. The publisher is injected so handlers never reach for a
    process-wide emitter.
    """

    def __init__(self, db: Session, publisher: EventPublisher):
        self.db = db
        self.publisher = publisher

    def create_task(self, data: dict, caller_id: int) -> Task:
        team_id = data.get("team_id")
        if team_id is not None:
            crud_team.get_team(self.db, team_id)
            if not crud_team.is_member(self.db, team_id, caller_id):
                logger.warning(f"User {caller_id} tried to create a task in team {team_id} without membership")
                raise AuthorizationError("You are not a member of this team")

        task = crud_task.create_task(self.db, data, creator_id=caller_id)
        self._announce_assignments(task, task.assignee_ids, caller_id)
        self.publisher.broadcast(RealtimeEvent(event=events.TASK_CREATED, data=task_payload(task)))
        return task

    def get_tasks(self, filters: Optional[dict] = None, sort_by: str = "due_date", sort_order: str = "asc") -> List[Task]:
        return crud_task.get_all_tasks(self.db, filters, sort_by=sort_by, sort_order=sort_order)

    def get_task(self, task_id: int, caller_id: int) -> Task:
        task = crud_task.get_task(self.db, task_id)
        if task.team_id is not None and not crud_team.is_member(self.db, task.team_id, caller_id):
            raise AuthorizationError("You are not a member of this task's team")
        return task

    def update_task(self, task_id: int, data: dict, caller_id: int) -> Task:
        task = crud_task.get_task(self.db, task_id)
        if not can_mutate_task(task, caller_id):
            logger.warning(f"User {caller_id} is not allowed to update task {task_id}")
            raise AuthorizationError("Unauthorized to update this task")

        task, added = crud_task.update_task(self.db, task_id, data)
        self._announce_assignments(task, added, caller_id)
        self.publisher.broadcast(RealtimeEvent(event=events.TASK_UPDATED, data=task_payload(task)))
        return task

    def delete_task(self, task_id: int, caller_id: int) -> None:
        task = crud_task.get_task(self.db, task_id)
        if not can_delete_task(task, caller_id):
            logger.warning(f"User {caller_id} is not allowed to delete task {task_id}")
            raise AuthorizationError("Unauthorized to delete this task")

        crud_task.delete_task(self.db, task_id)
        self.publisher.broadcast(RealtimeEvent(event=events.TASK_DELETED, data={"id": task_id}))

    def get_dashboard(self, caller_id: int) -> Dict[str, List[Task]]:
        return {
            "assigned_tasks": crud_task.get_assigned_tasks(self.db, caller_id),
            "created_tasks": crud_task.get_created_tasks(self.db, caller_id),
            "overdue_tasks": crud_task.get_overdue_tasks(self.db, caller_id),
        }

    def get_overdue_tasks(self, caller_id: int) -> List[Task]:
        return crud_task.get_overdue_tasks(self.db, caller_id)

    def get_assigned_tasks(self, caller_id: int) -> List[Task]:
        return crud_task.get_assigned_tasks(self.db, caller_id)

    def get_created_tasks(self, caller_id: int) -> List[Task]:
        return crud_task.get_created_tasks(self.db, caller_id)

    def _announce_assignments(self, task: Task, user_ids: List[int], assigned_by_id: int) -> None:
        # Самоназначение не порождает уведомления
        recipients = [uid for uid in user_ids if uid != assigned_by_id]
        if not recipients:
            return
        assigned_by = get_user(self.db, assigned_by_id)
        assigned_by_name = assigned_by.name if assigned_by else "Someone"
        message = f"You have been assigned to task: {task.title}"

        for user_id in recipients:
            create_notification(self.db, user_id, message, type=NotificationType.TASK_ASSIGNED.value, commit=False)
        self.db.commit()

        for user_id in recipients:
            self.publisher.publish_to_user(user_id, RealtimeEvent(
                event=events.TASK_ASSIGNED,
                data={
                    "task_id": task.id,
                    "task_title": task.title,
                    "assigned_by_name": assigned_by_name,
                    "message": message,
                },
            ))
        logger.info(f"Task {task.id}: notified assignees {recipients}")
