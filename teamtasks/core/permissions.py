# teamtasks/core/permissions.py
"""
Правила доступа к задачам в виде чистых предикатов.

Обновлять задачу могут её автор и любой из назначенных исполнителей.
Удалять задачу может только автор.
"""
from teamtasks.models.task import Task


def can_mutate_task(task: Task, user_id: int) -> bool:
    return task.creator_id == user_id or user_id in task.assignee_ids


def can_delete_task(task: Task, user_id: int) -> bool:
    return task.creator_id == user_id
