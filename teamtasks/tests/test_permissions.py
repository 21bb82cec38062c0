import pytest

from teamtasks.core.permissions import can_delete_task, can_mutate_task
from teamtasks.models.task import Task, TaskAssignment

CREATOR, ASSIGNEE, SECOND_ASSIGNEE, STRANGER = 1, 2, 3, 4

def _task(assignees=()):
    task = Task(title="t", description="d", creator_id=CREATOR)
    for user_id in assignees:
        task.assignments.append(TaskAssignment(user_id=user_id))
    return task

@pytest.mark.parametrize("assignees, caller, expected", [
    ((), CREATOR, True),
    ((), STRANGER, False),
    ((ASSIGNEE,), CREATOR, True),
    ((ASSIGNEE,), ASSIGNEE, True),
    ((ASSIGNEE,), STRANGER, False),
    ((ASSIGNEE, SECOND_ASSIGNEE), SECOND_ASSIGNEE, True),
    ((ASSIGNEE, SECOND_ASSIGNEE), STRANGER, False),
    ((CREATOR,), CREATOR, True),
])
def test_can_mutate_task(assignees, caller, expected):
    assert can_mutate_task(_task(assignees), caller) is expected

@pytest.mark.parametrize("assignees, caller, expected", [
    ((), CREATOR, True),
    ((), STRANGER, False),
    ((ASSIGNEE,), CREATOR, True),
    ((ASSIGNEE,), ASSIGNEE, False),
    ((ASSIGNEE, SECOND_ASSIGNEE), SECOND_ASSIGNEE, False),
    ((ASSIGNEE,), STRANGER, False),
])
def test_can_delete_task(assignees, caller, expected):
    assert can_delete_task(_task(assignees), caller) is expected

@pytest.mark.parametrize("caller", [CREATOR, ASSIGNEE, SECOND_ASSIGNEE, STRANGER])
def test_delete_implies_mutate(caller):
    task = _task((ASSIGNEE, SECOND_ASSIGNEE))
    if can_delete_task(task, caller):
        assert can_mutate_task(task, caller)
