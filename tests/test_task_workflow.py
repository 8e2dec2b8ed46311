# tests/test_task_workflow.py
from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from coastboard.actions import task_actions
from coastboard.core.database import utcnow
from coastboard.core.errors import Conflict
from coastboard.models.activity import Activity
from coastboard.models.notification import Notification
from coastboard.models.task import Task
from coastboard.services import notification_service, task_service


async def _notifications(db, type_=None):
    query = select(Notification)
    if type_:
        query = query.where(Notification.type == type_)
    return (await db.execute(query)).scalars().all()


async def _activities(db, action=None):
    query = select(Activity)
    if action:
        query = query.where(Activity.action == action)
    return (await db.execute(query)).scalars().all()


async def _reload(db, task_id) -> Task:
    result = await db.execute(
        select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def test_member_cannot_update_fields_other_than_status(db, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    result = await task_actions.update_task(db, member, task.id, {"title": "Renamed by member"})

    assert result == {"success": False, "error": "Members can only update: status"}
    task = await _reload(db, task.id)
    assert task.title == "Draft homepage copy"
    assert task.version == 1


async def test_member_mixing_status_with_other_fields_is_rejected(db, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    result = await task_actions.update_task(
        db, member, task.id, {"status": "done", "priority": "urgent"}
    )

    assert result["success"] is False
    task = await _reload(db, task.id)
    assert task.status == "todo"
    assert task.priority == "medium"


async def test_member_not_assigned_cannot_complete_task(db, member, make_task):
    task = await make_task(status="in_progress")

    result = await task_actions.update_task(db, member, task.id, {"status": "done"})

    assert result == {"success": False, "error": "You can only update tasks assigned to you"}
    task = await _reload(db, task.id)
    assert task.status == "in_progress"
    assert await _activities(db) == []


async def test_unauthenticated_update_is_rejected(db, make_task):
    task = await make_task()

    result = await task_actions.update_task(db, None, task.id, {"status": "done"})

    assert result == {"success": False, "error": "Unauthorized"}


async def test_completing_task_logs_once_and_notifies_assigner(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id], status="in_progress")

    result = await task_actions.update_task(db, member, task.id, {"status": "done"})

    assert result["success"] is True
    assert result["data"]["status"] == "done"
    assert result["data"]["completed_at"] is not None

    status_changes = await _activities(db, "status_changed")
    assert len(status_changes) == 1
    assert status_changes[0].meta["previous_value"] == "in_progress"
    assert status_changes[0].meta["new_value"] == "done"

    completed = await _notifications(db, "task_completed")
    assert len(completed) == 1
    assert completed[0].user_id == admin.id
    assert completed[0].message == 'Musa Member completed "Draft homepage copy"'


async def test_done_to_done_produces_no_side_effects(db, member, make_task):
    task = await make_task(assignee_ids=[member.id], status="done", completed_at=utcnow())

    result = await task_actions.update_task(db, member, task.id, {"status": "done"})

    assert result["success"] is True
    assert await _activities(db, "status_changed") == []
    assert await _activities(db, "task_completed") == []
    assert await _notifications(db) == []


async def test_assigner_completing_own_task_gets_no_notification(db, admin, make_task):
    task = await make_task(assignee_ids=[admin.id])

    result = await task_actions.update_task(db, admin, task.id, {"status": "done"})

    assert result["success"] is True
    assert await _notifications(db, "task_completed") == []
    assert len(await _activities(db, "status_changed")) == 1


async def test_reopening_task_clears_completed_at(db, admin, make_task):
    task = await make_task(status="done", completed_at=utcnow())

    result = await task_actions.update_task(db, admin, task.id, {"status": "in_review"})

    assert result["data"]["completed_at"] is None
    assert result["data"]["version"] == 2


async def test_assigning_two_members_notifies_each_and_logs_once(db, admin, member, other_member, make_task):
    task = await make_task(assignee_ids=[])

    result = await task_actions.update_task(
        db, admin, task.id, {"assignee_ids": [member.id, other_member.id]}
    )

    assert result["success"] is True
    assigned = await _notifications(db, "task_assigned")
    assert sorted(n.user_id for n in assigned) == sorted([member.id, other_member.id])
    assert len(await _activities(db, "task_assigned")) == 1


async def test_self_assignment_is_not_notified(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    await task_actions.update_task(
        db, admin, task.id, {"assignee_ids": [member.id, admin.id, member.id]}
    )

    # only admin is new, and admin is the actor
    assert await _notifications(db, "task_assigned") == []
    assert len(await _activities(db, "task_assigned")) == 1
    task = await _reload(db, task.id)
    assert task.assignee_ids == [member.id, admin.id]


async def test_unchanged_assignees_log_nothing(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    await task_actions.update_task(db, admin, task.id, {"assignee_ids": [member.id]})

    assert await _notifications(db) == []
    assert await _activities(db, "task_assigned") == []


async def test_notification_failure_does_not_fail_assignment(db, admin, member, make_task, monkeypatch, caplog):
    task = await make_task(assignee_ids=[])

    async def broken_create_notification(*args, **kwargs):
        raise RuntimeError("notifications table is locked")

    monkeypatch.setattr(notification_service, "create_notification", broken_create_notification)

    result = await task_actions.update_task(db, admin, task.id, {"assignee_ids": [member.id]})

    assert result["success"] is True
    assert result["data"]["assignee_ids"] == [member.id]
    assert await _notifications(db) == []
    assert len(await _activities(db, "task_assigned")) == 1
    assert "Failed to notify user" in caplog.text


async def test_stale_version_raises_conflict(db, admin, make_task):
    task = await make_task()

    # a concurrent writer bumps the row behind this session's back
    await db.execute(
        update(Task)
        .where(Task.id == task.id)
        .values(priority="high", version=Task.version + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    with pytest.raises(Conflict):
        await task_service.compare_and_set(db, task, {"priority": "low"})

    task = await _reload(db, task.id)
    assert task.priority == "high"
    assert task.version == 2


async def test_unknown_fields_fail_validation(db, admin, make_task):
    task = await make_task()

    result = await task_actions.update_task(db, admin, task.id, {"colour": "blue"})

    assert result["success"] is False
    assert result["error"] == "Validation failed"
    assert "colour" in result["details"]


async def test_null_for_required_field_fails_validation(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    result = await task_actions.update_task(db, member, task.id, {"status": None})

    assert result["success"] is False
    assert result["error"] == "Validation failed"
    assert "status" in result["details"]

    result = await task_actions.update_task(db, admin, task.id, {"title": None, "priority": None})

    assert result["error"] == "Validation failed"
    assert set(result["details"]) == {"title", "priority"}
    task = await _reload(db, task.id)
    assert task.status == "todo"
    assert task.version == 1


async def test_failed_write_rolls_back_session(db, admin, make_task):
    task = await make_task()

    with pytest.raises(IntegrityError):
        await task_service.compare_and_set(db, task, {"status": None})

    result = await task_actions.update_task(db, admin, task.id, {"priority": "high"})

    assert result["success"] is True
    assert result["data"]["priority"] == "high"
    assert result["data"]["version"] == 2


async def test_deadline_can_be_cleared(db, admin, make_task):
    task = await make_task()

    result = await task_actions.update_task(db, admin, task.id, {"deadline": None})

    assert result["success"] is True
    assert result["data"]["deadline"] is None


async def test_create_task_requires_session(db, project):
    payload = {
        "title": "Fix footer",
        "description": "Links are broken",
        "project_id": project.id,
        "deadline": (utcnow() + timedelta(days=1)).isoformat(),
    }

    result = await task_actions.create_task(db, None, payload)

    assert result == {"success": False, "error": "Unauthorized"}


async def test_create_task_lands_on_today_board(db, admin, member, project):
    payload = {
        "title": "Fix footer",
        "description": "Links are broken",
        "project_id": project.id,
        "assignee_ids": [member.id],
        "deadline": (utcnow() + timedelta(days=1)).isoformat(),
        "subtasks": [{"title": "Audit links"}],
    }

    result = await task_actions.create_task(db, admin, payload)

    assert result["success"] is True
    data = result["data"]
    assert data["daily_board_id"] is not None
    assert data["status"] == "todo"
    assert data["subtasks"][0]["title"] == "Audit links"
    assert len(await _notifications(db, "task_assigned")) == 1
    assert len(await _activities(db, "task_created")) == 1


async def test_private_task_hidden_from_other_members(db, member, other_member, make_task):
    task = await make_task(visibility="private", assignee_ids=[member.id])

    assert (await task_actions.get_task(db, member, task.id))["success"] is True
    assert await task_actions.get_task(db, other_member, task.id) == {
        "success": False,
        "error": "Task not found",
    }

    listing = await task_actions.get_tasks(db, other_member, {})
    assert listing["data"]["total"] == 0


async def test_get_tasks_filters_by_assignee_me(db, member, make_task):
    await make_task(title="Mine", assignee_ids=[member.id])
    await make_task(title="Not mine")

    result = await task_actions.get_tasks(db, member, {"assignee": "me"})

    assert [t["title"] for t in result["data"]["tasks"]] == ["Mine"]
    assert result["data"]["total_pages"] == 1


async def test_subtask_toggle(db, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    added = await task_actions.add_subtask(db, member, task.id, {"title": "Pick fonts"})
    subtask_id = added["data"]["subtasks"][0]["id"]
    toggled = await task_actions.toggle_subtask(db, member, task.id, subtask_id)

    assert toggled["data"]["subtasks"][0]["done"] is True
    assert toggled["data"]["subtasks"][0]["completed_at"] is not None


async def test_subtask_set_done_is_idempotent(db, member, make_task):
    task = await make_task(assignee_ids=[member.id])
    added = await task_actions.add_subtask(db, member, task.id, {"title": "Pick fonts"})
    subtask_id = added["data"]["subtasks"][0]["id"]

    first = await task_actions.toggle_subtask(db, member, task.id, subtask_id, done=True)
    retried = await task_actions.toggle_subtask(db, member, task.id, subtask_id, done=True)

    assert retried["data"]["subtasks"][0]["done"] is True
    assert retried["data"]["subtasks"][0]["completed_at"] == first["data"]["subtasks"][0]["completed_at"]

    cleared = await task_actions.toggle_subtask(db, member, task.id, subtask_id, done=False)

    assert cleared["data"]["subtasks"][0]["done"] is False
    assert cleared["data"]["subtasks"][0]["completed_at"] is None


async def test_delete_task_is_admin_only(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    assert (await task_actions.delete_task(db, member, task.id))["success"] is False
    assert await task_actions.delete_task(db, admin, task.id) == {"success": True, "data": None}
    assert (await db.execute(select(Task))).scalars().all() == []
