# tests/test_board_and_time.py
from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from coastboard.actions import board_actions, time_actions
from coastboard.core.database import utcnow
from coastboard.models.activity import Activity
from coastboard.models.notification import Notification
from coastboard.models.task import Task
from coastboard.models.timelog import TimeLog
from coastboard.services import board_service, notification_service, time_service


async def _count(db, model, *criteria):
    return len((await db.execute(select(model).where(*criteria))).scalars().all())


# Daily board

async def test_today_board_is_created_once(db, admin):
    first = await board_service.get_or_create_today_board(db, admin.id)
    second = await board_service.get_or_create_today_board(db, admin.id)

    assert first.id == second.id


async def test_add_task_to_board_requires_admin(db, member, project):
    payload = {"title": "Call printer", "project_id": project.id}

    result = await board_actions.add_task_to_board(db, member, payload)

    assert result == {"success": False, "error": "Forbidden: Admin access required"}
    assert await _count(db, Task) == 0


async def test_add_task_to_board_notifies_assignees_except_creator(db, admin, member, project):
    payload = {
        "title": "Call printer",
        "project_id": project.id,
        "assignee_ids": [member.id, admin.id],
    }

    result = await board_actions.add_task_to_board(db, admin, payload)

    assert result["success"] is True
    assert result["data"]["visibility"] == "general"
    assert result["data"]["daily_board_id"] is not None
    notifications = (await db.execute(select(Notification))).scalars().all()
    assert [n.user_id for n in notifications] == [member.id]
    assert notifications[0].message == 'You\'ve been assigned: "Call printer" on today\'s board'
    assert await _count(db, Activity, Activity.action == "task_created") == 1


async def test_add_task_to_board_survives_notification_failure(db, admin, member, project, monkeypatch):
    async def broken_create_notification(*args, **kwargs):
        raise RuntimeError("notifications table is locked")

    monkeypatch.setattr(notification_service, "create_notification", broken_create_notification)
    payload = {"title": "Call printer", "project_id": project.id, "assignee_ids": [member.id]}

    result = await board_actions.add_task_to_board(db, admin, payload)

    assert result["success"] is True
    assert await _count(db, Task) == 1
    assert await _count(db, Notification) == 0
    assert await _count(db, Activity, Activity.action == "task_created") == 1


async def test_toggle_done_flips_and_logs_only_on_completion(db, admin, make_task):
    task = await make_task(status="in_progress")

    first = await board_actions.toggle_board_task_done(db, admin, task.id)
    assert first["data"]["status"] == "done"
    assert await _count(db, Activity, Activity.action == "task_completed") == 1

    second = await board_actions.toggle_board_task_done(db, admin, task.id)
    assert second["data"]["status"] == "todo"
    assert second["data"]["completed_at"] is None
    assert await _count(db, Activity, Activity.action == "task_completed") == 1


async def test_toggle_done_rejects_unassigned_member(db, member, make_task):
    task = await make_task()

    result = await board_actions.toggle_board_task_done(db, member, task.id)

    assert result == {
        "success": False,
        "error": "Only assigned members and admins can mark tasks as done",
    }


async def test_comment_mentions_notify_the_mentioned(db, admin, member, make_task):
    task = await make_task(assignee_ids=[member.id])

    result = await board_actions.add_comment(
        db, admin, task.id, {"text": "Please check this", "tagged_user_ids": [member.id]}
    )

    assert result["success"] is True
    assert result["data"]["user_name"] == "Ada Admin"
    assert await _count(db, Notification, Notification.user_id == member.id) == 1
    assert await _count(db, Activity, Activity.action == "comment_added") == 1

    comments = await board_actions.get_comments(db, member, task.id)
    assert [c["text"] for c in comments["data"]] == ["Please check this"]


# Time logging

async def test_second_start_fails_and_leaves_one_open_log(db, member, make_task, project):
    task = await make_task(assignee_ids=[member.id])

    first = await time_actions.start_time_entry(db, member, task.id, project.id)
    second = await time_actions.start_time_entry(db, member, task.id, project.id)

    assert first["success"] is True
    assert second == {"success": False, "error": "A timer is already running for this task"}
    assert await _count(db, TimeLog, TimeLog.end_time.is_(None)) == 1


async def test_stop_floors_duration_and_rolls_up(db, member, make_task, project, monkeypatch):
    task = await make_task(assignee_ids=[member.id], total_time_spent=100)
    started = await time_actions.start_time_entry(db, member, task.id, project.id)
    log_id = started["data"]["id"]

    log = await db.get(TimeLog, log_id)
    start = utcnow() - timedelta(minutes=5)
    log.start_time = start
    await db.commit()
    monkeypatch.setattr(time_service, "utcnow", lambda: start + timedelta(seconds=305, milliseconds=900))

    result = await time_actions.stop_time_entry(db, member, log_id)

    assert result["success"] is True
    assert result["data"]["duration"] == 305
    await db.refresh(task)
    assert task.total_time_spent == 405
    activity = (await db.execute(select(Activity).where(Activity.action == "time_logged"))).scalar_one()
    assert activity.description == 'logged 5m on task "Draft homepage copy"'


async def test_stop_twice_is_rejected(db, member, make_task, project):
    task = await make_task(assignee_ids=[member.id])
    started = await time_actions.start_time_entry(db, member, task.id, project.id)

    await time_actions.stop_time_entry(db, member, started["data"]["id"])
    again = await time_actions.stop_time_entry(db, member, started["data"]["id"])

    assert again == {"success": False, "error": "Timer already stopped"}


async def test_only_owner_can_stop_timer(db, member, other_member, make_task, project):
    task = await make_task(assignee_ids=[member.id])
    started = await time_actions.start_time_entry(db, member, task.id, project.id)

    result = await time_actions.stop_time_entry(db, other_member, started["data"]["id"])

    assert result == {"success": False, "error": "Unauthorized"}


async def test_manual_time_is_closed_and_counted(db, member, make_task, project):
    task = await make_task(assignee_ids=[member.id])

    result = await time_actions.log_manual_time(
        db,
        member,
        {
            "task_id": task.id,
            "project_id": project.id,
            "duration": 1800,
            "description": "Pairing session",
            "date": utcnow().isoformat(),
        },
    )

    assert result["success"] is True
    assert result["data"]["is_manual"] is True
    log = await db.get(TimeLog, result["data"]["id"])
    assert log.end_time - log.start_time == timedelta(seconds=1800)
    assert await time_actions.get_running_timer(db, member, task.id) == {"success": True, "data": None}
    await db.refresh(task)
    assert task.total_time_spent == 1800
    activity = (await db.execute(select(Activity).where(Activity.action == "time_logged"))).scalar_one()
    assert activity.description == 'manually logged 30m on task "Draft homepage copy"'


async def test_running_timer_is_scoped_to_task(db, member, make_task, project):
    first = await make_task(assignee_ids=[member.id])
    second = await make_task(title="Review sitemap", assignee_ids=[member.id])
    started = await time_actions.start_time_entry(db, member, first.id, project.id)

    on_first = await time_actions.get_running_timer(db, member, first.id)
    on_second = await time_actions.get_running_timer(db, member, second.id)

    assert on_first["data"]["id"] == started["data"]["id"]
    assert on_second == {"success": True, "data": None}
