# tests/test_notifications.py
from __future__ import annotations

import pytest
from sqlalchemy import select

from coastboard.actions import notification_actions
from coastboard.core import events
from coastboard.models.notification import Notification
from coastboard.services import activity_service, notification_service


@pytest.fixture()
def published(monkeypatch):
    sent = []

    async def fake_publish(user_id, event, payload):
        sent.append((user_id, event, payload))
        return True

    monkeypatch.setattr(events, "publish_user_event", fake_publish)
    return sent


async def test_new_notification_is_pushed_to_its_user(db, member, published):
    await notification_service.create_notification(
        db, member.id, "info", "Heads up", "Standup moved", {"project_id": 4}
    )

    assert len(published) == 1
    user_id, event, payload = published[0]
    assert (user_id, event) == (member.id, "notification:new")
    assert payload["metadata"] == {"project_id": 4}
    assert payload["read"] is False


async def test_notify_swallows_delivery_failures(db, member, monkeypatch):
    async def broken_publish(user_id, event, payload):
        raise RuntimeError("redis down")

    monkeypatch.setattr(events, "publish_user_event", broken_publish)

    result = await notification_service.notify(db, member.id, "info", "Heads up", "Standup moved")

    assert result is None


async def test_publish_without_redis_is_a_no_op():
    assert await events.publish_user_event(1, "notification:new", {}) is False


async def test_mark_as_read_only_once(db, member, published):
    notification = await notification_service.create_notification(db, member.id, "info", "A", "B")

    first = await notification_actions.mark_as_read(db, member, notification.id)
    second = await notification_actions.mark_as_read(db, member, notification.id)

    assert first["data"]["read"] is True
    assert second == {"success": False, "error": "Notification not found or already read"}


async def test_users_only_see_their_own_notifications(db, member, other_member, published):
    await notification_service.create_notification(db, member.id, "info", "Mine", "x")
    await notification_service.create_notification(db, other_member.id, "info", "Theirs", "y")

    result = await notification_actions.get_notifications(db, member)

    assert [n["title"] for n in result["data"]] == ["Mine"]


async def test_mark_all_as_read(db, member, published):
    for title in ("one", "two"):
        await notification_service.create_notification(db, member.id, "info", title, "x")

    result = await notification_actions.mark_all_as_read(db, member)

    assert result == {"success": True, "data": {"updated": 2}}
    assert await notification_service.get_unread_count(db, member.id) == 0
    rows = (await db.execute(select(Notification))).scalars().all()
    assert all(n.read for n in rows)


async def test_activity_log_never_raises(db, member, monkeypatch):
    async def broken_commit():
        raise RuntimeError("disk full")

    monkeypatch.setattr(db, "commit", broken_commit)

    assert await activity_service.log_activity(db, member.id, "task_created", "x") is None
