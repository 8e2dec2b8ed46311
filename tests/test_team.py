# tests/test_team.py
from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from coastboard.actions import admin_actions, note_actions, user_actions
from coastboard.core.database import utcnow
from coastboard.models.activity import Activity
from coastboard.models.invitation import Invitation
from coastboard.models.notification import Notification
from coastboard.models.task import Task
from coastboard.services import user_service


# Accounts

async def test_first_registered_user_becomes_admin(db):
    first = await user_actions.register(
        db, {"name": "Founder", "email": "Founder@Example.com", "password": "longpassword"}
    )
    second = await user_actions.register(
        db, {"name": "Second", "email": "second@example.com", "password": "longpassword"}
    )

    assert first["data"]["role"] == "admin"
    assert first["data"]["email"] == "founder@example.com"
    assert second["data"]["role"] == "member"


async def test_duplicate_email_is_rejected(db, member):
    result = await user_actions.register(
        db, {"name": "Again", "email": member.email, "password": "longpassword"}
    )

    assert result == {"success": False, "error": "Email already registered"}


async def test_authenticate_checks_password(db, member):
    assert await user_service.authenticate(db, member.email, "password123") is not None
    assert await user_service.authenticate(db, member.email, "wrong-password") is None


async def test_admin_cannot_change_own_role(db, admin):
    result = await admin_actions.update_member_role(db, admin, admin.id, {"role": "member"})

    assert result == {"success": False, "error": "You cannot change your own role."}


async def test_admin_promotes_member(db, admin, member):
    result = await admin_actions.update_member_role(db, admin, member.id, {"role": "admin"})

    assert result["data"]["role"] == "admin"


async def test_unknown_expertise_fails_validation(db, admin, member):
    result = await admin_actions.update_member_expertise(db, admin, member.id, {"expertise": ["Juggling"]})

    assert result["error"] == "Validation failed"


async def test_admin_cannot_remove_self(db, admin):
    result = await admin_actions.remove_member(db, admin, admin.id)

    assert result == {"success": False, "error": "You cannot remove yourself."}


# Invitations

async def test_invite_emails_link_and_rejects_duplicates(db, admin, sent_emails):
    first = await admin_actions.invite_member(db, admin, {"email": "new@example.com", "role": "member"})
    second = await admin_actions.invite_member(db, admin, {"email": "new@example.com", "role": "admin"})

    assert first["success"] is True
    token = first["data"]["token"]
    assert len(token) == 64
    assert f"accept-invitation?token={token}" in sent_emails[0]["html"]
    assert second == {"success": False, "error": "An active invitation already exists for this email."}
    assert len((await db.execute(select(Activity).where(Activity.action == "member_invited"))).scalars().all()) == 1


async def test_failed_invite_email_removes_invitation(db, admin, failing_mailer):
    result = await admin_actions.invite_member(db, admin, {"email": "new@example.com"})

    assert result == {"success": False, "error": "Failed to send email: Provider rejected the message"}
    assert (await db.execute(select(Invitation))).scalars().all() == []


async def test_accept_invitation_creates_user_with_invited_role(db, admin, sent_emails):
    invited = await admin_actions.invite_member(db, admin, {"email": "lead@example.com", "role": "admin"})
    token = invited["data"]["token"]

    preview = await admin_actions.get_invitation_by_token(db, token)
    accepted = await admin_actions.accept_invitation(db, token, {"name": "Lead", "password": "longpassword"})
    reused = await admin_actions.accept_invitation(db, token, {"name": "Lead", "password": "longpassword"})

    assert preview["data"]["email"] == "lead@example.com"
    assert accepted["data"]["role"] == "admin"
    assert reused == {"success": False, "error": "Invalid or expired invitation"}


async def test_expired_invitation_is_invalid(db, admin):
    db.add(
        Invitation(
            email="late@example.com",
            role="member",
            token="expired-token",
            invited_by=admin.id,
            status="pending",
            expires_at=utcnow() - timedelta(days=1),
        )
    )
    await db.commit()

    result = await admin_actions.get_invitation_by_token(db, "expired-token")

    assert result == {"success": False, "error": "Invalid or expired invitation"}


# Sticky notes and custom boards

async def test_team_note_notifies_everyone_else(db, admin, member, other_member):
    result = await note_actions.create_sticky_note(
        db, admin, {"title": "Office closed Friday", "content": "Public holiday", "visibility": "team"}
    )

    assert result["success"] is True
    notifications = (await db.execute(select(Notification))).scalars().all()
    assert sorted(n.user_id for n in notifications) == sorted([member.id, other_member.id])
    assert notifications[0].type == "sticky_note_shared"
    assert notifications[0].message == "Ada Admin shared a new note: Office closed Friday"


async def test_personal_note_is_private(db, admin, member):
    await note_actions.create_sticky_note(db, admin, {"title": "Mine", "content": "Only me"})

    assert (await db.execute(select(Notification))).scalars().all() == []
    assert (await note_actions.get_sticky_notes(db, member))["data"] == []
    assert len((await note_actions.get_sticky_notes(db, admin))["data"]) == 1


async def test_members_cannot_edit_others_notes(db, admin, member):
    note = await note_actions.create_sticky_note(
        db, admin, {"title": "Team", "content": "Shared", "visibility": "team"}
    )

    result = await note_actions.update_sticky_note(db, member, note["data"]["id"], {"title": "Hijacked"})

    assert result == {"success": False, "error": "You can only change your own notes"}


async def test_custom_board_task_set(db, member, make_task):
    task = await make_task(assignee_ids=[member.id])
    board = await note_actions.create_custom_board(db, member, {"name": "Launch"})
    board_id = board["data"]["id"]

    await note_actions.add_task_to_custom_board(db, member, board_id, task.id)
    again = await note_actions.add_task_to_custom_board(db, member, board_id, task.id)
    assert again["data"]["task_ids"] == [task.id]

    detail = await note_actions.get_custom_board(db, member, board_id)
    assert [t["id"] for t in detail["data"]["tasks"]] == [task.id]

    removed = await note_actions.remove_task_from_custom_board(db, member, board_id, task.id)
    assert removed["data"]["task_ids"] == []


async def test_custom_boards_are_listed_pinned_first(db, member):
    await note_actions.create_custom_board(db, member, {"name": "Alpha"})
    beta = await note_actions.create_custom_board(db, member, {"name": "Beta"})
    await note_actions.update_custom_board(db, member, beta["data"]["id"], {"is_pinned": True})

    result = await note_actions.get_custom_boards(db, member)

    assert [b["name"] for b in result["data"]] == ["Beta", "Alpha"]


# KPIs and housekeeping

async def test_kpis_count_done_and_overdue(db, member, make_task):
    now = utcnow()
    await make_task(assignee_ids=[member.id], status="done", completed_at=now)
    await make_task(assignee_ids=[member.id], deadline=now - timedelta(days=1))
    await make_task(assignee_ids=[member.id])
    await make_task(assignee_ids=[])

    result = await user_actions.get_user_kpis(db, member)

    data = result["data"]
    assert data["tasks_done_today"] == 1
    assert data["tasks_done_this_week"] == 1
    assert data["completion_rate"] == 33
    assert data["overdue_tasks_count"] == 1
    assert data["total_time_spent_today"] == 0
    assert data["active_streak"] == 0


async def test_streak_counts_consecutive_completion_days(db, member):
    now = utcnow()
    for days in (0, 1, 2, 4):
        db.add(
            Activity(
                user_id=member.id,
                action="task_completed",
                description="completed",
                meta={},
                created_at=now - timedelta(days=days),
            )
        )
    await db.commit()

    result = await user_actions.get_user_kpis(db, member)

    assert result["data"]["active_streak"] == 3


async def test_clear_stale_done_tasks(db, admin, make_task):
    old = utcnow() - timedelta(days=10)
    await make_task(title="Old done", status="done", updated_at=old)
    await make_task(title="Old open", updated_at=old)
    await make_task(title="Fresh done", status="done")

    result = await admin_actions.clear_stale_done_tasks(db, admin)

    assert result == {"success": True, "data": {"deleted_count": 1}}
    titles = sorted(t.title for t in (await db.execute(select(Task))).scalars().all())
    assert titles == ["Fresh done", "Old open"]
