"""Pytest fixtures for coastboard."""
from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["CRON_SECRET"] = "cron-secret"
os.environ.pop("REDIS_URL", None)
os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("RESEND_API_KEY", None)

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coastboard import models  # noqa: F401
from coastboard.core import mailer
from coastboard.core.auth import SessionUser
from coastboard.core.database import Base, utcnow
from coastboard.core.security import get_password_hash
from coastboard.models.project import Project
from coastboard.models.task import Task
from coastboard.models.user import User


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
async def db(engine):
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


async def _make_user(db, name, email, role, expertise=None) -> SessionUser:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash("password123"),
        role=role,
        expertise=expertise or [],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return SessionUser(id=user.id, role=user.role, name=user.name, email=user.email)


@pytest.fixture()
async def admin(db) -> SessionUser:
    return await _make_user(db, "Ada Admin", "ada@example.com", "admin")


@pytest.fixture()
async def member(db) -> SessionUser:
    return await _make_user(db, "Musa Member", "musa@example.com", "member", ["Frontend Development"])


@pytest.fixture()
async def other_member(db) -> SessionUser:
    return await _make_user(db, "Ola Other", "ola@example.com", "member", ["SEO"])


@pytest.fixture()
async def project(db, admin) -> Project:
    now = utcnow()
    project = Project(
        name="Website Relaunch",
        description="Rebuild the marketing site",
        status="active",
        start_date=now,
        deadline=now + timedelta(days=30),
        created_by=admin.id,
        tags=[],
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


@pytest.fixture()
def make_task(db, admin, project):
    async def factory(**overrides) -> Task:
        values = {
            "title": "Draft homepage copy",
            "description": "Write the hero and features sections",
            "project_id": project.id,
            "status": "todo",
            "priority": "medium",
            "visibility": "general",
            "assignee_ids": [],
            "assigned_by": admin.id,
            "deadline": utcnow() + timedelta(days=3),
            "subtasks": [],
        }
        values.update(overrides)
        task = Task(**values)
        db.add(task)
        await db.commit()
        await db.refresh(task)
        return task

    return factory


@pytest.fixture()
def sent_emails(monkeypatch):
    """Replace the mail provider; returns the list of captured messages."""
    outbox = []

    async def fake_send_email(to, subject, html, reply_to=None):
        outbox.append({"to": to, "subject": subject, "html": html})
        return {"success": True, "id": f"email-{len(outbox)}"}

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


@pytest.fixture()
def failing_mailer(monkeypatch):
    async def fake_send_email(to, subject, html, reply_to=None):
        return {"success": False, "error": "Provider rejected the message"}

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
