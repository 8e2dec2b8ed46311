# tests/test_policy_and_envelope.py
from __future__ import annotations

from types import SimpleNamespace

import pytest
from pydantic import BaseModel

from coastboard.core.auth import SessionUser, require_admin, require_auth
from coastboard.core.errors import Forbidden, NotFound, Unauthorized
from coastboard.core.mailer import render_merge_tags
from coastboard.core.results import action
from coastboard.services.task_policy import allowed_fields, authorize_update

ADMIN = SessionUser(id=1, role="admin")
MEMBER = SessionUser(id=2, role="member")


def _task(assignees):
    return SimpleNamespace(assignee_ids=assignees)


# Authorization gate

def test_require_auth_rejects_missing_session():
    with pytest.raises(Unauthorized):
        require_auth(None)


def test_require_admin_rejects_member():
    with pytest.raises(Forbidden):
        require_admin(MEMBER)
    assert require_admin(ADMIN) is ADMIN


# Task update policy

def test_admin_may_update_every_field():
    assert allowed_fields(ADMIN, _task([])) is None
    authorize_update(ADMIN, _task([]), ["title", "assignee_ids", "status"])


def test_assignee_may_only_change_status():
    assert allowed_fields(MEMBER, _task([2])) == frozenset({"status"})
    authorize_update(MEMBER, _task([2]), ["status"])
    with pytest.raises(Forbidden, match="Members can only update: status"):
        authorize_update(MEMBER, _task([2]), ["status", "deadline"])


def test_non_assignee_member_may_change_nothing():
    with pytest.raises(Forbidden, match="You can only update tasks assigned to you"):
        authorize_update(MEMBER, _task([3]), ["status"])


# Result envelope

class _Payload(BaseModel):
    name: str
    count: int


@action("Failed to do the thing")
async def _succeeds(value):
    return {"value": value}


@action("Failed to do the thing")
async def _not_found():
    raise NotFound("Widget not found")


@action("Failed to do the thing")
async def _invalid(payload):
    return _Payload.model_validate(payload)


@action("Failed to do the thing")
async def _crashes():
    raise RuntimeError("database exploded")


async def test_success_is_wrapped():
    assert await _succeeds(3) == {"success": True, "data": {"value": 3}}


async def test_domain_errors_keep_their_message():
    assert await _not_found() == {"success": False, "error": "Widget not found"}


async def test_validation_errors_carry_field_details():
    result = await _invalid({"name": "x", "count": "many"})

    assert result["success"] is False
    assert result["error"] == "Validation failed"
    assert list(result["details"]) == ["count"]


async def test_unexpected_errors_are_logged_and_hidden(caplog):
    result = await _crashes()

    assert result == {"success": False, "error": "Failed to do the thing"}
    assert "database exploded" in caplog.text


# Merge tags

def test_merge_tags_fall_back_to_defaults():
    text = "Hi {{owner_name}}, about {{business_name}} from {{assigned_to_name}} {{unknown}}"

    rendered = render_merge_tags(text, {"owner_name": None, "business_name": "Kemi Bakes"})

    assert rendered == "Hi there, about Kemi Bakes from our team {{unknown}}"
