# tests/test_ai_drafting.py
from __future__ import annotations

import pytest

from coastboard.actions import ai_actions
from coastboard.agent import llm
from coastboard.schemas.ai import AssigneeSuggestion, TaskBreakdown, TaskDraft


class _FakeStructuredModel:
    def __init__(self, outer, schema):
        self.outer = outer
        self.schema = schema

    async def ainvoke(self, prompt):
        self.outer.prompts.append(prompt)
        return self.outer.answers[self.schema]


class FakeChatModel:
    """Stands in for ChatGroq: returns canned answers keyed by output schema."""

    def __init__(self, answers):
        self.answers = answers
        self.prompts = []

    def with_structured_output(self, schema):
        return _FakeStructuredModel(self, schema)


@pytest.fixture()
def fake_model(monkeypatch):
    def install(answers):
        model = FakeChatModel(answers)
        monkeypatch.setattr(llm, "get_chat_model", lambda: model)
        return model

    return install


async def test_task_draft_is_returned_as_data(db, member, fake_model):
    model = fake_model(
        {
            TaskDraft: TaskDraft(
                title="Prepare Q3 invoice batch",
                description="Collect hours and send invoices",
                priority="high",
                subtasks=["Export hours", "Send invoices"],
            )
        }
    )

    result = await ai_actions.generate_task_from_input(db, member, {"input": "invoices for Q3 by Friday"})

    assert result["success"] is True
    assert result["data"]["title"] == "Prepare Q3 invoice batch"
    assert result["data"]["priority"] == "high"
    assert "invoices for Q3 by Friday" in model.prompts[0]


async def test_dict_output_is_validated_against_schema(db, member, fake_model):
    fake_model(
        {
            TaskBreakdown: {
                "subtasks": ["Wireframe", "Build"],
                "estimated_total_hours": 6,
                "reasoning": "Two clear steps",
            }
        }
    )

    result = await ai_actions.break_down_task(db, member, {"title": "Landing page"})

    assert result["data"]["subtasks"] == ["Wireframe", "Build"]
    assert result["data"]["estimated_total_hours"] == 6.0


async def test_assignee_from_team_is_accepted(db, admin, member, other_member, fake_model):
    model = fake_model(
        {
            AssigneeSuggestion: AssigneeSuggestion(
                suggested_member_id=member.id,
                member_name="Musa Member",
                reasoning="Frontend work",
                confidence_score=80,
            )
        }
    )

    result = await ai_actions.suggest_assignee(
        db, admin, {"task_title": "Fix navbar", "task_description": "Mobile menu overlaps"}
    )

    assert result["success"] is True
    assert result["data"]["suggested_member_id"] == member.id
    assert "Frontend Development" in model.prompts[0]


async def test_assignee_outside_candidates_is_rejected(db, admin, member, fake_model):
    fake_model(
        {
            AssigneeSuggestion: AssigneeSuggestion(
                suggested_member_id=9999,
                member_name="Ghost",
                reasoning="Made up",
                confidence_score=99,
            )
        }
    )

    result = await ai_actions.suggest_assignee(db, admin, {"task_title": "Fix navbar"})

    assert result == {"success": False, "error": "AI suggested a member who is not on the team"}


async def test_missing_api_key_reports_unavailable(db, member):
    result = await ai_actions.break_down_task(db, member, {"title": "Landing page"})

    assert result == {"success": False, "error": "AI service is not configured"}


async def test_key_points_without_open_tasks_skip_the_model(db, member, fake_model):
    model = fake_model({})

    result = await ai_actions.generate_daily_key_points(db, member)

    assert result == {"success": True, "data": {"key_points": []}}
    assert model.prompts == []


async def test_eod_report_is_admin_only(db, member):
    result = await ai_actions.generate_eod_report(db, member)

    assert result == {"success": False, "error": "Forbidden: Admin access required"}


async def test_model_failure_becomes_generic_error(db, member, monkeypatch):
    class BrokenModel:
        def with_structured_output(self, schema):
            raise RuntimeError("rate limited")

    monkeypatch.setattr(llm, "get_chat_model", lambda: BrokenModel())

    result = await ai_actions.break_down_task(db, member, {"title": "Landing page"})

    assert result == {"success": False, "error": "Failed to break down task"}
