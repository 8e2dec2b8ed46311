from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin, require_auth
from coastboard.core.results import action
from coastboard.schemas.ai import (
    AssigneeRequest,
    BreakdownRequest,
    DeadlineRequest,
    ProjectPlanRequest,
    TaskDraftRequest,
)
from coastboard.services import ai_service


@action("Failed to generate task")
async def generate_task_from_input(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_auth(caller)
    data = TaskDraftRequest.model_validate(payload)
    draft = await ai_service.generate_task_from_input(data.input)
    return draft.model_dump(mode="json")


@action("Failed to suggest assignee")
async def suggest_assignee(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_auth(caller)
    data = AssigneeRequest.model_validate(payload)
    suggestion = await ai_service.suggest_assignee(db, data)
    return suggestion.model_dump(mode="json")


@action("Failed to break down task")
async def break_down_task(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_auth(caller)
    data = BreakdownRequest.model_validate(payload)
    breakdown = await ai_service.break_down_task(data)
    return breakdown.model_dump(mode="json")


@action("Failed to suggest deadline")
async def suggest_deadline(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_auth(caller)
    data = DeadlineRequest.model_validate(payload)
    suggestion = await ai_service.suggest_deadline(data)
    return suggestion.model_dump(mode="json")


@action("Failed to generate key points")
async def generate_daily_key_points(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    key_points = await ai_service.generate_daily_key_points(db, caller)
    return key_points.model_dump(mode="json")


@action("Failed to generate report")
async def generate_eod_report(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_admin(caller)
    report = await ai_service.generate_eod_report(db, caller)
    return report.model_dump(mode="json")


@action("Failed to generate project plan")
async def generate_project_plan(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_admin(caller)
    data = ProjectPlanRequest.model_validate(payload)
    plan = await ai_service.generate_project_plan(data)
    return plan.model_dump(mode="json")
