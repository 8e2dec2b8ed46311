import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.agent import graph
from coastboard.agent.context import task_summary, team_context
from coastboard.core.auth import SessionUser
from coastboard.core.clock import local_today_start, local_tomorrow_start
from coastboard.core.database import utcnow
from coastboard.core.errors import CoastboardError
from coastboard.models.task import Task
from coastboard.schemas.ai import (
    AssigneeRequest,
    AssigneeSuggestion,
    BreakdownRequest,
    DailyKeyPoints,
    DeadlineRequest,
    DeadlineSuggestion,
    EODReport,
    ProjectPlan,
    ProjectPlanRequest,
    TaskBreakdown,
    TaskDraft,
)

from . import board_service

logger = logging.getLogger(__name__)


async def _draft(kind: str, inputs: Dict[str, Any], candidates: List[int] = None):
    state = await graph.run_draft(kind, inputs, candidates)
    if state.get("error"):
        raise CoastboardError(state["error"])
    return state["result"]


def _today() -> str:
    return utcnow().date().isoformat()


async def generate_task_from_input(text: str) -> TaskDraft:
    return await _draft("task", {"input": text, "today": _today()})


async def suggest_assignee(db: AsyncSession, data: AssigneeRequest) -> AssigneeSuggestion:
    team = await team_context(db, data.candidate_ids)
    if not team:
        raise CoastboardError("No team members to choose from")
    inputs = {
        "task_title": data.task_title,
        "task_description": data.task_description,
        "team": team,
    }
    return await _draft("assignee", inputs, [member["id"] for member in team])


async def break_down_task(data: BreakdownRequest) -> TaskBreakdown:
    return await _draft("breakdown", {"title": data.title, "description": data.description})


async def suggest_deadline(data: DeadlineRequest) -> DeadlineSuggestion:
    inputs = {
        "title": data.title,
        "description": data.description,
        "priority": data.priority.value,
        "today": _today(),
    }
    return await _draft("deadline", inputs)


async def generate_daily_key_points(db: AsyncSession, caller: SessionUser) -> DailyKeyPoints:
    result = await db.execute(select(Task).where(Task.status != "done"))
    tasks = [task_summary(task) for task in result.scalars().all() if caller.id in (task.assignee_ids or [])]
    if not tasks:
        return DailyKeyPoints(key_points=[])
    return await _draft("key_points", {"name": caller.name or "the user", "tasks": tasks, "today": _today()})


async def generate_eod_report(db: AsyncSession, caller: SessionUser) -> EODReport:
    board = await board_service.get_or_create_today_board(db, caller.id)
    start, end = local_today_start(), local_tomorrow_start()
    result = await db.execute(select(Task))
    todays = [
        task for task in result.scalars().all()
        if task.daily_board_id == board.id
        or (task.completed_at is not None and start <= task.completed_at < end)
    ]

    members = []
    for member in await team_context(db):
        mine = [task for task in todays if member["id"] in (task.assignee_ids or [])]
        members.append(
            {
                "id": member["id"],
                "name": member["name"],
                "completed": [task.title for task in mine if task.status == "done"],
                "in_progress": [task.title for task in mine if task.status != "done"],
            }
        )
    return await _draft("eod", {"members": members, "today": _today()})


async def generate_project_plan(data: ProjectPlanRequest) -> ProjectPlan:
    inputs = {
        "name": data.name,
        "description": data.description,
        "deadline": data.deadline.isoformat() if data.deadline else None,
        "today": _today(),
    }
    return await _draft("project_plan", inputs)
