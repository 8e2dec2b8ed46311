from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.board import CommentCreate, CommentResponse, DailyBoardResponse
from coastboard.schemas.task import BoardTaskCreate, TaskResponse
from coastboard.services import board_service, comment_service


@action("Failed to load today's board")
async def get_or_create_today_board(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return dump(DailyBoardResponse, await board_service.get_or_create_today_board(db, caller.id))


@action("Failed to fetch boards")
async def get_recent_boards(db: AsyncSession, caller: Optional[SessionUser], limit: int = 7):
    require_auth(caller)
    return dump_list(DailyBoardResponse, await board_service.get_recent_boards(db, limit))


@action("Failed to fetch board tasks")
async def get_board_tasks(db: AsyncSession, caller: Optional[SessionUser], board_id: int):
    caller = require_auth(caller)
    return dump_list(TaskResponse, await board_service.get_board_tasks(db, caller, board_id))


@action("Failed to add task")
async def add_task_to_board(
    db: AsyncSession,
    caller: Optional[SessionUser],
    payload: Dict[str, Any],
    board_id: Optional[int] = None,
):
    caller = require_admin(caller)
    data = BoardTaskCreate.model_validate(payload)
    return dump(TaskResponse, await board_service.add_task_to_board(db, caller, data, board_id))


@action("Failed to update task")
async def toggle_board_task_done(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_auth(caller)
    return dump(TaskResponse, await board_service.toggle_board_task_done(db, caller, task_id))


@action("Failed to add comment")
async def add_comment(db: AsyncSession, caller: Optional[SessionUser], task_id: int, payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = CommentCreate.model_validate(payload)
    return dump(CommentResponse, await comment_service.add_comment(db, caller, task_id, data))


@action("Failed to fetch comments")
async def get_comments(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_auth(caller)
    return dump_list(CommentResponse, await comment_service.get_comments(db, caller, task_id))


@action("Failed to delete task")
async def delete_board_task(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_admin(caller)
    await board_service.delete_board_task(db, caller, task_id)
    return None
