"""Sticky notes and custom boards."""
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.board import CustomBoardCreate, CustomBoardResponse, CustomBoardUpdate
from coastboard.schemas.sticky_note import StickyNoteCreate, StickyNoteResponse, StickyNoteUpdate
from coastboard.schemas.task import TaskResponse
from coastboard.services import custom_board_service, sticky_note_service


@action("Failed to create note")
async def create_sticky_note(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = StickyNoteCreate.model_validate(payload)
    return dump(StickyNoteResponse, await sticky_note_service.create_note(db, caller, data))


@action("Failed to fetch notes")
async def get_sticky_notes(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return dump_list(StickyNoteResponse, await sticky_note_service.get_notes(db, caller))


@action("Failed to update note")
async def update_sticky_note(db: AsyncSession, caller: Optional[SessionUser], note_id: int, payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = StickyNoteUpdate.model_validate(payload)
    return dump(StickyNoteResponse, await sticky_note_service.update_note(db, caller, note_id, data))


@action("Failed to delete note")
async def delete_sticky_note(db: AsyncSession, caller: Optional[SessionUser], note_id: int):
    caller = require_auth(caller)
    await sticky_note_service.delete_note(db, caller, note_id)
    return None


@action("Failed to pin note")
async def toggle_pin_sticky_note(db: AsyncSession, caller: Optional[SessionUser], note_id: int):
    caller = require_auth(caller)
    return dump(StickyNoteResponse, await sticky_note_service.toggle_pin(db, caller, note_id))


@action("Failed to create board")
async def create_custom_board(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = CustomBoardCreate.model_validate(payload)
    return dump(CustomBoardResponse, await custom_board_service.create_board(db, caller, data))


@action("Failed to fetch boards")
async def get_custom_boards(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return dump_list(CustomBoardResponse, await custom_board_service.get_boards(db, caller))


@action("Failed to fetch board")
async def get_custom_board(db: AsyncSession, caller: Optional[SessionUser], board_id: int):
    caller = require_auth(caller)
    board = await custom_board_service.get_board(db, caller, board_id)
    tasks = await custom_board_service.get_board_tasks(db, caller, board_id)
    return {"board": dump(CustomBoardResponse, board), "tasks": dump_list(TaskResponse, tasks)}


@action("Failed to update board")
async def update_custom_board(db: AsyncSession, caller: Optional[SessionUser], board_id: int, payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = CustomBoardUpdate.model_validate(payload)
    return dump(CustomBoardResponse, await custom_board_service.update_board(db, caller, board_id, data))


@action("Failed to delete board")
async def delete_custom_board(db: AsyncSession, caller: Optional[SessionUser], board_id: int):
    caller = require_auth(caller)
    await custom_board_service.delete_board(db, caller, board_id)
    return None


@action("Failed to add task to board")
async def add_task_to_custom_board(db: AsyncSession, caller: Optional[SessionUser], board_id: int, task_id: int):
    caller = require_auth(caller)
    return dump(CustomBoardResponse, await custom_board_service.add_task(db, caller, board_id, task_id))


@action("Failed to remove task from board")
async def remove_task_from_custom_board(db: AsyncSession, caller: Optional[SessionUser], board_id: int, task_id: int):
    caller = require_auth(caller)
    return dump(CustomBoardResponse, await custom_board_service.remove_task(db, caller, board_id, task_id))
