from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import note_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(tags=["notes"])


@router.get("/notes")
async def get_sticky_notes(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.get_sticky_notes(db, caller)


@router.post("/notes")
async def create_sticky_note(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.create_sticky_note(db, caller, payload)


@router.patch("/notes/{note_id}")
async def update_sticky_note(
    note_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.update_sticky_note(db, caller, note_id, payload)


@router.delete("/notes/{note_id}")
async def delete_sticky_note(
    note_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.delete_sticky_note(db, caller, note_id)


@router.post("/notes/{note_id}/pin")
async def toggle_pin_sticky_note(
    note_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.toggle_pin_sticky_note(db, caller, note_id)


# Custom boards

@router.get("/custom-boards")
async def get_custom_boards(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.get_custom_boards(db, caller)


@router.post("/custom-boards")
async def create_custom_board(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.create_custom_board(db, caller, payload)


@router.get("/custom-boards/{board_id}")
async def get_custom_board(
    board_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.get_custom_board(db, caller, board_id)


@router.patch("/custom-boards/{board_id}")
async def update_custom_board(
    board_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.update_custom_board(db, caller, board_id, payload)


@router.delete("/custom-boards/{board_id}")
async def delete_custom_board(
    board_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.delete_custom_board(db, caller, board_id)


@router.post("/custom-boards/{board_id}/tasks/{task_id}")
async def add_task_to_custom_board(
    board_id: int,
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.add_task_to_custom_board(db, caller, board_id, task_id)


@router.delete("/custom-boards/{board_id}/tasks/{task_id}")
async def remove_task_from_custom_board(
    board_id: int,
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await note_actions.remove_task_from_custom_board(db, caller, board_id, task_id)
