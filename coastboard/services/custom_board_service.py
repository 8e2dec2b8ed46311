from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.core.errors import NotFound
from coastboard.models.board import CustomBoard
from coastboard.models.task import Task
from coastboard.schemas.board import CustomBoardCreate, CustomBoardUpdate

from . import board_service, task_service
from .utils import column_values


async def _get_own_board(db: AsyncSession, caller: SessionUser, board_id: int) -> CustomBoard:
    result = await db.execute(
        select(CustomBoard).where(CustomBoard.id == board_id, CustomBoard.created_by == caller.id)
    )
    board = result.scalar_one_or_none()
    if board is None:
        raise NotFound("Board not found")
    return board


async def create_board(db: AsyncSession, caller: SessionUser, data: CustomBoardCreate) -> CustomBoard:
    board = CustomBoard(**column_values(data), created_by=caller.id, task_ids=[])
    db.add(board)
    await db.commit()
    await db.refresh(board)
    return board


async def get_boards(db: AsyncSession, caller: SessionUser) -> List[CustomBoard]:
    result = await db.execute(
        select(CustomBoard)
        .where(CustomBoard.created_by == caller.id)
        .order_by(CustomBoard.is_pinned.desc(), CustomBoard.name.asc())
    )
    return list(result.scalars().all())


async def get_board(db: AsyncSession, caller: SessionUser, board_id: int) -> CustomBoard:
    return await _get_own_board(db, caller, board_id)


async def get_board_tasks(db: AsyncSession, caller: SessionUser, board_id: int) -> List[Task]:
    board = await _get_own_board(db, caller, board_id)
    if not board.task_ids:
        return []
    result = await db.execute(select(Task).where(Task.id.in_(board.task_ids)))
    return [task for task in result.scalars().all() if board_service.can_see(caller, task)]


async def update_board(
    db: AsyncSession, caller: SessionUser, board_id: int, data: CustomBoardUpdate
) -> CustomBoard:
    board = await _get_own_board(db, caller, board_id)
    for field, value in column_values(data, exclude_unset=True).items():
        setattr(board, field, value)
    await db.commit()
    await db.refresh(board)
    return board


async def delete_board(db: AsyncSession, caller: SessionUser, board_id: int) -> None:
    board = await _get_own_board(db, caller, board_id)
    await db.delete(board)
    await db.commit()


async def add_task(db: AsyncSession, caller: SessionUser, board_id: int, task_id: int) -> CustomBoard:
    board = await _get_own_board(db, caller, board_id)
    await task_service.get_task(db, caller, task_id)
    if task_id not in board.task_ids:
        board.task_ids = list(board.task_ids) + [task_id]
        await db.commit()
        await db.refresh(board)
    return board


async def remove_task(db: AsyncSession, caller: SessionUser, board_id: int, task_id: int) -> CustomBoard:
    board = await _get_own_board(db, caller, board_id)
    if task_id in board.task_ids:
        board.task_ids = [existing for existing in board.task_ids if existing != task_id]
        await db.commit()
        await db.refresh(board)
    return board
