import logging
import math
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.core.database import utcnow
from coastboard.core.errors import Conflict, NotFound, Unauthorized
from coastboard.models.task import Task
from coastboard.models.timelog import TimeLog
from coastboard.schemas.time import ManualTimeEntry, TimeLogResponse

from . import activity_service, task_service

logger = logging.getLogger(__name__)

TIMER_RUNNING = "A timer is already running for this task"


def _minutes(seconds: int) -> int:
    return int(seconds / 60 + 0.5)


async def _open_log(db: AsyncSession, user_id: int, task_id: int) -> Optional[TimeLog]:
    result = await db.execute(
        select(TimeLog).where(
            TimeLog.user_id == user_id,
            TimeLog.task_id == task_id,
            TimeLog.end_time.is_(None),
        )
    )
    return result.scalars().first()


async def start_time_entry(
    db: AsyncSession, caller: SessionUser, task_id: int, project_id: int
) -> TimeLog:
    await task_service.get_task(db, caller, task_id)
    if await _open_log(db, caller.id, task_id):
        raise Conflict(TIMER_RUNNING)

    log = TimeLog(
        task_id=task_id,
        user_id=caller.id,
        project_id=project_id,
        start_time=utcnow(),
        duration=0,
        is_manual=False,
    )
    db.add(log)
    try:
        await db.commit()
    except IntegrityError:
        # the open-timer index caught a concurrent start
        await db.rollback()
        raise Conflict(TIMER_RUNNING)
    await db.refresh(log)
    return log


async def _roll_up(db: AsyncSession, log: TimeLog) -> None:
    """Add the log's duration to the task total in the same transaction."""
    await db.execute(
        update(Task)
        .where(Task.id == log.task_id)
        .values(total_time_spent=Task.total_time_spent + log.duration)
        .execution_options(synchronize_session=False)
    )


async def _log_time_activity(
    db: AsyncSession, caller: SessionUser, log: TimeLogResponse, verb: str = "logged"
) -> None:
    result = await db.execute(select(Task.title).where(Task.id == log.task_id))
    title = result.scalar_one_or_none() or "a task"
    await activity_service.log_activity(
        db,
        caller.id,
        "time_logged",
        f'{verb} {_minutes(log.duration)}m on task "{title}"',
        project_id=log.project_id,
        metadata={"task_id": log.task_id, "new_value": str(log.duration)},
    )


async def stop_time_entry(db: AsyncSession, caller: SessionUser, log_id: int) -> TimeLogResponse:
    result = await db.execute(select(TimeLog).where(TimeLog.id == log_id))
    log = result.scalar_one_or_none()
    if log is None:
        raise NotFound("Time log not found")
    if log.user_id != caller.id:
        raise Unauthorized()
    if log.end_time is not None:
        raise Conflict("Timer already stopped")

    end_time = utcnow()
    log.end_time = end_time
    log.duration = math.floor((end_time - log.start_time).total_seconds())
    await _roll_up(db, log)
    await db.commit()
    await db.refresh(log)

    response = TimeLogResponse.model_validate(log)
    await _log_time_activity(db, caller, response)
    return response


async def log_manual_time(
    db: AsyncSession, caller: SessionUser, data: ManualTimeEntry
) -> TimeLogResponse:
    await task_service.get_task(db, caller, data.task_id)
    log = TimeLog(
        task_id=data.task_id,
        user_id=caller.id,
        project_id=data.project_id,
        start_time=data.date,
        end_time=data.date + timedelta(seconds=data.duration),
        duration=data.duration,
        description=data.description,
        is_manual=True,
    )
    db.add(log)
    await db.flush()
    await _roll_up(db, log)
    await db.commit()
    await db.refresh(log)

    response = TimeLogResponse.model_validate(log)
    await _log_time_activity(db, caller, response, verb="manually logged")
    return response


async def get_task_time_logs(db: AsyncSession, task_id: int) -> List[TimeLog]:
    result = await db.execute(
        select(TimeLog).where(TimeLog.task_id == task_id).order_by(TimeLog.start_time.desc(), TimeLog.id.desc())
    )
    return list(result.scalars().all())


async def get_running_timer(db: AsyncSession, user_id: int, task_id: int) -> Optional[TimeLog]:
    return await _open_log(db, user_id, task_id)


async def get_time_logged_since(db: AsyncSession, user_id: int, start, end) -> int:
    result = await db.execute(
        select(TimeLog.duration).where(
            TimeLog.user_id == user_id,
            TimeLog.start_time >= start,
            TimeLog.start_time < end,
        )
    )
    return sum(duration or 0 for duration in result.scalars().all())
