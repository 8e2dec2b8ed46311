from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.time import ManualTimeEntry, TimeLogResponse
from coastboard.services import time_service


@action("Failed to start timer")
async def start_time_entry(db: AsyncSession, caller: Optional[SessionUser], task_id: int, project_id: int):
    caller = require_auth(caller)
    return dump(TimeLogResponse, await time_service.start_time_entry(db, caller, task_id, project_id))


@action("Failed to stop timer")
async def stop_time_entry(db: AsyncSession, caller: Optional[SessionUser], log_id: int):
    caller = require_auth(caller)
    return dump(TimeLogResponse, await time_service.stop_time_entry(db, caller, log_id))


@action("Failed to log time")
async def log_manual_time(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = ManualTimeEntry.model_validate(payload)
    return dump(TimeLogResponse, await time_service.log_manual_time(db, caller, data))


@action("Failed to fetch time logs")
async def get_task_time_logs(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    require_auth(caller)
    return dump_list(TimeLogResponse, await time_service.get_task_time_logs(db, task_id))


@action("Failed to fetch running timer")
async def get_running_timer(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_auth(caller)
    log = await time_service.get_running_timer(db, caller.id, task_id)
    return dump(TimeLogResponse, log) if log else None
