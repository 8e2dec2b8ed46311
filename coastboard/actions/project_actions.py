from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.activity import ActivityResponse
from coastboard.schemas.project import ProjectCreate, ProjectFilters, ProjectResponse, ProjectUpdate
from coastboard.services import activity_service, project_service


@action("Failed to create project")
async def create_project(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = ProjectCreate.model_validate(payload)
    return dump(ProjectResponse, await project_service.create_project(db, caller, data))


@action("Failed to fetch projects")
async def get_projects(db: AsyncSession, caller: Optional[SessionUser], filters: Optional[Dict[str, Any]] = None):
    require_auth(caller)
    projects = await project_service.get_projects(db, ProjectFilters.model_validate(filters or {}))
    return dump_list(ProjectResponse, projects)


@action("Failed to fetch project")
async def get_project(db: AsyncSession, caller: Optional[SessionUser], project_id: int):
    require_auth(caller)
    return dump(ProjectResponse, await project_service.get_project(db, project_id))


@action("Failed to update project")
async def update_project(db: AsyncSession, caller: Optional[SessionUser], project_id: int, payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = ProjectUpdate.model_validate(payload)
    return dump(ProjectResponse, await project_service.update_project(db, caller, project_id, data))


@action("Failed to delete project")
async def delete_project(db: AsyncSession, caller: Optional[SessionUser], project_id: int):
    caller = require_admin(caller)
    await project_service.delete_project(db, caller, project_id)
    return None


@action("Failed to fetch activity")
async def get_recent_activity(db: AsyncSession, caller: Optional[SessionUser], limit: int = 20):
    require_auth(caller)
    return dump_list(ActivityResponse, await activity_service.get_recent_activity(db, limit))


@action("Failed to fetch activity")
async def get_project_activity(db: AsyncSession, caller: Optional[SessionUser], project_id: int, limit: int = 20):
    require_auth(caller)
    return dump_list(ActivityResponse, await activity_service.get_project_activity(db, project_id, limit))
