from typing import List

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin
from coastboard.models.activity import Activity
from coastboard.models.comment import Comment
from coastboard.models.project import Project
from coastboard.models.task import Task
from coastboard.models.timelog import TimeLog
from coastboard.schemas.project import ProjectCreate, ProjectFilters, ProjectResponse, ProjectUpdate

from . import activity_service
from .task_service import get_project_or_404
from .utils import column_values

SORTABLE = {"created_at", "updated_at", "name", "deadline", "progress", "start_date"}


async def create_project(db: AsyncSession, caller: SessionUser, data: ProjectCreate) -> ProjectResponse:
    require_admin(caller)
    project = Project(**column_values(data), created_by=caller.id, status="active", progress=0)
    db.add(project)
    await db.commit()
    await db.refresh(project)

    response = ProjectResponse.model_validate(project)
    await activity_service.log_activity(
        db,
        caller.id,
        "project_created",
        f'created project "{response.name}"',
        project_id=response.id,
    )
    return response


async def get_projects(db: AsyncSession, filters: ProjectFilters) -> List[Project]:
    query = select(Project)
    if filters.status:
        query = query.where(Project.status == filters.status.value)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(or_(Project.name.ilike(pattern), Project.description.ilike(pattern)))

    column = getattr(Project, filters.sort_by if filters.sort_by in SORTABLE else "created_at")
    query = query.order_by(column.asc() if filters.sort_order == "asc" else column.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_project(db: AsyncSession, project_id: int) -> Project:
    return await get_project_or_404(db, project_id)


async def update_project(
    db: AsyncSession, caller: SessionUser, project_id: int, data: ProjectUpdate
) -> Project:
    require_admin(caller)
    project = await get_project_or_404(db, project_id)
    for field, value in column_values(data, exclude_unset=True).items():
        setattr(project, field, value)
    await db.commit()
    await db.refresh(project)
    return project


async def delete_project(db: AsyncSession, caller: SessionUser, project_id: int) -> None:
    require_admin(caller)
    project = await get_project_or_404(db, project_id)

    task_ids = select(Task.id).where(Task.project_id == project.id)
    await db.execute(delete(Comment).where(Comment.task_id.in_(task_ids)))
    await db.execute(delete(TimeLog).where(TimeLog.project_id == project.id))
    await db.execute(delete(Task).where(Task.project_id == project.id))
    await db.execute(delete(Activity).where(Activity.project_id == project.id))
    await db.delete(project)
    await db.commit()
