from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.models.comment import Comment
from coastboard.models.user import User
from coastboard.schemas.board import CommentCreate, CommentResponse

from . import activity_service, notification_service, task_service
from .utils import unique_ids


async def add_comment(
    db: AsyncSession, caller: SessionUser, task_id: int, data: CommentCreate
) -> CommentResponse:
    task = await task_service.get_task(db, caller, task_id)
    title, project_id = task.title, task.project_id

    comment = Comment(
        task_id=task.id,
        user_id=caller.id,
        text=data.text,
        tagged_user_ids=unique_ids(data.tagged_user_ids),
    )
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    response = CommentResponse.model_validate(comment)
    response.user_name = caller.name

    for user_id in response.tagged_user_ids:
        if user_id == caller.id:
            continue
        await notification_service.notify(
            db,
            user_id,
            "info",
            "You were mentioned in a comment",
            f'{caller.name or "Someone"} mentioned you on "{title}"',
            {"task_id": task_id, "project_id": project_id, "triggered_by": caller.id},
        )
    await activity_service.log_activity(
        db,
        caller.id,
        "comment_added",
        f'commented on "{title}"',
        project_id=project_id,
        metadata={"task_id": task_id},
    )
    return response


async def get_comments(db: AsyncSession, caller: SessionUser, task_id: int) -> List[CommentResponse]:
    await task_service.get_task(db, caller, task_id)
    result = await db.execute(
        select(Comment, User.name)
        .outerjoin(User, User.id == Comment.user_id)
        .where(Comment.task_id == task_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    comments = []
    for comment, user_name in result.all():
        entry = CommentResponse.model_validate(comment)
        entry.user_name = user_name
        comments.append(entry)
    return comments
