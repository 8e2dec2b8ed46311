from typing import List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.core.errors import Forbidden, NotFound
from coastboard.models.sticky_note import StickyNote
from coastboard.models.user import User
from coastboard.schemas.sticky_note import StickyNoteCreate, StickyNoteResponse, StickyNoteUpdate

from . import notification_service
from .utils import column_values


async def _get_own_note(db: AsyncSession, caller: SessionUser, note_id: int) -> StickyNote:
    result = await db.execute(select(StickyNote).where(StickyNote.id == note_id))
    note = result.scalar_one_or_none()
    if note is None:
        raise NotFound("Note not found")
    if note.created_by != caller.id and not caller.is_admin:
        raise Forbidden("You can only change your own notes")
    return note


async def create_note(db: AsyncSession, caller: SessionUser, data: StickyNoteCreate) -> StickyNoteResponse:
    note = StickyNote(**column_values(data), created_by=caller.id)
    db.add(note)
    await db.commit()
    await db.refresh(note)

    response = StickyNoteResponse.model_validate(note)
    if response.visibility.value == "team":
        result = await db.execute(select(User.id).where(User.id != caller.id))
        for user_id in result.scalars().all():
            await notification_service.notify(
                db,
                user_id,
                "sticky_note_shared",
                "New Team Note",
                f"{caller.name or 'A teammate'} shared a new note: {response.title}",
                {"triggered_by": caller.id},
            )
    return response


async def get_notes(db: AsyncSession, caller: SessionUser) -> List[StickyNote]:
    result = await db.execute(
        select(StickyNote)
        .where(
            or_(
                StickyNote.visibility == "team",
                StickyNote.created_by == caller.id,
            )
        )
        .order_by(StickyNote.is_pinned.desc(), StickyNote.created_at.desc(), StickyNote.id.desc())
    )
    return list(result.scalars().all())


async def update_note(
    db: AsyncSession, caller: SessionUser, note_id: int, data: StickyNoteUpdate
) -> StickyNote:
    note = await _get_own_note(db, caller, note_id)
    for field, value in column_values(data, exclude_unset=True).items():
        setattr(note, field, value)
    await db.commit()
    await db.refresh(note)
    return note


async def delete_note(db: AsyncSession, caller: SessionUser, note_id: int) -> None:
    note = await _get_own_note(db, caller, note_id)
    await db.delete(note)
    await db.commit()


async def toggle_pin(db: AsyncSession, caller: SessionUser, note_id: int) -> StickyNote:
    note = await _get_own_note(db, caller, note_id)
    note.is_pinned = not note.is_pinned
    await db.commit()
    await db.refresh(note)
    return note
