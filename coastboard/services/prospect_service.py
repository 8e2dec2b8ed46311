import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.core.errors import NotFound
from coastboard.models.crm_activity import CrmActivity
from coastboard.models.prospect import PipelineHistory, Prospect
from coastboard.models.template import TemplateSend
from coastboard.schemas.prospect import (
    BulkProspectUpdate,
    ProspectCreate,
    ProspectFilters,
    ProspectUpdate,
)

from .utils import column_values, total_pages

logger = logging.getLogger(__name__)

SORTABLE = {
    "weakness_score",
    "business_name",
    "created_at",
    "updated_at",
    "google_rating",
    "review_count",
}


async def get_prospect_or_404(db: AsyncSession, prospect_id: int) -> Prospect:
    result = await db.execute(select(Prospect).where(Prospect.id == prospect_id))
    prospect = result.scalar_one_or_none()
    if prospect is None:
        raise NotFound("Prospect not found")
    return prospect


async def create_prospect(db: AsyncSession, caller: SessionUser, data: ProspectCreate) -> Prospect:
    values = column_values(data)
    values["assigned_to"] = values.get("assigned_to") or caller.id
    prospect = Prospect(**values, inputted_by=caller.id, pipeline_stage="new_lead")
    db.add(prospect)
    await db.commit()
    await db.refresh(prospect)
    return prospect


async def update_prospect(db: AsyncSession, prospect_id: int, data: ProspectUpdate) -> Prospect:
    prospect = await get_prospect_or_404(db, prospect_id)
    for field, value in column_values(data, exclude_unset=True).items():
        setattr(prospect, field, value)
    await db.commit()
    await db.refresh(prospect)
    return prospect


async def delete_prospect(db: AsyncSession, prospect_id: int) -> None:
    prospect = await get_prospect_or_404(db, prospect_id)
    for model in (PipelineHistory, CrmActivity, TemplateSend):
        result = await db.execute(select(model).where(model.prospect_id == prospect.id))
        for row in result.scalars().all():
            await db.delete(row)
    await db.delete(prospect)
    await db.commit()


async def get_prospects(db: AsyncSession, filters: ProspectFilters) -> Dict[str, Any]:
    query = select(Prospect)
    if filters.market:
        query = query.where(Prospect.market == filters.market)
    if filters.category:
        query = query.where(Prospect.category == filters.category)
    if filters.stage:
        query = query.where(Prospect.pipeline_stage == filters.stage.value)
    if filters.assigned_to:
        query = query.where(Prospect.assigned_to == filters.assigned_to)
    if filters.min_weakness:
        query = query.where(Prospect.weakness_score >= filters.min_weakness)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                Prospect.business_name.ilike(pattern),
                Prospect.owner_name.ilike(pattern),
                Prospect.email.ilike(pattern),
                Prospect.notes.ilike(pattern),
            )
        )

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

    column = getattr(Prospect, filters.sort_by if filters.sort_by in SORTABLE else "weakness_score")
    order = column.asc() if filters.sort_order == "asc" else column.desc()
    result = await db.execute(
        query.order_by(order, Prospect.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return {
        "prospects": list(result.scalars().all()),
        "total": total,
        "page": filters.page,
        "total_pages": total_pages(total, filters.limit),
    }


async def get_stage_counts(db: AsyncSession) -> Dict[str, int]:
    result = await db.execute(
        select(Prospect.pipeline_stage, func.count(Prospect.id)).group_by(Prospect.pipeline_stage)
    )
    return {stage: count for stage, count in result.all()}


async def get_prospect_stats(db: AsyncSession) -> Dict[str, Any]:
    stages = await get_stage_counts(db)
    result = await db.execute(
        select(Prospect.contacted, Prospect.responded, Prospect.deal_closed, Prospect.project_started)
    )
    rows = result.all()
    contacted = sum(1 for row in rows if row.contacted)
    deals_won = sum(1 for row in rows if row.deal_closed)
    return {
        "stages": stages,
        "total": len(rows),
        "contacted": contacted,
        "responded": sum(1 for row in rows if row.responded),
        "deals_won": deals_won,
        "projects_started": sum(1 for row in rows if row.project_started),
        "conversion_rate": f"{deals_won / contacted * 100:.1f}" if contacted else "0",
    }


async def bulk_update(db: AsyncSession, data: BulkProspectUpdate) -> int:
    values = column_values(data, exclude_unset=True)
    ids = values.pop("ids")
    add_tags = values.pop("tags", None) or []

    result = await db.execute(select(Prospect).where(Prospect.id.in_(ids)))
    prospects = result.scalars().all()
    for prospect in prospects:
        for field, value in values.items():
            setattr(prospect, field, value)
        if add_tags:
            prospect.tags = list(dict.fromkeys(list(prospect.tags or []) + add_tags))
    await db.commit()
    return len(prospects)


async def import_prospects(
    db: AsyncSession, caller: SessionUser, rows: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Create prospects from parsed CSV rows, skipping known business+market pairs."""
    imported = 0
    skipped = 0
    errors: List[str] = []

    for row in rows:
        name = row.get("business_name") or "(unnamed)"
        try:
            data = ProspectCreate.model_validate({**row, "lead_source": "CSV Import"})
        except ValidationError as e:
            errors.append(f"Failed to import {name}: {e.errors()[0]['msg']}")
            continue

        result = await db.execute(
            select(Prospect.id).where(
                Prospect.business_name == data.business_name,
                Prospect.market == data.market,
            )
        )
        if result.first() is not None:
            skipped += 1
            continue

        values = column_values(data)
        values["assigned_to"] = values.get("assigned_to") or caller.id
        db.add(Prospect(**values, inputted_by=caller.id, pipeline_stage="new_lead"))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            skipped += 1
            continue
        imported += 1

    logger.info("Imported %s prospects (%s skipped, %s errors)", imported, skipped, len(errors))
    return {"imported": imported, "skipped": skipped, "errors": errors}
