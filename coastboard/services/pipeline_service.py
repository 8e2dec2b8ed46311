import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser
from coastboard.core.clock import days_ago
from coastboard.core.database import utcnow
from coastboard.models.prospect import PipelineHistory, Prospect
from coastboard.models.user import User
from coastboard.schemas.prospect import PipelineStage, StageChange

from . import automation_service, crm_activity_service
from .prospect_service import get_prospect_or_404, get_stage_counts

logger = logging.getLogger(__name__)

# stage -> status flag that reaching it sets
STAGE_FLAGS = {
    "contacted": "contacted",
    "responded": "responded",
    "won": "deal_closed",
    "project_started": "project_started",
}

CLOSED_STAGES = ("won", "lost", "project_started", "nurture", "new_lead")


def format_stage(stage: str) -> str:
    return stage.replace("_", " ").title()


async def change_stage(
    db: AsyncSession, caller: SessionUser, prospect_id: int, data: StageChange
) -> Prospect:
    prospect = await get_prospect_or_404(db, prospect_id)
    from_stage = prospect.pipeline_stage
    to_stage = data.stage.value
    if from_stage == to_stage:
        return prospect

    prospect.pipeline_stage = to_stage
    flag = STAGE_FLAGS.get(to_stage)
    if flag:
        setattr(prospect, flag, True)
        setattr(prospect, f"{flag}_at", utcnow())
    if to_stage == "lost" and data.loss_reason:
        prospect.loss_reason = data.loss_reason.value

    db.add(
        PipelineHistory(
            prospect_id=prospect.id,
            from_stage=from_stage,
            to_stage=to_stage,
            changed_by=caller.id,
            notes=data.notes,
        )
    )
    await crm_activity_service.log_activity(
        db,
        prospect.id,
        caller.id,
        "stage_changed",
        f"Stage changed from {format_stage(from_stage)} to {format_stage(to_stage)}",
        details=data.notes,
    )
    await db.refresh(prospect)
    logger.info("Prospect %s moved %s -> %s", prospect.id, from_stage, to_stage)

    await automation_service.run_thank_you(db, prospect_id, to_stage, caller.id)
    return await get_prospect_or_404(db, prospect_id)


async def get_history(db: AsyncSession, prospect_id: int) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(PipelineHistory, User.name)
        .outerjoin(User, User.id == PipelineHistory.changed_by)
        .where(PipelineHistory.prospect_id == prospect_id)
        .order_by(PipelineHistory.created_at.desc(), PipelineHistory.id.desc())
    )
    return [{"entry": entry, "changed_by_name": name} for entry, name in result.all()]


async def get_pipeline_summary(db: AsyncSession) -> Dict[str, int]:
    return await get_stage_counts(db)


async def get_prospects_by_stage(db: AsyncSession) -> Dict[str, List[Prospect]]:
    columns: Dict[str, List[Prospect]] = {stage.value: [] for stage in PipelineStage}
    result = await db.execute(
        select(Prospect).order_by(Prospect.weakness_score.desc(), Prospect.updated_at.desc())
    )
    for prospect in result.scalars().all():
        if prospect.pipeline_stage in columns:
            columns[prospect.pipeline_stage].append(prospect)
    return columns


async def get_stale_deal_alerts(db: AsyncSession) -> List[Dict[str, Any]]:
    """Open deals untouched for more than a week; red after two."""
    now = utcnow()
    fourteen_days_ago = days_ago(14, now)
    result = await db.execute(
        select(Prospect)
        .where(
            Prospect.pipeline_stage.not_in(CLOSED_STAGES),
            Prospect.updated_at < days_ago(7, now),
        )
        .order_by(Prospect.updated_at.asc())
    )
    return [
        {
            "prospect": prospect,
            "severity": "red" if prospect.updated_at < fourteen_days_ago else "orange",
            "days_stale": (now - prospect.updated_at).days,
        }
        for prospect in result.scalars().all()
    ]
