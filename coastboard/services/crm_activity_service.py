from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.clock import days_ago
from coastboard.models.crm_activity import CrmActivity
from coastboard.models.prospect import Prospect
from coastboard.models.user import User


async def log_activity(
    db: AsyncSession,
    prospect_id: int,
    performed_by: int,
    activity_type: str,
    subject: str,
    details: str = None,
    template_id: int = None,
    outcome: str = None,
    follow_up_date=None,
    is_automated: bool = False,
    commit: bool = True,
) -> CrmActivity:
    activity = CrmActivity(
        prospect_id=prospect_id,
        performed_by=performed_by,
        activity_type=activity_type,
        subject=subject,
        details=details,
        template_id=template_id,
        outcome=outcome,
        follow_up_date=follow_up_date,
        is_automated=is_automated,
    )
    db.add(activity)
    if commit:
        await db.commit()
        await db.refresh(activity)
    return activity


async def get_activities_for_prospect(
    db: AsyncSession, prospect_id: int, limit: int = 50
) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(CrmActivity, User.name)
        .outerjoin(User, User.id == CrmActivity.performed_by)
        .where(CrmActivity.prospect_id == prospect_id)
        .order_by(CrmActivity.created_at.desc(), CrmActivity.id.desc())
        .limit(limit)
    )
    return [{"activity": activity, "performed_by_name": name} for activity, name in result.all()]


async def get_recent_activities(db: AsyncSession, limit: int = 20) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(CrmActivity, User.name, Prospect.business_name)
        .outerjoin(User, User.id == CrmActivity.performed_by)
        .outerjoin(Prospect, Prospect.id == CrmActivity.prospect_id)
        .order_by(CrmActivity.created_at.desc(), CrmActivity.id.desc())
        .limit(limit)
    )
    return [
        {"activity": activity, "performed_by_name": name, "business_name": business_name}
        for activity, name, business_name in result.all()
    ]


async def get_activity_stats(db: AsyncSession) -> Dict[str, Any]:
    week_ago = days_ago(7)
    month_ago = days_ago(30)

    week = await db.execute(select(func.count(CrmActivity.id)).where(CrmActivity.created_at >= week_ago))
    month = await db.execute(select(func.count(CrmActivity.id)).where(CrmActivity.created_at >= month_ago))
    by_type = await db.execute(
        select(CrmActivity.activity_type, func.count(CrmActivity.id))
        .where(CrmActivity.created_at >= month_ago)
        .group_by(CrmActivity.activity_type)
    )
    return {
        "this_week": week.scalar_one(),
        "this_month": month.scalar_one(),
        "by_type": {activity_type: count for activity_type, count in by_type.all()},
    }
