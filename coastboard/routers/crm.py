from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import crm_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(prefix="/crm", tags=["crm"])


# Prospects

@router.get("/prospects")
async def get_prospects(
    search: Optional[str] = None,
    market: Optional[str] = None,
    category: Optional[str] = None,
    stage: Optional[str] = None,
    assigned_to: Optional[int] = None,
    min_weakness: Optional[int] = None,
    sort_by: str = "weakness_score",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 50,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "search": search,
        "market": market,
        "category": category,
        "stage": stage,
        "assigned_to": assigned_to,
        "min_weakness": min_weakness,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "page": page,
        "limit": limit,
    }
    return await crm_actions.get_prospects(db, caller, filters)


@router.post("/prospects")
async def create_prospect(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.create_prospect(db, caller, payload)


@router.get("/prospects/stats")
async def get_prospect_stats(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_prospect_stats(db, caller)


@router.post("/prospects/bulk-update")
async def bulk_update_prospects(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.bulk_update_prospects(db, caller, payload)


@router.post("/prospects/import")
async def import_prospects(
    rows: List[Dict[str, Any]] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.import_prospects(db, caller, rows)


@router.get("/prospects/{prospect_id}")
async def get_prospect(
    prospect_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_prospect(db, caller, prospect_id)


@router.patch("/prospects/{prospect_id}")
async def update_prospect(
    prospect_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.update_prospect(db, caller, prospect_id, payload)


@router.delete("/prospects/{prospect_id}")
async def delete_prospect(
    prospect_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.delete_prospect(db, caller, prospect_id)


# Pipeline

@router.post("/prospects/{prospect_id}/stage")
async def change_stage(
    prospect_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.change_stage(db, caller, prospect_id, payload)


@router.get("/prospects/{prospect_id}/history")
async def get_pipeline_history(
    prospect_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_pipeline_history(db, caller, prospect_id)


@router.get("/pipeline/summary")
async def get_pipeline_summary(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_pipeline_summary(db, caller)


@router.get("/pipeline/board")
async def get_prospects_by_stage(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_prospects_by_stage(db, caller)


@router.get("/pipeline/stale")
async def get_stale_deal_alerts(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_stale_deal_alerts(db, caller)


# Templates

@router.get("/templates")
async def get_templates(
    category: Optional[str] = None,
    is_auto_template: Optional[bool] = None,
    target_industry: Optional[str] = None,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_templates(db, caller, category, is_auto_template, target_industry)


@router.post("/templates")
async def create_template(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.create_template(db, caller, payload)


@router.get("/templates/stats")
async def get_template_performance_stats(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_template_performance_stats(db, caller)


@router.get("/templates/{template_id}")
async def get_template(
    template_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_template(db, caller, template_id)


@router.patch("/templates/{template_id}")
async def update_template(
    template_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.update_template(db, caller, template_id, payload)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.delete_template(db, caller, template_id)


@router.post("/sends")
async def send_template_email(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.send_template_email(db, caller, payload)


@router.patch("/sends/{send_id}")
async def update_send_status(
    send_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.update_send_status(db, caller, send_id, payload)


@router.get("/outreach/stats")
async def get_outreach_stats(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_outreach_stats(db, caller)


# Automation

@router.get("/automation")
async def get_automation_configs(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_automation_configs(db, caller)


@router.post("/automation/seed")
async def seed_automation_configs(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.seed_automation_configs(db, caller)


@router.post("/automation/run")
async def process_follow_ups_now(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.process_follow_ups_now(db, caller)


@router.patch("/automation/{config_id}")
async def update_automation_config(
    config_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.update_automation_config(db, caller, config_id, payload)


# Activity log

@router.post("/activities")
async def log_crm_activity(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.log_crm_activity(db, caller, payload)


@router.get("/activities")
async def get_recent_crm_activities(
    limit: int = 20,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_recent_crm_activities(db, caller, limit)


@router.get("/activities/stats")
async def get_crm_activity_stats(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_crm_activity_stats(db, caller)


@router.get("/prospects/{prospect_id}/activities")
async def get_prospect_activities(
    prospect_id: int,
    limit: int = 50,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await crm_actions.get_prospect_activities(db, caller, prospect_id, limit)
