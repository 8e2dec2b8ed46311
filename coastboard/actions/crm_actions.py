"""Prospects, pipeline, templates, automation and the CRM activity log.

Every CRM action is admin only.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.automation import AutomationConfigResponse, AutomationConfigUpdate
from coastboard.schemas.crm_activity import CrmActivityCreate, CrmActivityResponse
from coastboard.schemas.prospect import (
    BulkProspectUpdate,
    PipelineHistoryResponse,
    ProspectCreate,
    ProspectFilters,
    ProspectResponse,
    ProspectUpdate,
    StageChange,
)
from coastboard.schemas.template import (
    SendStatusUpdate,
    SendTemplateEmail,
    TemplateCreate,
    TemplateResponse,
    TemplateSendResponse,
    TemplateUpdate,
)
from coastboard.services import (
    automation_service,
    crm_activity_service,
    pipeline_service,
    prospect_service,
    template_service,
)
from coastboard.services.utils import column_values


# Prospects

@action("Failed to create prospect")
async def create_prospect(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = ProspectCreate.model_validate(payload)
    return dump(ProspectResponse, await prospect_service.create_prospect(db, caller, data))


@action("Failed to update prospect")
async def update_prospect(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int, payload: Dict[str, Any]):
    require_admin(caller)
    data = ProspectUpdate.model_validate(payload)
    return dump(ProspectResponse, await prospect_service.update_prospect(db, prospect_id, data))


@action("Failed to delete prospect")
async def delete_prospect(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int):
    require_admin(caller)
    await prospect_service.delete_prospect(db, prospect_id)
    return None


@action("Failed to fetch prospect")
async def get_prospect(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int):
    require_admin(caller)
    return dump(ProspectResponse, await prospect_service.get_prospect_or_404(db, prospect_id))


@action("Failed to fetch prospects")
async def get_prospects(db: AsyncSession, caller: Optional[SessionUser], filters: Optional[Dict[str, Any]] = None):
    require_admin(caller)
    page = await prospect_service.get_prospects(db, ProspectFilters.model_validate(filters or {}))
    page["prospects"] = dump_list(ProspectResponse, page["prospects"])
    return page


@action("Failed to fetch prospect stats")
async def get_prospect_stats(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return await prospect_service.get_prospect_stats(db)


@action("Failed to update prospects")
async def bulk_update_prospects(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    require_admin(caller)
    data = BulkProspectUpdate.model_validate(payload)
    return {"modified_count": await prospect_service.bulk_update(db, data)}


@action("Failed to import prospects")
async def import_prospects(db: AsyncSession, caller: Optional[SessionUser], rows: List[Dict[str, Any]]):
    caller = require_admin(caller)
    return await prospect_service.import_prospects(db, caller, rows)


# Pipeline

@action("Failed to change stage")
async def change_stage(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int, payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = StageChange.model_validate(payload)
    return dump(ProspectResponse, await pipeline_service.change_stage(db, caller, prospect_id, data))


@action("Failed to fetch history")
async def get_pipeline_history(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int):
    require_admin(caller)
    history = await pipeline_service.get_history(db, prospect_id)
    return [
        {**dump(PipelineHistoryResponse, row["entry"]), "changed_by_name": row["changed_by_name"]}
        for row in history
    ]


@action("Failed to fetch pipeline summary")
async def get_pipeline_summary(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return await pipeline_service.get_pipeline_summary(db)


@action("Failed to fetch pipeline data")
async def get_prospects_by_stage(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    columns = await pipeline_service.get_prospects_by_stage(db)
    return {stage: dump_list(ProspectResponse, prospects) for stage, prospects in columns.items()}


@action("Failed to fetch stale deals")
async def get_stale_deal_alerts(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    alerts = await pipeline_service.get_stale_deal_alerts(db)
    return [
        {**dump(ProspectResponse, alert["prospect"]), "severity": alert["severity"], "days_stale": alert["days_stale"]}
        for alert in alerts
    ]


# Templates

@action("Failed to create template")
async def create_template(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = TemplateCreate.model_validate(payload)
    return dump(TemplateResponse, await template_service.create_template(db, caller, data))


@action("Failed to update template")
async def update_template(db: AsyncSession, caller: Optional[SessionUser], template_id: int, payload: Dict[str, Any]):
    require_admin(caller)
    data = TemplateUpdate.model_validate(payload)
    return dump(TemplateResponse, await template_service.update_template(db, template_id, data))


@action("Failed to delete template")
async def delete_template(db: AsyncSession, caller: Optional[SessionUser], template_id: int):
    require_admin(caller)
    await template_service.delete_template(db, template_id)
    return None


@action("Failed to fetch templates")
async def get_templates(
    db: AsyncSession,
    caller: Optional[SessionUser],
    category: Optional[str] = None,
    is_auto_template: Optional[bool] = None,
    target_industry: Optional[str] = None,
):
    require_admin(caller)
    templates = await template_service.get_templates(db, category, is_auto_template, target_industry)
    return dump_list(TemplateResponse, templates)


@action("Failed to fetch template")
async def get_template(db: AsyncSession, caller: Optional[SessionUser], template_id: int):
    require_admin(caller)
    return dump(TemplateResponse, await template_service.get_template_or_404(db, template_id))


@action("Failed to send email")
async def send_template_email(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = SendTemplateEmail.model_validate(payload)
    return await template_service.send_template_email(db, caller, data)


@action("Failed to update send status")
async def update_send_status(db: AsyncSession, caller: Optional[SessionUser], send_id: int, payload: Dict[str, Any]):
    require_admin(caller)
    data = SendStatusUpdate.model_validate(payload)
    return dump(TemplateSendResponse, await template_service.update_send_status(db, send_id, data))


@action("Failed to fetch template stats")
async def get_template_performance_stats(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    stats = await template_service.get_template_performance_stats(db)
    for entry in stats:
        entry["last_used"] = entry["last_used"].isoformat() if entry["last_used"] else None
    return stats


@action("Failed to fetch outreach stats")
async def get_outreach_stats(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return await template_service.get_overall_outreach_stats(db)


# Automation

@action("Failed to fetch automation configs")
async def get_automation_configs(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return dump_list(AutomationConfigResponse, await automation_service.get_configs(db))


@action("Failed to update automation config")
async def update_automation_config(db: AsyncSession, caller: Optional[SessionUser], config_id: int, payload: Dict[str, Any]):
    require_admin(caller)
    data = AutomationConfigUpdate.model_validate(payload)
    return dump(AutomationConfigResponse, await automation_service.update_config(db, config_id, data))


@action("Failed to seed configs")
async def seed_automation_configs(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return {"created": await automation_service.seed_default_configs(db)}


@action("Failed to process follow-ups")
async def process_follow_ups_now(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_admin(caller)
    return await automation_service.process_follow_ups(db, caller.id)


# CRM activity log

@action("Failed to log activity")
async def log_crm_activity(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = CrmActivityCreate.model_validate(payload)
    await prospect_service.get_prospect_or_404(db, data.prospect_id)
    values = column_values(data)
    activity = await crm_activity_service.log_activity(db, performed_by=caller.id, **values)
    return dump(CrmActivityResponse, activity)


@action("Failed to fetch activities")
async def get_prospect_activities(db: AsyncSession, caller: Optional[SessionUser], prospect_id: int, limit: int = 50):
    require_admin(caller)
    rows = await crm_activity_service.get_activities_for_prospect(db, prospect_id, limit)
    return [{**dump(CrmActivityResponse, row["activity"]), "performed_by_name": row["performed_by_name"]} for row in rows]


@action("Failed to fetch activities")
async def get_recent_crm_activities(db: AsyncSession, caller: Optional[SessionUser], limit: int = 20):
    require_admin(caller)
    rows = await crm_activity_service.get_recent_activities(db, limit)
    return [
        {
            **dump(CrmActivityResponse, row["activity"]),
            "performed_by_name": row["performed_by_name"],
            "business_name": row["business_name"],
        }
        for row in rows
    ]


@action("Failed to fetch activity stats")
async def get_crm_activity_stats(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return await crm_activity_service.get_activity_stats(db)
