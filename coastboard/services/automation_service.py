"""Automated prospect emails: stepwise follow-ups and stage thank-yous."""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core import mailer
from coastboard.core.database import utcnow
from coastboard.core.errors import NotFound
from coastboard.models.automation import AutomationConfig
from coastboard.models.prospect import Prospect
from coastboard.models.template import CrmTemplate
from coastboard.schemas.automation import AutomationConfigUpdate

from . import crm_activity_service, template_service
from .utils import column_values

logger = logging.getLogger(__name__)

FOLLOW_UP_PREFIX = "follow_up_day_"
RATE_LIMIT = timedelta(hours=24)
NURTURE_PERIOD = timedelta(days=30)

DEFAULT_CONFIGS = [
    ("follow_up_day_3", 3),
    ("follow_up_day_7", 7),
    ("follow_up_day_14", 14),
    ("follow_up_day_30", 30),
    ("thank_you_responded", 0),
    ("thank_you_won", 0),
    ("thank_you_project_started", 0),
    ("thank_you_referral", 0),
]

THANK_YOU_TRIGGERS = {
    "responded": "thank_you_responded",
    "won": "thank_you_won",
    "project_started": "thank_you_project_started",
}


async def get_configs(db: AsyncSession) -> List[AutomationConfig]:
    result = await db.execute(select(AutomationConfig).order_by(AutomationConfig.id))
    return list(result.scalars().all())


async def update_config(db: AsyncSession, config_id: int, data: AutomationConfigUpdate) -> AutomationConfig:
    result = await db.execute(select(AutomationConfig).where(AutomationConfig.id == config_id))
    config = result.scalar_one_or_none()
    if config is None:
        raise NotFound("Config not found")
    values = column_values(data, exclude_unset=True)
    if values.get("template_id") is not None:
        await template_service.get_template_or_404(db, values["template_id"])
    for field, value in values.items():
        setattr(config, field, value)
    await db.commit()
    await db.refresh(config)
    return config


async def seed_default_configs(db: AsyncSession) -> int:
    """Insert the default triggers when no configuration exists yet."""
    existing = (await db.execute(select(func.count(AutomationConfig.id)))).scalar_one()
    if existing:
        return 0
    for trigger_name, delay_days in DEFAULT_CONFIGS:
        db.add(AutomationConfig(trigger_name=trigger_name, delay_days=delay_days, enabled=True))
    await db.commit()
    return len(DEFAULT_CONFIGS)


def _rate_limited(prospect: Prospect, now) -> bool:
    return prospect.last_auto_email_at is not None and prospect.last_auto_email_at > now - RATE_LIMIT


async def _send_automated(prospect: Prospect, subject_line: str, body: str) -> Dict[str, Any]:
    fields = template_service.merge_data(prospect)
    return await mailer.send_email(
        to=prospect.email,
        subject=mailer.render_merge_tags(subject_line, fields),
        html=mailer.render_merge_tags(body, fields),
    )


async def _follow_up_steps(db: AsyncSession) -> List[Dict[str, Any]]:
    """Enabled follow-up steps with a template, shortest delay first."""
    result = await db.execute(
        select(AutomationConfig, CrmTemplate)
        .join(CrmTemplate, CrmTemplate.id == AutomationConfig.template_id)
        .where(
            AutomationConfig.trigger_name.startswith(FOLLOW_UP_PREFIX),
            AutomationConfig.enabled.is_(True),
        )
    )
    steps = [
        {
            "delay_days": config.delay_days or 0,
            "template_id": template.id,
            "name": template.name,
            "subject_line": template.subject_line,
            "body": template.body,
        }
        for config, template in result.all()
    ]
    steps.sort(key=lambda step: step["delay_days"])
    return steps


async def process_follow_ups(db: AsyncSession, user_id: int) -> Dict[str, Any]:
    """Send each due prospect its next follow-up email.

    A prospect gets at most one automated email per 24 hours. Once every
    configured step has been sent, the prospect moves to nurture.
    """
    sent = 0
    skipped = 0
    errors: List[str] = []

    steps = await _follow_up_steps(db)
    if not steps:
        return {"sent": sent, "skipped": skipped, "errors": errors}

    result = await db.execute(
        select(Prospect.id).where(
            Prospect.contacted.is_(True),
            Prospect.responded.is_(False),
            Prospect.follow_up_paused.is_(False),
            Prospect.pipeline_stage.in_(["contacted", "follow_up"]),
            Prospect.email.is_not(None),
            Prospect.email != "",
        )
    )
    prospect_ids = result.scalars().all()
    now = utcnow()

    for prospect_id in prospect_ids:
        # loaded one at a time: a rollback below expires what the session holds
        prospect = await db.get(Prospect, prospect_id)
        if _rate_limited(prospect, now):
            skipped += 1
            continue

        step = prospect.follow_up_step or 0
        if step >= len(steps):
            prospect.pipeline_stage = "nurture"
            prospect.nurture_date = now + NURTURE_PERIOD
            await db.commit()
            logger.info("Prospect %s finished its follow-ups, moved to nurture", prospect.id)
            skipped += 1
            continue

        follow_up = steps[step]
        last_contact = prospect.last_auto_email_at or prospect.contacted_at
        if last_contact is None or (now - last_contact).days < follow_up["delay_days"]:
            skipped += 1
            continue

        business_name = prospect.business_name
        try:
            delivery = await _send_automated(prospect, follow_up["subject_line"], follow_up["body"])
            if not delivery.get("success"):
                errors.append(f"Failed to send to {business_name}: {delivery.get('error')}")
                continue

            prospect.last_auto_email_at = utcnow()
            prospect.follow_up_step = step + 1
            prospect.pipeline_stage = "follow_up"
            await crm_activity_service.log_activity(
                db,
                prospect.id,
                user_id,
                "auto_follow_up",
                f"Auto follow-up #{step + 1} sent",
                details=f"Template: {follow_up['name']}",
                template_id=follow_up["template_id"],
                is_automated=True,
                commit=False,
            )
            template_service.log_send(db, follow_up["template_id"], prospect.id, user_id, is_automated=True)
            await db.commit()
            sent += 1
        except Exception as e:
            await db.rollback()
            logger.exception("Follow-up failed for prospect %s", business_name)
            errors.append(f"Error processing {business_name}: {e}")

    return {"sent": sent, "skipped": skipped, "errors": errors}


async def process_thank_you(
    db: AsyncSession, prospect_id: int, trigger_name: str, user_id: int
) -> Dict[str, Any]:
    result = await db.execute(
        select(AutomationConfig, CrmTemplate)
        .join(CrmTemplate, CrmTemplate.id == AutomationConfig.template_id)
        .where(AutomationConfig.trigger_name == trigger_name, AutomationConfig.enabled.is_(True))
    )
    row = result.first()
    if row is None:
        return {"sent": False, "error": "No config found or disabled"}
    _, template = row

    result = await db.execute(select(Prospect).where(Prospect.id == prospect_id))
    prospect = result.scalar_one_or_none()
    if prospect is None or not prospect.email:
        return {"sent": False, "error": "Prospect not found or no email"}
    if _rate_limited(prospect, utcnow()):
        return {"sent": False, "error": "Rate limited, already sent today"}

    delivery = await _send_automated(prospect, template.subject_line, template.body)
    if not delivery.get("success"):
        return {"sent": False, "error": delivery.get("error")}

    prospect.last_auto_email_at = utcnow()
    await crm_activity_service.log_activity(
        db,
        prospect.id,
        user_id,
        "auto_thank_you",
        f"Auto thank-you sent ({trigger_name.replace('_', ' ')})",
        details=f"Template: {template.name}",
        template_id=template.id,
        is_automated=True,
        commit=False,
    )
    template_service.log_send(db, template.id, prospect.id, user_id, is_automated=True)
    await db.commit()
    return {"sent": True}


async def run_thank_you(db: AsyncSession, prospect_id: int, stage: str, user_id: int) -> Optional[Dict[str, Any]]:
    """Fire the thank-you for ``stage``, if it has one. Failures are logged only."""
    trigger_name = THANK_YOU_TRIGGERS.get(stage)
    if trigger_name is None:
        return None
    try:
        outcome = await process_thank_you(db, prospect_id, trigger_name, user_id)
    except Exception:
        await db.rollback()
        logger.exception("Auto thank-you failed for prospect %s", prospect_id)
        return None
    if not outcome["sent"]:
        logger.info("Thank-you %s not sent for prospect %s: %s", trigger_name, prospect_id, outcome["error"])
    return outcome
