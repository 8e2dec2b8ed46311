import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core import mailer
from coastboard.core.auth import SessionUser
from coastboard.core.clock import days_ago
from coastboard.core.database import utcnow
from coastboard.core.errors import CoastboardError, DeliveryFailed, NotFound
from coastboard.models.template import CrmTemplate, TemplateSend
from coastboard.models.user import User
from coastboard.schemas.template import SendStatusUpdate, SendTemplateEmail, TemplateCreate, TemplateUpdate

from . import crm_activity_service
from .prospect_service import get_prospect_or_404
from .utils import column_values

logger = logging.getLogger(__name__)

DEFAULT_SENDER_NAME = "The Coast Team"


async def get_template_or_404(db: AsyncSession, template_id: int) -> CrmTemplate:
    result = await db.execute(select(CrmTemplate).where(CrmTemplate.id == template_id))
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFound("Template not found")
    return template


async def create_template(db: AsyncSession, caller: SessionUser, data: TemplateCreate) -> CrmTemplate:
    template = CrmTemplate(**column_values(data), created_by=caller.id)
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return template


async def update_template(db: AsyncSession, template_id: int, data: TemplateUpdate) -> CrmTemplate:
    template = await get_template_or_404(db, template_id)
    for field, value in column_values(data, exclude_unset=True).items():
        setattr(template, field, value)
    await db.commit()
    await db.refresh(template)
    return template


async def delete_template(db: AsyncSession, template_id: int) -> None:
    template = await get_template_or_404(db, template_id)
    await db.delete(template)
    await db.commit()


async def get_templates(
    db: AsyncSession,
    category: Optional[str] = None,
    is_auto_template: Optional[bool] = None,
    target_industry: Optional[str] = None,
) -> List[CrmTemplate]:
    query = select(CrmTemplate)
    if category:
        query = query.where(CrmTemplate.category == category)
    if is_auto_template is not None:
        query = query.where(CrmTemplate.is_auto_template.is_(is_auto_template))
    if target_industry:
        query = query.where(CrmTemplate.target_industry == target_industry)
    result = await db.execute(query.order_by(CrmTemplate.updated_at.desc(), CrmTemplate.id.desc()))
    return list(result.scalars().all())


def merge_data(prospect, assigned_to_name: Optional[str] = None) -> Dict[str, Optional[str]]:
    return {
        "owner_name": prospect.owner_name,
        "business_name": prospect.business_name,
        "category": prospect.category,
        "assigned_to_name": assigned_to_name or DEFAULT_SENDER_NAME,
    }


def log_send(
    db: AsyncSession, template_id: int, prospect_id: int, sent_by: int, is_automated: bool
) -> TemplateSend:
    send = TemplateSend(
        template_id=template_id,
        prospect_id=prospect_id,
        sent_by=sent_by,
        is_automated=is_automated,
        status="sent",
    )
    db.add(send)
    return send


async def send_template_email(
    db: AsyncSession, caller: SessionUser, data: SendTemplateEmail
) -> Dict[str, Any]:
    template = await get_template_or_404(db, data.template_id)
    prospect = await get_prospect_or_404(db, data.prospect_id)
    if not prospect.email:
        raise CoastboardError("Prospect has no email address")

    result = await db.execute(select(User.name).where(User.id == prospect.assigned_to))
    fields = merge_data(prospect, result.scalar_one_or_none())
    subject = mailer.render_merge_tags(data.custom_subject or template.subject_line, fields)
    html = mailer.render_merge_tags(data.custom_body or template.body, fields)

    sent = await mailer.send_email(to=prospect.email, subject=subject, html=html)
    if not sent.get("success"):
        raise DeliveryFailed(sent.get("error"))

    send = log_send(db, template.id, prospect.id, caller.id, is_automated=False)
    await crm_activity_service.log_activity(
        db,
        prospect.id,
        caller.id,
        "email_sent",
        f"Email sent: {subject}",
        details=f"Template: {template.name}",
        template_id=template.id,
    )
    await db.refresh(send)
    return {"send_id": send.id, "subject": subject}


async def update_send_status(db: AsyncSession, send_id: int, data: SendStatusUpdate) -> TemplateSend:
    result = await db.execute(select(TemplateSend).where(TemplateSend.id == send_id))
    send = result.scalar_one_or_none()
    if send is None:
        raise NotFound("Send record not found")

    send.status = data.status.value
    if data.status.value == "replied":
        send.replied_at = utcnow()
        if data.reply_sentiment:
            send.reply_sentiment = data.reply_sentiment.value
    if data.notes is not None:
        send.notes = data.notes
    await db.commit()
    await db.refresh(send)
    return send


def _rate(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0


async def get_template_performance_stats(db: AsyncSession) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(TemplateSend, CrmTemplate.name).join(CrmTemplate, CrmTemplate.id == TemplateSend.template_id)
    )
    grouped: Dict[int, Dict[str, Any]] = {}
    for send, name in result.all():
        stats = grouped.setdefault(
            send.template_id,
            {
                "template_id": send.template_id,
                "name": name,
                "total_sends": 0,
                "manual_sends": 0,
                "auto_sends": 0,
                "reply_count": 0,
                "positive_replies": 0,
                "last_used": None,
            },
        )
        stats["total_sends"] += 1
        stats["auto_sends" if send.is_automated else "manual_sends"] += 1
        if send.status == "replied":
            stats["reply_count"] += 1
        if send.reply_sentiment == "positive":
            stats["positive_replies"] += 1
        if stats["last_used"] is None or send.sent_at > stats["last_used"]:
            stats["last_used"] = send.sent_at

    performance = []
    for stats in grouped.values():
        positive = stats.pop("positive_replies")
        stats["reply_rate"] = _rate(stats["reply_count"], stats["total_sends"])
        stats["positive_reply_rate"] = _rate(positive, stats["reply_count"])
        performance.append(stats)
    performance.sort(key=lambda stats: stats["reply_rate"], reverse=True)
    return performance


async def _window_stats(db: AsyncSession, since) -> Dict[str, int]:
    result = await db.execute(select(TemplateSend).where(TemplateSend.sent_at >= since))
    sends = result.scalars().all()
    return {
        "total": len(sends),
        "manual": sum(1 for send in sends if not send.is_automated),
        "auto": sum(1 for send in sends if send.is_automated),
        "replies": sum(1 for send in sends if send.status == "replied"),
    }


async def get_overall_outreach_stats(db: AsyncSession) -> Dict[str, Any]:
    week = await _window_stats(db, days_ago(7))
    month = await _window_stats(db, days_ago(30))
    return {
        "this_week": week,
        "this_month": month,
        "weekly_reply_rate": f"{_rate(week['replies'], week['total']):.1f}" if week["total"] else "0",
        "monthly_reply_rate": f"{_rate(month['replies'], month['total']):.1f}" if month["total"] else "0",
    }
