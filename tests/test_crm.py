# tests/test_crm.py
from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from coastboard.actions import crm_actions
from coastboard.core.database import utcnow
from coastboard.models.automation import AutomationConfig
from coastboard.models.crm_activity import CrmActivity
from coastboard.models.prospect import PipelineHistory, Prospect
from coastboard.models.template import CrmTemplate, TemplateSend
from coastboard.services import automation_service


@pytest.fixture()
def make_prospect(db, admin):
    async def factory(**overrides) -> Prospect:
        values = {
            "business_name": "Kemi Bakes",
            "owner_name": "Kemi",
            "email": "kemi@example.com",
            "market": "Lagos",
            "category": "Bakery",
            "inputted_by": admin.id,
            "assigned_to": admin.id,
            "pipeline_stage": "new_lead",
            "tags": [],
        }
        values.update(overrides)
        prospect = Prospect(**values)
        db.add(prospect)
        await db.commit()
        await db.refresh(prospect)
        return prospect

    return factory


@pytest.fixture()
def make_template(db, admin):
    async def factory(**overrides) -> CrmTemplate:
        values = {
            "name": "Intro",
            "subject_line": "Hello {{owner_name}}",
            "body": "<p>{{business_name}} deserves a better website. - {{assigned_to_name}}</p>",
            "category": "Cold Outreach",
            "tags": [],
            "created_by": admin.id,
        }
        values.update(overrides)
        template = CrmTemplate(**values)
        db.add(template)
        await db.commit()
        await db.refresh(template)
        return template

    return factory


async def _all(db, model, *criteria):
    return (await db.execute(select(model).where(*criteria))).scalars().all()


# Prospects

async def test_prospect_actions_are_admin_only(db, member):
    result = await crm_actions.create_prospect(db, member, {"business_name": "Kemi Bakes"})

    assert result == {"success": False, "error": "Forbidden: Admin access required"}


async def test_create_prospect_defaults_assignment_to_creator(db, admin):
    result = await crm_actions.create_prospect(db, admin, {"business_name": "Kemi Bakes", "market": "Lagos"})

    assert result["success"] is True
    assert result["data"]["assigned_to"] == admin.id
    assert result["data"]["pipeline_stage"] == "new_lead"


async def test_import_skips_known_business_in_same_market(db, admin, make_prospect):
    await make_prospect()
    rows = [
        {"business_name": "Kemi Bakes", "market": "Lagos"},
        {"business_name": "Kemi Bakes", "market": "Abuja"},
        {"business_name": "Tunde Tailors", "market": "Lagos", "weakness_score": 9},
    ]

    result = await crm_actions.import_prospects(db, admin, rows)

    data = result["data"]
    assert data["imported"] == 1
    assert data["skipped"] == 1
    assert len(data["errors"]) == 1
    assert data["errors"][0].startswith("Failed to import Tunde Tailors")
    imported = await _all(db, Prospect, Prospect.market == "Abuja")
    assert imported[0].lead_source == "CSV Import"


async def test_prospect_stats_conversion_rate(db, admin, make_prospect):
    await make_prospect(business_name="A", contacted=True, deal_closed=True, pipeline_stage="won")
    await make_prospect(business_name="B", contacted=True, pipeline_stage="contacted")
    await make_prospect(business_name="C", contacted=True, pipeline_stage="contacted")

    result = await crm_actions.get_prospect_stats(db, admin)

    data = result["data"]
    assert data["total"] == 3
    assert data["deals_won"] == 1
    assert data["conversion_rate"] == "33.3"
    assert data["stages"] == {"won": 1, "contacted": 2}


async def test_bulk_update_merges_tags(db, admin, make_prospect):
    first = await make_prospect(business_name="A", tags=["hot"])
    second = await make_prospect(business_name="B")

    result = await crm_actions.bulk_update_prospects(
        db, admin, {"ids": [first.id, second.id], "tags": ["hot", "q3"], "follow_up_paused": True}
    )

    assert result == {"success": True, "data": {"modified_count": 2}}
    await db.refresh(first)
    await db.refresh(second)
    assert first.tags == ["hot", "q3"]
    assert second.tags == ["hot", "q3"]
    assert first.follow_up_paused is True


# Pipeline

async def test_stage_change_sets_flags_and_history(db, admin, make_prospect, sent_emails):
    prospect = await make_prospect()

    result = await crm_actions.change_stage(db, admin, prospect.id, {"stage": "contacted", "notes": "Called"})

    assert result["success"] is True
    assert result["data"]["pipeline_stage"] == "contacted"
    assert result["data"]["contacted"] is True
    assert result["data"]["contacted_at"] is not None
    history = await _all(db, PipelineHistory)
    assert [(h.from_stage, h.to_stage) for h in history] == [("new_lead", "contacted")]
    activity = (await _all(db, CrmActivity))[0]
    assert activity.subject == "Stage changed from New Lead to Contacted"
    # no thank-you trigger for contacted
    assert sent_emails == []


async def test_same_stage_is_a_no_op(db, admin, make_prospect):
    prospect = await make_prospect(pipeline_stage="contacted")

    await crm_actions.change_stage(db, admin, prospect.id, {"stage": "contacted"})

    assert await _all(db, PipelineHistory) == []


async def test_losing_records_reason(db, admin, make_prospect):
    prospect = await make_prospect(pipeline_stage="proposal_sent")

    result = await crm_actions.change_stage(db, admin, prospect.id, {"stage": "lost", "loss_reason": "budget"})

    assert result["data"]["loss_reason"] == "budget"


async def test_won_stage_sends_thank_you(db, admin, make_prospect, make_template, sent_emails):
    template = await make_template(name="Thanks", subject_line="Thank you {{owner_name}}")
    db.add(AutomationConfig(trigger_name="thank_you_won", enabled=True, template_id=template.id, delay_days=0))
    await db.commit()
    prospect = await make_prospect(pipeline_stage="negotiation")

    result = await crm_actions.change_stage(db, admin, prospect.id, {"stage": "won"})

    assert result["data"]["deal_closed"] is True
    assert [e["subject"] for e in sent_emails] == ["Thank you Kemi"]
    sends = await _all(db, TemplateSend)
    assert len(sends) == 1 and sends[0].is_automated is True
    assert len(await _all(db, CrmActivity, CrmActivity.activity_type == "auto_thank_you")) == 1


async def test_failed_thank_you_does_not_fail_stage_change(db, admin, make_prospect, make_template, failing_mailer):
    template = await make_template(name="Thanks")
    db.add(AutomationConfig(trigger_name="thank_you_responded", enabled=True, template_id=template.id))
    await db.commit()
    prospect = await make_prospect(pipeline_stage="follow_up")

    result = await crm_actions.change_stage(db, admin, prospect.id, {"stage": "responded"})

    assert result["success"] is True
    assert result["data"]["responded"] is True
    assert await _all(db, TemplateSend) == []


async def test_stale_deals_are_flagged(db, admin, make_prospect):
    now = utcnow()
    await make_prospect(business_name="Old", pipeline_stage="proposal_sent", updated_at=now - timedelta(days=20))
    await make_prospect(business_name="Aging", pipeline_stage="discovery", updated_at=now - timedelta(days=9))
    await make_prospect(business_name="Closed", pipeline_stage="won", updated_at=now - timedelta(days=20))

    result = await crm_actions.get_stale_deal_alerts(db, admin)

    assert [(a["business_name"], a["severity"]) for a in result["data"]] == [("Old", "red"), ("Aging", "orange")]


# Templates

async def test_send_template_email_renders_merge_tags(db, admin, make_prospect, make_template, sent_emails):
    prospect = await make_prospect(owner_name=None)
    template = await make_template()

    result = await crm_actions.send_template_email(
        db, admin, {"template_id": template.id, "prospect_id": prospect.id}
    )

    assert result["success"] is True
    assert sent_emails[0]["subject"] == "Hello there"
    assert sent_emails[0]["html"] == "<p>Kemi Bakes deserves a better website. - Ada Admin</p>"
    assert len(await _all(db, TemplateSend)) == 1
    assert len(await _all(db, CrmActivity, CrmActivity.activity_type == "email_sent")) == 1


async def test_send_requires_prospect_email(db, admin, make_prospect, make_template, sent_emails):
    prospect = await make_prospect(email=None)
    template = await make_template()

    result = await crm_actions.send_template_email(
        db, admin, {"template_id": template.id, "prospect_id": prospect.id}
    )

    assert result == {"success": False, "error": "Prospect has no email address"}
    assert sent_emails == []


async def test_failed_delivery_is_not_logged(db, admin, make_prospect, make_template, failing_mailer):
    prospect = await make_prospect()
    template = await make_template()

    result = await crm_actions.send_template_email(
        db, admin, {"template_id": template.id, "prospect_id": prospect.id}
    )

    assert result == {"success": False, "error": "Provider rejected the message"}
    assert await _all(db, TemplateSend) == []


async def test_reply_updates_template_stats(db, admin, make_prospect, make_template, sent_emails):
    prospect = await make_prospect()
    template = await make_template()
    sent = await crm_actions.send_template_email(db, admin, {"template_id": template.id, "prospect_id": prospect.id})

    await crm_actions.update_send_status(
        db, admin, sent["data"]["send_id"], {"status": "replied", "reply_sentiment": "positive"}
    )
    stats = await crm_actions.get_template_performance_stats(db, admin)

    entry = stats["data"][0]
    assert entry["total_sends"] == 1
    assert entry["reply_rate"] == 100
    assert entry["positive_reply_rate"] == 100


# Automation

async def _follow_up_config(db, template, delay_days=3):
    db.add(
        AutomationConfig(
            trigger_name=f"follow_up_day_{delay_days}",
            enabled=True,
            template_id=template.id,
            delay_days=delay_days,
        )
    )
    await db.commit()


async def test_seed_default_configs_only_once(db, admin):
    first = await crm_actions.seed_automation_configs(db, admin)
    second = await crm_actions.seed_automation_configs(db, admin)

    assert first["data"] == {"created": len(automation_service.DEFAULT_CONFIGS)}
    assert second["data"] == {"created": 0}


async def test_due_follow_up_is_sent_once_per_day(db, admin, make_prospect, make_template, sent_emails):
    template = await make_template(subject_line="Following up, {{owner_name}}")
    await _follow_up_config(db, template)
    prospect = await make_prospect(
        pipeline_stage="contacted",
        contacted=True,
        contacted_at=utcnow() - timedelta(days=4),
    )

    first = await automation_service.process_follow_ups(db, admin.id)
    second = await automation_service.process_follow_ups(db, admin.id)

    assert first == {"sent": 1, "skipped": 0, "errors": []}
    assert second == {"sent": 0, "skipped": 1, "errors": []}
    assert len(sent_emails) == 1
    await db.refresh(prospect)
    assert prospect.follow_up_step == 1
    assert prospect.pipeline_stage == "follow_up"
    assert len(await _all(db, CrmActivity, CrmActivity.activity_type == "auto_follow_up")) == 1


async def test_follow_up_waits_for_delay(db, admin, make_prospect, make_template, sent_emails):
    template = await make_template()
    await _follow_up_config(db, template, delay_days=7)
    await make_prospect(pipeline_stage="contacted", contacted=True, contacted_at=utcnow() - timedelta(days=2))

    result = await automation_service.process_follow_ups(db, admin.id)

    assert result["sent"] == 0
    assert sent_emails == []


async def test_exhausted_sequence_moves_to_nurture(db, admin, make_prospect, make_template, sent_emails):
    template = await make_template()
    await _follow_up_config(db, template)
    prospect = await make_prospect(
        pipeline_stage="follow_up",
        contacted=True,
        contacted_at=utcnow() - timedelta(days=10),
        last_auto_email_at=utcnow() - timedelta(days=5),
        follow_up_step=1,
    )

    await automation_service.process_follow_ups(db, admin.id)

    await db.refresh(prospect)
    assert prospect.pipeline_stage == "nurture"
    assert prospect.nurture_date > utcnow() + timedelta(days=29)
    assert sent_emails == []


async def test_paused_prospects_are_left_alone(db, admin, make_prospect, make_template, sent_emails):
    template = await make_template()
    await _follow_up_config(db, template)
    await make_prospect(
        pipeline_stage="contacted",
        contacted=True,
        contacted_at=utcnow() - timedelta(days=4),
        follow_up_paused=True,
    )

    result = await automation_service.process_follow_ups(db, admin.id)

    assert result == {"sent": 0, "skipped": 0, "errors": []}
