import logging
import re
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

MERGE_TAG_DEFAULTS = {
    "owner_name": "there",
    "business_name": "your business",
    "category": "",
    "assigned_to_name": "our team",
}

_MERGE_TAG = re.compile(r"\{\{(\w+)\}\}")


async def send_email(
    to: str, subject: str, html: str, reply_to: Optional[str] = None
) -> Dict[str, Any]:
    """Send one email through the Resend API.

    Never raises; the result says whether the provider accepted the message.
    """
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set, not sending %r to %s", subject, to)
        return {"success": False, "error": "Email is not configured"}

    body: Dict[str, Any] = {
        "from": settings.MAIL_FROM,
        "to": to,
        "subject": subject,
        "html": html,
    }
    if reply_to:
        body["reply_to"] = reply_to

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                RESEND_URL,
                json=body,
                headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            )
    except httpx.HTTPError:
        logger.exception("Failed to send email to %s", to)
        return {"success": False, "error": "Failed to send email"}

    if response.is_error:
        try:
            message = response.json().get("message", response.text)
        except ValueError:
            message = response.text
        logger.error("Resend error %s: %s", response.status_code, message)
        return {"success": False, "error": message}

    return {"success": True, "id": response.json().get("id")}


def render_merge_tags(text: str, data: Mapping[str, Optional[str]]) -> str:
    """Replace {{field}} tags with prospect data, falling back to defaults.

    Unknown tags are left untouched.
    """

    def replace(match):
        field = match.group(1)
        if field not in MERGE_TAG_DEFAULTS:
            return match.group(0)
        return data.get(field) or MERGE_TAG_DEFAULTS[field]

    return _MERGE_TAG.sub(replace, text)
