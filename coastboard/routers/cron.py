import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.config import settings
from coastboard.core.database import get_db
from coastboard.services import maintenance_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def _authorized(secret: Optional[str]) -> bool:
    if not settings.CRON_SECRET or not secret:
        return False
    return secrets.compare_digest(secret, settings.CRON_SECRET)


@router.get("/daily-cleanup")
async def daily_cleanup(
    x_cron_secret: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    if not _authorized(x_cron_secret):
        logger.warning("Rejected daily cleanup call with a bad cron secret")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    results = await maintenance_service.daily_cleanup(db)
    return {"success": True, "data": results}
