from datetime import datetime, timedelta, timezone

from .config import settings
from .database import utcnow


def _offset() -> timedelta:
    return timedelta(hours=settings.TIMEZONE_OFFSET_HOURS)


def utc_day_start(moment: datetime | None = None) -> datetime:
    moment = moment or utcnow()
    return moment.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def local_today_start(moment: datetime | None = None) -> datetime:
    """Midnight of the local (WAT) day containing ``moment``, as a UTC datetime."""
    local = (moment or utcnow()).astimezone(timezone.utc) + _offset()
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - _offset()


def local_tomorrow_start(moment: datetime | None = None) -> datetime:
    return local_today_start(moment) + timedelta(days=1)


def days_ago(days: int, moment: datetime | None = None) -> datetime:
    return (moment or utcnow()) - timedelta(days=days)


def local_date_key(moment: datetime) -> str:
    return (moment.astimezone(timezone.utc) + _offset()).date().isoformat()
