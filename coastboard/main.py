import asyncio
import json
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from coastboard.core.database import init_models
from coastboard.core.events import CHANNEL_PREFIX, get_redis
from coastboard.core.logging_setup import setup_logging
from coastboard.core.websocket import manager
from coastboard.routers import (
    admin,
    ai,
    auth,
    boards,
    crm,
    cron,
    notes,
    notifications,
    projects,
    tasks,
    time,
    users,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Coastboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(boards.router)
app.include_router(time.router)
app.include_router(notifications.router)
app.include_router(notes.router)
app.include_router(crm.router)
app.include_router(ai.router)
app.include_router(admin.router)
app.include_router(cron.router)


async def redis_listener():
    """Relay per-user notification events from redis to connected websockets."""
    pubsub = get_redis().pubsub()
    await pubsub.psubscribe(f"{CHANNEL_PREFIX}*")
    try:
        async for message in pubsub.listen():
            if message["type"] != "pmessage":
                continue
            user_id = message["channel"][len(CHANNEL_PREFIX):]
            try:
                data = json.loads(message["data"])
            except ValueError:
                logger.warning("Dropping malformed event on %s", message["channel"])
                continue
            await manager.send_to_user(int(user_id), data)
    except (RedisError, OSError):
        logger.exception("Redis listener stopped")


@app.on_event("startup")
async def startup():
    setup_logging()
    await init_models()
    if get_redis() is not None:
        asyncio.create_task(redis_listener())
    else:
        logger.info("REDIS_URL not set, live notifications disabled")


@app.get("/")
async def root():
    return {"message": "Coastboard API is running"}
