from fastapi import APIRouter
import asyncio
from app.api.health import (
    check_database,
    check_redis,
    check_disk,
    check_memory
)
from app.core.config import Config

health_router = APIRouter()
@health_router.get("/")
async def health_check():
    db_status, redis_status = await asyncio.gather(
        check_database(),
        check_redis()
    )

    # payments cannot be recorded without the database; redis is advisory
    status = "ok"
    if db_status == "down":
        status = "down"
    elif redis_status == "down":
        status = "degraded"

    return {
        "status": status,
        "environment": Config.APP_ENV,
        "checks": {
            "database": db_status,
            "redis": redis_status,
            "disk": check_disk(),
            "memory": check_memory()
        }
    }
