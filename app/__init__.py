from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.api.router import api_router
from app.core.config import Config
from app.core.exception_handlers import register_exception_handlers
from app.core.middlewares import logger, register_middleware
from app.db.main import init_db


version = "v1"

description = """
Payments and installment plans for the dental clinic: records charges per
appointment, splits them into monthly installments and keeps each payment's
paid amount and status reconciled as installments are collected.
    """

version_prefix =f"/api/{version}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if Config.APP_ENV == "dev":
        await init_db()
    logger.info(f"Dental payments service started env={Config.APP_ENV}")
    yield


app = FastAPI(
    title="dental-clinic-payments-service",
    description=description,
    version=version,
    license_info={"name": "MIT License", "url": "https://opensource.org/license/mit"},
    openapi_url=f"{version_prefix}/openapi.json",
    docs_url=f"{version_prefix}/docs",
    redoc_url=f"{version_prefix}/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)


register_middleware(app)


app.include_router(api_router, prefix=f"{version_prefix}")
