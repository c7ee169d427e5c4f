from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import  AsyncSession
from storefront.common.logging_setup import get_logger
from storefront.common.utils import build_error, json_error, success_response
from storefront.db.dependencies import get_session
from storefront.config.admin_config import admin_config

logger = get_logger("storefront.health")

home_router = APIRouter()


@home_router.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("health.db_unreachable")
        return json_error(build_error("Database unavailable"), status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return success_response({"status": "ok", "service": admin_config.SERVICE_NAME, "env": admin_config.ENV})
