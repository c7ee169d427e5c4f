from contextlib import asynccontextmanager
from fastapi import FastAPI
from storefront.api.routers import public_routers,admin_routers
from storefront.common.custom_exceptions import register_all_exceptions
from storefront.common.logging_setup import setup_logging, shutdown_logging
from storefront.middlewares.principal_middleware import PrincipalMiddleware
from storefront.middlewares.request_id_middleware import RequestIdMiddleware
from storefront.db.connection import async_engine
from storefront.api import version_prefix,cur_version
from storefront.config.admin_config import admin_config
from metrics.custom_instrumentator import instrumentator


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    log = setup_logging()
    log.info("app.startup", extra={"env": admin_config.ENV})
    try:
        yield
    finally:
        # requests have stopped being accepted by now
        await async_engine.dispose()
        shutdown_logging()


def create_app():
    app=FastAPI(
        title="Storefront",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)

    if admin_config.ENABLE_ADMIN:
        app.include_router(admin_routers)      # mounts /api/v1/admin

    app.add_middleware(PrincipalMiddleware, skip_paths=[f"{version_prefix}/health", "/metrics", "/docs", "/openapi.json"])
    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    if admin_config.ENABLE_METRICS:
        instrumentator.instrument(app).expose(app, endpoint="/metrics")

    return app

app=create_app()
