"""
Main FastAPI Application

Contact Management Platform API Gateway with:
- Tenant interceptor (per-request database routing)
- Tenant administration endpoints
- Contact and category endpoints
- CORS configuration
- Health checks
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from structlog import get_logger

from .. import __version__
from ..auth.api_router import router as auth_router
from ..categories.api_router import router as category_router
from ..config import get_config
from ..contacts.api_router import router as contact_router
from ..exceptions import CMSError, DeprovisioningError, ProvisioningError
from ..logging import configure_logging
from ..shared_services.database_router import DatabaseRouter
from ..shared_services.tenant_middleware import TenantInterceptorMiddleware
from ..tenant_management.api_router import router as tenant_router
from ..tenant_management.db_service import TenantDBService
from ..tenant_management.provisioning import TenantProvisioningService
from ..tenant_management.service import TenantLockRegistry, TenantService

config = get_config()
logger = get_logger()


def _attach_storage(app: FastAPI, mongo_client: AsyncIOMotorClient) -> None:
    app.state.mongo_client = mongo_client
    app.state.database_router = DatabaseRouter(
        mongo_client,
        default_database_name=config.default_database_name,
        tenant_db_prefix=config.tenant_db_prefix,
    )
    app.state.tenant_locks = TenantLockRegistry()


async def initialize_platform(app: FastAPI) -> None:
    """
    Ensure default database indexes and the bootstrap administrator.

    Args:
        app: Application with storage attached
    """
    database_router: DatabaseRouter = app.state.database_router
    tenant_db_service = TenantDBService(database_router.default_database())
    await tenant_db_service.ensure_indexes()

    tenant_service = TenantService(
        tenant_db_service,
        TenantProvisioningService(database_router),
        locks=app.state.tenant_locks,
    )
    await tenant_service.ensure_admin(
        config.admin_username, config.admin_password, config.admin_name
    )


def create_app(mongo_client: Optional[AsyncIOMotorClient] = None) -> FastAPI:
    """
    Build the application.

    Args:
        mongo_client: Optional MongoDB client (created at startup if not provided)

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Handles startup and shutdown events.
        """
        configure_logging(config.log_level)
        logger.info("starting_contact_platform", environment=config.environment.value)

        owns_client = mongo_client is None
        if owns_client:
            _attach_storage(app, AsyncIOMotorClient(config.mongo_db_url))

        await initialize_platform(app)
        logger.info("platform_initialized")

        yield

        logger.info("shutting_down_platform")
        if owns_client:
            app.state.mongo_client.close()
        logger.info("platform_shutdown_complete")

    app = FastAPI(
        title="Contact Management Platform",
        description="Multi-tenant contact and category management with per-tenant databases",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if not config.is_production else None,
        redoc_url="/redoc" if not config.is_production else None,
        openapi_url="/openapi.json" if not config.is_production else None,
    )

    if mongo_client is not None:
        _attach_storage(app, mongo_client)

    # Added first so CORS wraps it and preflight requests skip authentication
    app.add_middleware(TenantInterceptorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_allowed_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Platform"], summary="Health check")
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "environment": config.environment.value,
            "version": __version__,
        }

    @app.get("/ping", tags=["Platform"], summary="Ping endpoint")
    async def ping():
        """Simple ping endpoint."""
        return {"message": "pong"}

    @app.exception_handler(CMSError)
    async def cms_error_handler(request: Request, exc: CMSError):
        """Map domain errors to JSON responses."""
        if isinstance(exc, (ProvisioningError, DeprovisioningError)):
            logger.error(
                "tenant_lifecycle_error",
                path=request.url.path,
                tenant_id=exc.tenant_id,
                error=exc.message,
            )
        else:
            logger.warning(
                "request_failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(status.HTTP_500_INTERNAL_SERVER_ERROR)
    async def server_error_handler(request: Request, exc):
        """Custom 500 handler."""
        logger.error("internal_server_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    app.include_router(auth_router)
    app.include_router(tenant_router)
    app.include_router(contact_router)
    app.include_router(category_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cms_platform.api_gateway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=config.is_local,
        log_level=config.log_level.lower(),
    )
