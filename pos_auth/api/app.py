from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def _code(error) -> str:
    return getattr(error.code, "value", error.code)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": _code(exc.base_error), "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": _code(exc.base_error), "message": "Internal server error"}
    logger.error(f"Server error: {_code(exc.base_error)} {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def build_scheduler(ApplicationConfig):
    from pos_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
    from pos_auth.app.services.maintenance import MaintenanceScheduler
    from pos_auth.app.use_cases.auth import cleanup_expired_tokens
    from pos_auth.depends import AsyncSessionLocal, session_registry

    async def sweep_sessions():
        removed = session_registry.cleanup_expired_sessions()
        stats = session_registry.get_session_stats()
        logger.info(f"Session sweep removed {removed} expired session(s); stats: {stats}")

    async def sweep_reset_tokens():
        async with AsyncSessionLocal() as session:
            await cleanup_expired_tokens(SqlAlchemyUnitOfWork(session))

    scheduler = MaintenanceScheduler()
    scheduler.add_job(
        "session-cleanup",
        ApplicationConfig.SESSION_CLEANUP_INTERVAL_SECONDS,
        sweep_sessions,
    )
    scheduler.add_job(
        "password-reset-cleanup",
        ApplicationConfig.PASSWORD_RESET_CLEANUP_INTERVAL_SECONDS,
        sweep_reset_tokens,
    )
    return scheduler


def create_app(ApplicationConfig) -> FastAPI:
    from pos_auth.depends import engine, get_token_service

    # Fail at boot, not per request, when signing secrets are missing
    get_token_service()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        scheduler = None
        if ApplicationConfig.ENABLE_BACKGROUND_JOBS:
            scheduler = build_scheduler(ApplicationConfig)
            scheduler.start()
        yield
        if scheduler is not None:
            await scheduler.stop()
        await engine.dispose()

    app = FastAPI(title="POS Auth API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from pos_auth.api.routes import auth, health_check, realtime, sessions, user

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, prefix=prefix, tags=["Authentication"])
    app.include_router(user.router, prefix=prefix, tags=["User"])
    app.include_router(sessions.router, prefix=prefix, tags=["Sessions"])
    app.include_router(realtime.router, tags=["Real-time"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
