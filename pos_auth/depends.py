from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import BackgroundTasks, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from pos_auth.adapter.services.connection_manager import ConnectionManager
from pos_auth.adapter.services.memory_store import InMemoryKeyValueStore
from pos_auth.adapter.services.notification_handlers import NotificationHandlers
from pos_auth.adapter.services.smtp_email_sender import SmtpEmailSender
from pos_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from pos_auth.api.error import ClientError
from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.authentication import AuthenticatedUser, AuthenticationService
from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.notifications import IEmailSender, IRealtimeNotifier
from pos_auth.app.services.outbox import EventDispatcher, Outbox
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.domain import errors
from pos_auth.domain.entities import UserRole
from pos_auth.domain.permissions import DEFAULT_PERMISSION_TABLE, AuthorizationEngine

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

# Process-wide state
session_registry = SessionRegistry(
    InMemoryKeyValueStore(),
    session_ttl=timedelta(days=ApplicationConfig.SESSION_EXPIRE_DAYS),
)
user_cache = UserCache(
    InMemoryKeyValueStore(),
    ttl=timedelta(seconds=ApplicationConfig.USER_CACHE_TTL_SECONDS),
    max_entries=ApplicationConfig.USER_CACHE_MAX_ENTRIES,
)
connection_manager = ConnectionManager()
authorization_engine = AuthorizationEngine(DEFAULT_PERMISSION_TABLE)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_token_service() -> TokenService:
    """Built once; raises ConfigurationError when signing secrets are missing"""
    return TokenService.from_config(ApplicationConfig)


def get_session_registry() -> SessionRegistry:
    return session_registry


def get_user_cache() -> UserCache:
    return user_cache


def get_realtime_notifier() -> IRealtimeNotifier:
    return connection_manager


def get_connection_manager() -> ConnectionManager:
    return connection_manager


@lru_cache
def get_email_sender() -> IEmailSender:
    return SmtpEmailSender.from_config(ApplicationConfig)


def get_authorization_engine() -> AuthorizationEngine:
    return authorization_engine


def get_clock() -> Clock:
    return utcnow


def get_event_dispatcher(
    notifier: IRealtimeNotifier = Depends(get_realtime_notifier),
    email_sender: IEmailSender = Depends(get_email_sender),
) -> EventDispatcher:
    dispatcher = EventDispatcher()
    NotificationHandlers(
        notifier,
        email_sender,
        store_name=ApplicationConfig.STORE_NAME,
        client_url=ApplicationConfig.CLIENT_URL,
    ).register(dispatcher)
    return dispatcher


def get_outbox(
    background_tasks: BackgroundTasks,
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> Outbox:
    """Per-request outbox; whatever is still pending is delivered after the response"""
    outbox = Outbox(dispatcher)
    background_tasks.add_task(outbox.flush)
    return outbox


def get_authentication_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    sessions: SessionRegistry = Depends(get_session_registry),
    cache: UserCache = Depends(get_user_cache),
) -> AuthenticationService:
    return AuthenticationService(uow, token_service, sessions, cache)


async def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    service: AuthenticationService = Depends(get_authentication_service),
) -> AuthenticatedUser:
    """
    Dependency to authenticate the bearer token of a request.

    Returns:
        AuthenticatedUser, also stored on request.state.user

    Raises:
        ClientError: 401 for missing/invalid tokens and unusable accounts
    """
    token = credentials.credentials if credentials else None
    result = await service.authenticate(token)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)

    request.state.user = result.value
    return result.value


def authorize(*roles):
    """Dependency factory: 403 unless the authenticated role is one of ``roles``"""
    allowed = {UserRole(role).value for role in roles}

    async def dependency(
        current_user: AuthenticatedUser = Depends(authenticate),
    ) -> AuthenticatedUser:
        if current_user.role not in allowed:
            raise ClientError(
                errors.INSUFFICIENT_PERMISSIONS, status_code=status.HTTP_403_FORBIDDEN
            )
        return current_user

    return dependency


def invalidate_user_cache(user_id) -> None:
    user_cache.invalidate(user_id)


def clear_user_cache() -> None:
    user_cache.clear()
