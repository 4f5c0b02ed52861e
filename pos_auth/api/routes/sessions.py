from uuid import UUID

from fastapi import APIRouter, Depends, status

from pos_auth.api.error import raise_for_error
from pos_auth.app.services.authentication import AuthenticatedUser
from pos_auth.app.services.clock import Clock
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.use_cases.users import (
    ListSessionsUseCase,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    SessionStatsResponse,
    UserSessionsResponse,
)
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.depends import (
    authenticate,
    authorize,
    get_authorization_engine,
    get_clock,
    get_session_registry,
    get_unit_of_work,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=UserSessionsResponse)
async def list_my_sessions(
    current_user: AuthenticatedUser = Depends(authenticate),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    """Active sessions of the caller, most recently used first"""
    result = ListSessionsUseCase(sessions).list_user_sessions(
        current_user.id, current_user.session_id
    )
    return result.value


@router.get("/stats", status_code=status.HTTP_200_OK, response_model=SessionStatsResponse)
async def session_stats(
    current_user: AuthenticatedUser = Depends(authorize("superadmin")),
    sessions: SessionRegistry = Depends(get_session_registry),
    clock: Clock = Depends(get_clock),
):
    result = ListSessionsUseCase(sessions, clock).session_stats()
    return result.value


@router.post(
    "/users/{user_id}/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_user_sessions(
    user_id: UUID,
    current_user: AuthenticatedUser = Depends(authenticate),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    """
    Revoke All Sessions of a user

    Authorization:
    - Users can revoke their own sessions
    - Otherwise manage permission on the target's role is required

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: User not found
    """
    use_case = RevokeSessionsUseCase(uow, authorization, sessions)
    result = await use_case.revoke_all_sessions(
        user_id, current_user.id, current_user.role
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value
