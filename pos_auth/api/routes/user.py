from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from pos_auth.api.error import raise_for_error
from pos_auth.app.services.authentication import AuthenticatedUser
from pos_auth.app.services.clock import Clock
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth import (
    ResetHistoryResponse,
    ResetTokenReportsUseCase,
    ResetTokenStatsResponse,
)
from pos_auth.app.use_cases.users import (
    ApprovalResponse,
    ApproveUserUseCase,
    BulkApprovalResponse,
    BulkApproveUseCase,
    ChangeRoleResponse,
    ChangeRoleUseCase,
    DeleteUserResponse,
    DeleteUserUseCase,
    ListPendingUsersUseCase,
    ListUsersUseCase,
    PendingUsersResponse,
    UserListResponse,
)
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.depends import (
    authorize,
    get_authorization_engine,
    get_clock,
    get_outbox,
    get_session_registry,
    get_unit_of_work,
    get_user_cache,
)

router = APIRouter(prefix="/users", tags=["User"])

# Finer checks against the target's role happen in the use cases
approvers = authorize("superadmin", "manager")
superadmin_only = authorize("superadmin")


@router.get("", status_code=status.HTTP_200_OK, response_model=UserListResponse)
async def list_users(
    role: Optional[Literal["superadmin", "manager", "cashier"]] = Query(None),
    user_status: Optional[Literal["active", "inactive", "deleted"]] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
):
    """
    Page through the accounts the caller may view

    Managers see cashiers only; the superadmin sees everyone.
    """
    use_case = ListUsersUseCase(uow, authorization)
    result = await use_case.execute(
        current_user.role, role, user_status, search, page, limit
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/pending", status_code=status.HTTP_200_OK, response_model=PendingUsersResponse)
async def list_pending_users(
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
):
    """Accounts waiting for the caller's approval, oldest first"""
    result = await ListPendingUsersUseCase(uow, authorization).execute(current_user.role)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ApprovalRequest(BaseModel):
    approved: bool
    reason: Optional[str] = Field(default=None, max_length=500)


@router.put(
    "/{user_id}/approval", status_code=status.HTTP_200_OK, response_model=ApprovalResponse
)
async def set_approval(
    user_id: UUID,
    request: ApprovalRequest,
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    sessions: SessionRegistry = Depends(get_session_registry),
    cache: UserCache = Depends(get_user_cache),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Approve or reject an account

    Raises:
        - 403 Forbidden: Actor may not approve the target's role
        - 404 Not Found: User not found
        - 409 Conflict: User is deleted
    """
    use_case = ApproveUserUseCase(uow, authorization, sessions, cache, outbox, clock)
    result = await use_case.execute(
        user_id, request.approved, current_user.id, current_user.role, request.reason
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete(
    "/{user_id}", status_code=status.HTTP_200_OK, response_model=DeleteUserResponse
)
async def delete_user(
    user_id: UUID,
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    sessions: SessionRegistry = Depends(get_session_registry),
    cache: UserCache = Depends(get_user_cache),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Soft-delete an account

    Raises:
        - 403 Forbidden: Actor may not manage the target's role
        - 404 Not Found: User not found
        - 409 Conflict: Superadmin target, or already deleted
    """
    use_case = DeleteUserUseCase(uow, authorization, sessions, cache, outbox, clock)
    result = await use_case.execute(user_id, current_user.id, current_user.role)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ChangeRoleRequest(BaseModel):
    role: Literal["manager", "cashier"]


@router.put(
    "/{user_id}/role", status_code=status.HTTP_200_OK, response_model=ChangeRoleResponse
)
async def change_role(
    user_id: UUID,
    request: ChangeRoleRequest,
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    cache: UserCache = Depends(get_user_cache),
    clock: Clock = Depends(get_clock),
):
    use_case = ChangeRoleUseCase(uow, authorization, cache, clock)
    result = await use_case.execute(
        user_id, request.role, current_user.id, current_user.role
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class BulkApprovalRequest(BaseModel):
    user_ids: List[UUID] = Field(..., min_length=1, max_length=100)
    approved: bool
    reason: Optional[str] = Field(default=None, max_length=500)


@router.post(
    "/bulk-approval", status_code=status.HTTP_200_OK, response_model=BulkApprovalResponse
)
async def bulk_approval(
    request: BulkApprovalRequest,
    current_user: AuthenticatedUser = Depends(approvers),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    sessions: SessionRegistry = Depends(get_session_registry),
    cache: UserCache = Depends(get_user_cache),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Approve or reject several accounts at once

    Accounts the caller may not decide on are reported under ``failed``.
    """
    approve_user = ApproveUserUseCase(uow, authorization, sessions, cache, outbox, clock)
    result = await BulkApproveUseCase(approve_user).execute(
        request.user_ids,
        request.approved,
        current_user.id,
        current_user.role,
        request.reason,
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/reset-tokens/stats",
    status_code=status.HTTP_200_OK,
    response_model=ResetTokenStatsResponse,
)
async def reset_token_stats(
    current_user: AuthenticatedUser = Depends(superadmin_only),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    result = await ResetTokenReportsUseCase(uow, clock).token_stats()

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{user_id}/reset-history",
    status_code=status.HTTP_200_OK,
    response_model=ResetHistoryResponse,
)
async def reset_history(
    user_id: UUID,
    limit: int = Query(10, ge=1, le=50),
    current_user: AuthenticatedUser = Depends(superadmin_only),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    """
    Recent password reset requests of one account

    Raises:
        - 404 Not Found: User not found
    """
    result = await ResetTokenReportsUseCase(uow, clock).user_history(user_id, limit)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
