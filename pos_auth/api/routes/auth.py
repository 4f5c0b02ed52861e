from datetime import timedelta
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from config import ApplicationConfig
from pos_auth.api.error import raise_for_error
from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.authentication import AuthenticatedUser
from pos_auth.app.services.clock import Clock
from pos_auth.app.services.notifications import IEmailSender
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.passwords import MAX_PASSWORD_BYTES, password_too_long
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth import (
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RegisterCashierUseCase,
    RegisterUserCommand,
    RegisterUserUseCase,
    RegistrationResponse,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    SetupSuperadminUseCase,
    UserInfo,
    VerifyResetTokenResponse,
    VerifyResetTokenUseCase,
)
from pos_auth.app.use_cases.users import ProfileUseCase, UpdateProfileCommand
from pos_auth.domain.entities import DeviceInfo, UserRole
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.depends import (
    authenticate,
    authorize,
    get_authorization_engine,
    get_clock,
    get_email_sender,
    get_outbox,
    get_session_registry,
    get_token_service,
    get_unit_of_work,
    get_user_cache,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def device_info_from(request: Request, platform: Optional[str] = None) -> DeviceInfo:
    return DeviceInfo(
        user_agent=request.headers.get("user-agent"),
        ip=request.client.host if request.client else None,
        platform=platform,
    )


def _within_bcrypt_limit(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return value


class RegisterRequest(BaseModel):
    """
    Registration HTTP request payload

    Validates incoming HTTP request before converting to RegisterUserCommand.
    """

    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=ApplicationConfig.PASSWORD_MIN_LENGTH)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _within_bcrypt_limit(value)

    def to_command(self, role: str = UserRole.cashier.value) -> RegisterUserCommand:
        return RegisterUserCommand(
            username=self.username,
            email=self.email,
            password=self.password,
            first_name=self.first_name,
            last_name=self.last_name,
            role=role,
        )


class AdminRegisterRequest(RegisterRequest):
    role: Literal["superadmin", "manager", "cashier"] = "cashier"


@router.post(
    "/setup", status_code=status.HTTP_201_CREATED, response_model=RegistrationResponse
)
async def setup_superadmin(
    request: RegisterRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    """
    First-run setup: creates the single superadmin.

    Raises:
        - 409 Conflict: A superadmin already exists, or username/email taken
    """
    use_case = SetupSuperadminUseCase(uow, clock)
    result = await use_case.execute(request.to_command(UserRole.superadmin.value))

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/register-cashier",
    status_code=status.HTTP_201_CREATED,
    response_model=RegistrationResponse,
)
async def register_cashier(
    request: RegisterRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Public cashier self-registration. The account waits for approval.

    Raises:
        - 409 Conflict: Username or email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    use_case = RegisterCashierUseCase(uow, outbox, clock)
    result = await use_case.execute(request.to_command())

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegistrationResponse
)
async def register_user(
    request: AdminRegisterRequest,
    current_user: AuthenticatedUser = Depends(authorize("superadmin", "manager")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: AuthorizationEngine = Depends(get_authorization_engine),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Account creation by a manager or superadmin.

    Raises:
        - 403 Forbidden: Actor may not create the requested role
        - 409 Conflict: Duplicate user, or a second superadmin
    """
    use_case = RegisterUserUseCase(uow, authorization, outbox, clock)
    result = await use_case.execute(
        request.to_command(request.role), current_user.id, current_user.role
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    identifier accepts a username or an email address.
    """

    identifier: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)
    login_mode: Optional[Literal["admin", "cashier"]] = None
    platform: Optional[str] = Field(default=None, max_length=100)


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    sessions: SessionRegistry = Depends(get_session_registry),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    User Login

    Signs in from a new device; any earlier session of the user is ended.

    Raises:
        - 401 Unauthorized: Invalid credentials or account pending approval
        - 403 Forbidden: Role does not match the login mode
    """
    use_case = LoginUseCase(uow, token_service, sessions, outbox, clock)
    result = await use_case.execute(
        request.identifier,
        request.password,
        device_info_from(http_request, request.platform),
        request.login_mode,
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    """
    Refresh JWT Token

    Raises:
        - 401 Unauthorized: Invalid/expired token, inactive session or account
    """
    use_case = RefreshTokenUseCase(uow, token_service, sessions)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    current_user: AuthenticatedUser = Depends(authenticate),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    result = LogoutUseCase(sessions).logout_user(current_user.session_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/logout-all", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout_all(
    current_user: AuthenticatedUser = Depends(authenticate),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    result = LogoutUseCase(sessions).logout_all_devices(current_user.id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class MeResponse(BaseModel):
    user: UserInfo
    session_id: str


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def me(current_user: AuthenticatedUser = Depends(authenticate)):
    return MeResponse(user=current_user.user, session_id=current_user.session_id)


@router.get("/profile", status_code=status.HTTP_200_OK, response_model=UserInfo)
async def get_profile(
    current_user: AuthenticatedUser = Depends(authenticate),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: UserCache = Depends(get_user_cache),
):
    result = await ProfileUseCase(uow, cache).get_profile(current_user.id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class UpdateProfileRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None


@router.put("/profile", status_code=status.HTTP_200_OK, response_model=UserInfo)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: AuthenticatedUser = Depends(authenticate),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: UserCache = Depends(get_user_cache),
    clock: Clock = Depends(get_clock),
):
    """
    Raises:
        - 409 Conflict: Email belongs to another account
    """
    use_case = ProfileUseCase(uow, cache, clock)
    result = await use_case.update_profile(
        current_user.id, UpdateProfileCommand(**request.model_dump())
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)

    @field_validator("new_password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _within_bcrypt_limit(value)


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=ChangePasswordResponse,
)
async def change_password(
    request: ChangePasswordRequest,
    current_user: AuthenticatedUser = Depends(authenticate),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    """
    Raises:
        - 400 Bad Request: Wrong current password, too short or unchanged password
    """
    use_case = ChangePasswordUseCase(uow, ApplicationConfig.PASSWORD_MIN_LENGTH, clock)
    result = await use_case.execute(
        current_user.id, request.current_password, request.new_password
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")


@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def forgot_password(
    request: ForgotPasswordRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    clock: Clock = Depends(get_clock),
):
    """
    Request Password Reset

    Same response whether or not the email exists.

    Raises:
        - 429 Too Many Requests: A link was sent within the rate-limit window
        - 502 Bad Gateway: The reset email could not be sent
    """
    use_case = RequestPasswordResetUseCase(
        uow,
        email_sender,
        client_url=ApplicationConfig.CLIENT_URL,
        store_name=ApplicationConfig.STORE_NAME,
        token_ttl=timedelta(minutes=ApplicationConfig.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES),
        rate_limit_minutes=ApplicationConfig.PASSWORD_RESET_RATE_LIMIT_MINUTES,
        clock=clock,
    )
    device = device_info_from(http_request)
    result = await use_case.execute(request.email, device.ip, device.user_agent)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/reset-password/{token}",
    status_code=status.HTTP_200_OK,
    response_model=VerifyResetTokenResponse,
)
async def verify_reset_token(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
):
    result = await VerifyResetTokenUseCase(uow, clock).execute(token)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _within_bcrypt_limit(value)


@router.post(
    "/reset-password/{token}",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def reset_password(
    token: str,
    request: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionRegistry = Depends(get_session_registry),
    cache: UserCache = Depends(get_user_cache),
    outbox: Outbox = Depends(get_outbox),
    clock: Clock = Depends(get_clock),
):
    """
    Confirm Password Reset

    Every session of the user ends; clients are told over the real-time channel.

    Raises:
        - 400 Bad Request: Invalid/expired token, too short or unchanged password
    """
    use_case = ConfirmPasswordResetUseCase(
        uow,
        sessions,
        cache,
        outbox,
        min_password_length=ApplicationConfig.PASSWORD_MIN_LENGTH,
        clock=clock,
    )
    result = await use_case.execute(token, request.password)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
