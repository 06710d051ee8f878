"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, Request, Response, status

from location_api.api.deps import (
    get_app_settings,
    get_authenticator,
    get_session_account,
)
from location_api.api.session_cookie import (
    clear_session_cookie,
    get_request_ip,
    read_session_cookie,
    set_session_cookie,
)
from location_api.config import Settings
from location_api.errors import MissingCredentials, SignUpDisabled
from location_api.schemas.auth import (
    AccountPublic,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SuccessResponse,
)
from location_api.services.authenticator import Authenticator

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-in", response_model=SignInResponse)
@router.post("/sign-in/email", response_model=SignInResponse, include_in_schema=False)
def sign_in(
    payload: SignInRequest,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    authenticator: Authenticator = Depends(get_authenticator),
):
    """Sign in with email and password and receive a session cookie."""
    if not payload.email or not payload.password:
        raise MissingCredentials()

    result = authenticator.sign_in(
        payload.email,
        payload.password,
        ip_address=get_request_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    set_session_cookie(response, result.session_token, settings)
    return SignInResponse(user=result.account)


@router.post("/sign-out", response_model=SuccessResponse)
def sign_out(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    authenticator: Authenticator = Depends(get_authenticator),
):
    """Sign out. Always succeeds, even without a valid session."""
    authenticator.sign_out(read_session_cookie(request, settings))
    clear_session_cookie(response, settings)
    return SuccessResponse()


@router.get("/get-session", response_model=SessionResponse)
def get_session(account: AccountPublic | None = Depends(get_session_account)):
    """Return the signed-in user, or null."""
    return SessionResponse(user=account)


@router.post("/sign-up/email", response_model=SignInResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    settings: Settings = Depends(get_app_settings),
    authenticator: Authenticator = Depends(get_authenticator),
):
    """Create an account. Disabled unless SIGNUP_ENABLED is set."""
    if not settings.signup_enabled:
        raise SignUpDisabled()

    account = authenticator.create_credential(payload.email, payload.password, payload.name)
    return SignInResponse(user=account)
