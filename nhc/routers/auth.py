"""
FastAPI router for authentication endpoints.

Provides password login/signup, e-mail verification, OAuth login and
password resets.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from common.auth import JWTAuth
from common.utils import success_response
from nhc.dependencies import (
    get_dispatcher,
    get_facebook_provider,
    get_google_provider,
    get_jwt_auth,
    get_user_service,
    optional_auth,
    require_auth,
)
from nhc.pipelines import auth as auth_pipelines
from nhc.pipelines.oauth import oauth_login_pipeline
from nhc.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    OAuthLoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    VerifyEmailRequest,
)
from nhc.services.auth.oauth_providers import FacebookOAuthProvider, GoogleOAuthProvider
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/")
async def auth_status(
    user: Annotated[dict, Depends(require_auth)],
):
    """Return the signed-in user's basic details."""
    return success_response(UserService.format_auth_status(user))


@router.post("/login")
async def login(
    body: LoginRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
):
    """Login with e-mail and password."""
    result = await auth_pipelines.login_pipeline(user_service, jwt_auth, body.email, body.password)
    return success_response(result)


@router.post("/signup")
async def signup(
    body: SignupRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Create an account and send the verification e-mail."""
    result = await auth_pipelines.signup_pipeline(
        user_service,
        jwt_auth,
        notifications,
        email=body.email,
        password=body.password,
        first_name=body.firstName,
        last_name=body.lastName,
    )
    return success_response(result)


@router.post("/verify")
async def verify_email(
    body: VerifyEmailRequest,
    caller: Annotated[Optional[dict], Depends(optional_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
):
    """
    Confirm an e-mail address.

    Anonymous callers get a session token back.
    """
    result = await auth_pipelines.verify_email_pipeline(user_service, jwt_auth, body.code, caller)
    return success_response(result)


@router.get("/verify")
async def resend_verification(
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Send the verification e-mail again."""
    result = await auth_pipelines.resend_verification_pipeline(user_service, notifications, user)
    return success_response(result)


@router.post("/facebook")
async def facebook_login(
    body: OAuthLoginRequest,
    caller: Annotated[Optional[dict], Depends(optional_auth)],
    provider: Annotated[FacebookOAuthProvider, Depends(get_facebook_provider)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Login, sign up or link an account with Facebook."""
    result = await oauth_login_pipeline(
        provider,
        user_service,
        jwt_auth,
        notifications,
        code=body.code,
        client_id=body.clientId,
        redirect_uri=body.redirectUri,
        caller=caller,
    )
    return success_response(result)


@router.post("/google")
async def google_login(
    body: OAuthLoginRequest,
    caller: Annotated[Optional[dict], Depends(optional_auth)],
    provider: Annotated[GoogleOAuthProvider, Depends(get_google_provider)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Login, sign up or link an account with Google."""
    result = await oauth_login_pipeline(
        provider,
        user_service,
        jwt_auth,
        notifications,
        code=body.code,
        client_id=body.clientId,
        redirect_uri=body.redirectUri,
        caller=caller,
    )
    return success_response(result)


@router.post("/password/forgot")
async def forgot_password(
    body: ForgotPasswordRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Request a password reset e-mail."""
    result = await auth_pipelines.forgot_password_pipeline(user_service, notifications, body.email)
    return success_response(result)


@router.post("/password/reset")
async def reset_password(
    body: ResetPasswordRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Set a new password with a reset code."""
    result = await auth_pipelines.reset_password_pipeline(user_service, body.resetCode, body.password)
    return success_response(result)
