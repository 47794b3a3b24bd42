"""
Authentication pipeline functions.

Stateless orchestration logic for login, signup, e-mail verification
and password resets.
"""

import logging
from typing import Optional, Dict, Any

from common.auth import JWTAuth
from common.utils.exceptions import BadRequestException, NotFoundException
from common.utils.password import validate_password
from nhc.services.auth.roles import UserStatus
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.user.user_service import UserService, generate_code

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists for that e-mail address, a password reset link has been sent to it."
)


def _check_password(password: str) -> None:
    is_valid, errors = validate_password(password)
    if not is_valid:
        raise BadRequestException(
            message=errors[0],
            code="WEAK_PASSWORD",
            details={"password": errors[0]}
        )


async def login_pipeline(
    user_service: UserService,
    jwt_auth: JWTAuth,
    email: Optional[str],
    password: Optional[str],
) -> Dict[str, Any]:
    """
    Orchestrates password login.

    Args:
        user_service: For credential checks
        jwt_auth: For token creation
        email: Login e-mail
        password: Plain password

    Returns:
        {"token": str}

    Raises:
        BadRequestException: Missing credentials
        NotFoundException: Unknown e-mail
        UnauthorizedException: Wrong password
    """
    if not email or not password:
        raise BadRequestException(message="Missing credentials", code="MISSING_CREDENTIALS")

    user = await user_service.authenticate(email, password)
    await user_service.touch_last_login(user["_id"])

    logger.info(f"User logged in: {user['_id']}")
    return {"token": await jwt_auth.create_token(str(user["_id"]))}


async def signup_pipeline(
    user_service: UserService,
    jwt_auth: JWTAuth,
    notifications: NotificationDispatcher,
    email: Optional[str],
    password: Optional[str],
    first_name: str = "",
    last_name: str = "",
) -> Dict[str, Any]:
    """
    Orchestrates account creation.

    The account starts unconfirmed with a confirmation code, and the
    verification e-mail is queued.

    Returns:
        {"token": str}

    Raises:
        BadRequestException: Missing e-mail/password or weak password
        ConflictException: E-mail already registered
    """
    if not email or not password:
        raise BadRequestException(message="Missing credentials", code="MISSING_CREDENTIALS")
    _check_password(password)

    user = await user_service.create_user(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        status=UserStatus.UNCONFIRMED,
        code=generate_code(),
    )

    notifications.send_verification(user)

    return {"token": await jwt_auth.create_token(str(user["_id"]))}


async def verify_email_pipeline(
    user_service: UserService,
    jwt_auth: JWTAuth,
    code: Optional[str],
    caller: Optional[dict],
) -> Dict[str, Any]:
    """
    Orchestrates e-mail confirmation by code.

    Returns:
        {"token": str} for anonymous callers, {"status": "ok"} otherwise

    Raises:
        NotFoundException: Unknown or already used code
    """
    user = await user_service.get_by_code(code)
    if not user:
        raise NotFoundException(
            message="That verification link is invalid or has already been used.",
            code="INVALID_VERIFICATION_CODE"
        )

    await user_service.mark_verified(user)

    if caller is None:
        return {"token": await jwt_auth.create_token(str(user["_id"]))}
    return {"status": "ok"}


async def resend_verification_pipeline(
    user_service: UserService,
    notifications: NotificationDispatcher,
    user: dict,
) -> Dict[str, Any]:
    """
    Orchestrates re-sending the verification e-mail.

    A fresh code is issued when the user doesn't have one.

    Raises:
        BadRequestException: E-mail already verified
    """
    if user.get("status") != UserStatus.UNCONFIRMED.value:
        raise BadRequestException(
            message="Your e-mail address has already been verified.",
            code="ALREADY_VERIFIED"
        )

    code = user.get("code") or await user_service.set_confirmation_code(user["_id"])
    notifications.send_verification({**user, "code": code})

    return {"status": f"Your verification e-mail has been resent to {user['email']}."}


async def forgot_password_pipeline(
    user_service: UserService,
    notifications: NotificationDispatcher,
    email: Optional[str],
) -> Dict[str, Any]:
    """
    Orchestrates a password reset request.

    Always answers the same way so the endpoint can't be used to probe
    which addresses have accounts.
    """
    if not email:
        raise BadRequestException(message="E-mail is required", code="MISSING_EMAIL")

    user = await user_service.get_by_email(email)
    if user:
        reset_code = await user_service.set_reset_code(user["_id"])
        notifications.send_password_reset({**user, "resetCode": reset_code})
        logger.info(f"Password reset requested for user {user['_id']}")
    else:
        logger.info("Password reset requested for unknown e-mail")

    return {"status": FORGOT_PASSWORD_MESSAGE}


async def reset_password_pipeline(
    user_service: UserService,
    reset_code: Optional[str],
    password: Optional[str],
) -> Dict[str, Any]:
    """
    Orchestrates setting a new password from a reset code.

    Raises:
        BadRequestException: Missing or weak password
        NotFoundException: Unknown or already used reset code
    """
    if not password:
        raise BadRequestException(message="A new password is required", code="MISSING_PASSWORD")
    _check_password(password)

    user = await user_service.get_by_reset_code(reset_code)
    if not user:
        raise NotFoundException(
            message="That password reset link is invalid or has already been used.",
            code="INVALID_RESET_CODE"
        )

    await user_service.change_password(user["_id"], password)
    return {"status": "Your password has been reset. Please log in."}
