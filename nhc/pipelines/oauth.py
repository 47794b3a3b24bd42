"""
OAuth login pipeline.

Links a provider account to the signed-in user, or logs in / signs up
an anonymous caller from the provider profile.
"""

import logging
from typing import Optional, Dict, Any

from common.auth import JWTAuth
from common.utils.exceptions import (
    ConflictException,
    NotAcceptableException,
    NotFoundException,
    ServiceUnavailableException,
    UnauthorizedException,
)
from nhc.services.auth.oauth_providers import (
    OAuthExchangeError,
    OAuthProfile,
    OAuthProfileError,
    OAuthProvider,
)
from nhc.services.auth.roles import UserStatus
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.user.user_service import UserService, generate_code

logger = logging.getLogger(__name__)


async def _fetch_profile(
    provider: OAuthProvider,
    code: str,
    client_id: str,
    redirect_uri: str,
) -> OAuthProfile:
    if not provider.configured:
        raise ServiceUnavailableException(
            message=f"{provider.display_name} login is not available right now.",
            code="OAUTH_NOT_CONFIGURED"
        )

    try:
        return await provider.authenticate(code, client_id, redirect_uri)
    except OAuthExchangeError as e:
        raise UnauthorizedException(message=e.message, code="OAUTH_EXCHANGE_FAILED")
    except OAuthProfileError as e:
        raise ServiceUnavailableException(message=e.message, code="OAUTH_PROFILE_FAILED")


async def oauth_login_pipeline(
    provider: OAuthProvider,
    user_service: UserService,
    jwt_auth: JWTAuth,
    notifications: NotificationDispatcher,
    code: str,
    client_id: str,
    redirect_uri: str,
    caller: Optional[dict] = None,
) -> Dict[str, Any]:
    """
    Orchestrates provider login, signup and account linking.

    Args:
        provider: Facebook or Google provider
        user_service: For user lookup, linking and creation
        jwt_auth: For token creation
        notifications: For the verification e-mail of unverified signups
        code: Authorization code from the provider
        client_id: OAuth client id used by the frontend
        redirect_uri: Redirect URI used by the frontend
        caller: The signed-in user, or None for anonymous callers

    Returns:
        {"token": str}

    Raises:
        ConflictException: Provider account already linked to a user
        NotAcceptableException: Provider didn't share an e-mail address
        NotFoundException: Signed-in user no longer exists
    """
    profile = await _fetch_profile(provider, code, client_id, redirect_uri)

    if caller is not None:
        user = await _link_to_caller(user_service, profile, caller)
        return {"token": await jwt_auth.create_token(str(user["_id"]))}

    existing = await user_service.get_by_provider(profile.provider, profile.subject)
    if existing:
        await user_service.touch_last_login(existing["_id"])
        logger.info(f"User {existing['_id']} logged in with {provider.display_name}")
        return {"token": await jwt_auth.create_token(str(existing["_id"]))}

    if not profile.email:
        raise NotAcceptableException(
            message="You cannot sign up without sharing your email with NHC.",
            code="OAUTH_EMAIL_REQUIRED"
        )

    by_email = await user_service.get_by_email(profile.email)
    if by_email:
        linked = await user_service.link_provider(by_email, profile.provider, profile.subject, profile.picture)
        await user_service.touch_last_login(linked["_id"])
        return {"token": await jwt_auth.create_token(str(linked["_id"]))}

    user = await _create_from_profile(user_service, notifications, profile)
    return {"token": await jwt_auth.create_token(str(user["_id"]))}


async def _link_to_caller(user_service: UserService, profile: OAuthProfile, caller: dict) -> dict:
    if await user_service.get_by_provider(profile.provider, profile.subject):
        raise ConflictException(
            message=f"That {profile.provider.capitalize()} account is already linked to a user.",
            code="OAUTH_ALREADY_LINKED"
        )

    user = await user_service.get_by_id(caller["_id"])
    if not user:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

    return await user_service.link_provider(user, profile.provider, profile.subject, profile.picture)


async def _create_from_profile(
    user_service: UserService,
    notifications: NotificationDispatcher,
    profile: OAuthProfile,
) -> dict:
    extra: Dict[str, Any] = {profile.provider: profile.subject}
    if profile.picture:
        extra["picture"] = profile.picture

    if profile.email_verified:
        user = await user_service.create_user(
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            status=UserStatus.UNREGISTERED,
            extra=extra,
        )
    else:
        user = await user_service.create_user(
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            status=UserStatus.UNCONFIRMED,
            code=generate_code(),
            extra=extra,
        )
        notifications.send_verification(user)

    logger.info(f"User {user['_id']} signed up with {profile.provider}")
    return user
