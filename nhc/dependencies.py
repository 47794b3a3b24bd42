"""
FastAPI dependencies for the NHC application.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTAuth
from common.utils.exceptions import ForbiddenException
from config.messages import ErrorMessages
from nhc.config import Settings
from nhc.middleware.auth import AuthMiddleware

# Auth services
from nhc.services.auth.roles import Role, has_role
from nhc.services.auth.oauth_providers import FacebookOAuthProvider, GoogleOAuthProvider

# User services
from nhc.services.user.user_service import UserService

# Organization and registration services
from nhc.services.organization.organization_service import OrganizationService
from nhc.services.registration.family_service import FamilyService
from nhc.services.globals.globals_service import GlobalsService

# Content services
from nhc.services.content.news_service import NewsService
from nhc.services.content.faq_service import FAQService
from nhc.services.content.question_service import QuestionService
from nhc.services.commitment.commitment_service import CommitmentService
from nhc.services.moderation.profanity_filter import ProfanityFilter

# Notification services
from nhc.services.email.email_service import EmailService
from nhc.services.notifications.dispatcher import NotificationDispatcher


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

# Auth
_jwt_auth: Optional[JWTAuth] = None
_auth_middleware: Optional[AuthMiddleware] = None
_facebook_provider: Optional[FacebookOAuthProvider] = None
_google_provider: Optional[GoogleOAuthProvider] = None

# User
_user_service: Optional[UserService] = None

# Campaign
_organization_service: Optional[OrganizationService] = None
_family_service: Optional[FamilyService] = None
_globals_service: Optional[GlobalsService] = None
_commitment_service: Optional[CommitmentService] = None

# Content
_profanity_filter: Optional[ProfanityFilter] = None
_news_service: Optional[NewsService] = None
_faq_service: Optional[FAQService] = None
_question_service: Optional[QuestionService] = None

# Notifications
_dispatcher: Optional[NotificationDispatcher] = None


# ─────────────────────────────────────────────────────────────────
# Initialization functions
# ─────────────────────────────────────────────────────────────────

def init_auth_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize token handling, the user service and the OAuth providers."""
    global _jwt_auth, _auth_middleware, _user_service
    global _facebook_provider, _google_provider

    signing_key, verify_key = settings.read_jwt_keys()
    _jwt_auth = JWTAuth(
        secret=signing_key,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_days=settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS,
        verify_key=verify_key,
    )

    _user_service = UserService(db=db, jwt_auth=_jwt_auth)
    _auth_middleware = AuthMiddleware(jwt_auth=_jwt_auth, user_service=_user_service)

    _facebook_provider = FacebookOAuthProvider(
        client_secret=settings.FACEBOOK_CLIENT_SECRET,
        timeout=settings.OAUTH_TIMEOUT_SECONDS,
    )
    _google_provider = GoogleOAuthProvider(
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        timeout=settings.OAUTH_TIMEOUT_SECONDS,
    )


def init_campaign_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize organization, family, globals and commitment services."""
    global _organization_service, _family_service, _globals_service, _commitment_service

    _organization_service = OrganizationService(db=db)
    _family_service = FamilyService(db=db)
    _globals_service = GlobalsService(db=db)
    _commitment_service = CommitmentService(db=db)


def init_content_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize moderation and content services."""
    global _profanity_filter, _news_service, _faq_service, _question_service

    _profanity_filter = ProfanityFilter(
        blocked_words=settings.get_profanity_words(),
        api_url=settings.PROFANITY_API_URL,
        timeout=settings.PROFANITY_TIMEOUT_SECONDS,
    )
    _news_service = NewsService(db=db, profanity_filter=_profanity_filter)
    _faq_service = FAQService(db=db)
    _question_service = QuestionService(db=db, profanity_filter=_profanity_filter)


def init_notification_services(settings: Settings) -> None:
    """Initialize the e-mail service and the mail dispatcher (not started)."""
    global _dispatcher

    email_service = EmailService(
        mode=settings.EMAIL_MODE,
        from_email=settings.SMTP_FROM_EMAIL,
        from_name=settings.SMTP_FROM_NAME,
        site_url=settings.SITE_URL,
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        smtp_user=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
    )
    _dispatcher = NotificationDispatcher(
        email_service=email_service,
        max_queue_size=settings.MAIL_QUEUE_SIZE,
        workers=settings.MAIL_WORKERS,
        bulk_delay=settings.BULK_MAIL_DELAY_SECONDS,
    )


def init_all_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: Main MongoDB database connection
        settings: Application settings
    """
    init_auth_services(db, settings)
    init_campaign_services(db)
    init_content_services(db, settings)
    init_notification_services(settings)


# ─────────────────────────────────────────────────────────────────
# Auth getters
# ─────────────────────────────────────────────────────────────────

def get_jwt_auth() -> JWTAuth:
    """Get JWT auth instance."""
    if _jwt_auth is None:
        raise RuntimeError("Auth services not initialized.")
    return _jwt_auth


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Auth services not initialized.")
    return _auth_middleware


def get_facebook_provider() -> FacebookOAuthProvider:
    """Get Facebook OAuth provider instance."""
    if _facebook_provider is None:
        raise RuntimeError("Auth services not initialized.")
    return _facebook_provider


def get_google_provider() -> GoogleOAuthProvider:
    """Get Google OAuth provider instance."""
    if _google_provider is None:
        raise RuntimeError("Auth services not initialized.")
    return _google_provider


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> dict:
    """Dependency that requires authentication."""
    return await auth_middleware.require_auth(request)


async def optional_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> Optional[dict]:
    """Dependency that optionally authenticates."""
    return await auth_middleware.optional_auth(request)


def require_role(role: Role):
    """
    Build a dependency that requires at least the given role.

    Args:
        role: Lowest role allowed through

    Returns:
        Dependency returning the authenticated user
    """
    async def dependency(user: Annotated[dict, Depends(require_auth)]) -> dict:
        if not has_role(user.get("role"), role):
            raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="FORBIDDEN")
        return user

    return dependency


require_org_admin = require_role(Role.ORG_ADMIN)
require_global_admin = require_role(Role.GLOBAL_ADMIN)


# ─────────────────────────────────────────────────────────────────
# User getters
# ─────────────────────────────────────────────────────────────────

def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("Auth services not initialized.")
    return _user_service


# ─────────────────────────────────────────────────────────────────
# Campaign getters
# ─────────────────────────────────────────────────────────────────

def get_organization_service() -> OrganizationService:
    """Get organization service instance."""
    if _organization_service is None:
        raise RuntimeError("Campaign services not initialized.")
    return _organization_service


def get_family_service() -> FamilyService:
    """Get family service instance."""
    if _family_service is None:
        raise RuntimeError("Campaign services not initialized.")
    return _family_service


def get_globals_service() -> GlobalsService:
    """Get globals service instance."""
    if _globals_service is None:
        raise RuntimeError("Campaign services not initialized.")
    return _globals_service


def get_commitment_service() -> CommitmentService:
    """Get commitment service instance."""
    if _commitment_service is None:
        raise RuntimeError("Campaign services not initialized.")
    return _commitment_service


# ─────────────────────────────────────────────────────────────────
# Content getters
# ─────────────────────────────────────────────────────────────────

def get_profanity_filter() -> ProfanityFilter:
    """Get profanity filter instance."""
    if _profanity_filter is None:
        raise RuntimeError("Content services not initialized.")
    return _profanity_filter


def get_news_service() -> NewsService:
    """Get news service instance."""
    if _news_service is None:
        raise RuntimeError("Content services not initialized.")
    return _news_service


def get_faq_service() -> FAQService:
    """Get FAQ service instance."""
    if _faq_service is None:
        raise RuntimeError("Content services not initialized.")
    return _faq_service


def get_question_service() -> QuestionService:
    """Get bonus question service instance."""
    if _question_service is None:
        raise RuntimeError("Content services not initialized.")
    return _question_service


# ─────────────────────────────────────────────────────────────────
# Notification getters
# ─────────────────────────────────────────────────────────────────

def get_dispatcher() -> NotificationDispatcher:
    """Get mail dispatcher instance."""
    if _dispatcher is None:
        raise RuntimeError("Notification services not initialized.")
    return _dispatcher
