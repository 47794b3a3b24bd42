"""
FastAPI router for profile, registration and admin user endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response, list_response
from nhc.dependencies import (
    get_dispatcher,
    get_family_service,
    get_globals_service,
    get_organization_service,
    get_profanity_filter,
    get_user_service,
    require_auth,
    require_org_admin,
)
from nhc.pipelines.registration import register_pipeline
from nhc.schemas.registration import RegistrationRequest
from nhc.schemas.user import AdminUpdateUserRequest, UpdateProfileRequest
from nhc.services.globals.globals_service import GlobalsService
from nhc.services.moderation.profanity_filter import ProfanityFilter
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.organization.organization_service import OrganizationService
from nhc.services.registration.family_service import FamilyService
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.post("/registration")
async def register(
    body: RegistrationRequest,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
    family_service: Annotated[FamilyService, Depends(get_family_service)],
    globals_service: Annotated[GlobalsService, Depends(get_globals_service)],
    profanity_filter: Annotated[ProfanityFilter, Depends(get_profanity_filter)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Register the signed-in user's household for the challenge."""
    result = await register_pipeline(
        user_service,
        org_service,
        family_service,
        globals_service,
        profanity_filter,
        notifications,
        user,
        body.model_dump(),
    )
    return success_response(result, message=result["status"])


@router.put("/user")
async def update_profile(
    body: UpdateProfileRequest,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update the signed-in user's name or organization."""
    updated = await user_service.update_self(
        user,
        first_name=body.firstName,
        last_name=body.lastName,
        organization=body.organization,
    )
    return success_response(UserService.format_auth_status(updated), message="Profile updated.")


@router.get("/admin/user")
async def list_users(
    admin: Annotated[dict, Depends(require_org_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Users the admin can manage."""
    return list_response(await user_service.list_limited(admin))


@router.put("/admin/user")
async def admin_update_user(
    body: AdminUpdateUserRequest,
    admin: Annotated[dict, Depends(require_org_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Edit a user by e-mail."""
    updated = await user_service.admin_update(admin, body.email, body.to_updates())
    return success_response(updated, message="User updated.")
