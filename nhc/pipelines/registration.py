"""
Registration pipeline functions.

Turns a verified account into a registered household: validates the
form, resolves organization and family code, creates participants
with empty scorecards, and queues the confirmation e-mail.
"""

import logging
from typing import Optional, List, Dict, Any

from common.utils.exceptions import BadRequestException, ForbiddenException
from config.messages import ErrorMessages, DONATION_CHOICES, SHARING_CHOICES
from nhc.services.auth.roles import UserStatus
from nhc.services.globals.globals_service import GlobalsService
from nhc.services.moderation.profanity_filter import ProfanityFilter
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.organization.organization_service import OrganizationService
from nhc.services.registration.family_service import FamilyService
from nhc.services.registration.scorecard import generate_scorecard
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)

REGISTRATION_COMPLETE_MESSAGE = "Registration complete."

PARTICIPANT_FIELDS = ("firstName", "lastName", "ageRange", "category", "commitment", "customCommitment")


def check_can_register(user: dict) -> None:
    """
    Raises:
        ForbiddenException: The user's status doesn't allow registering
    """
    status = user.get("status")
    if status == UserStatus.UNREGISTERED.value:
        return
    if status == UserStatus.UNCONFIRMED.value:
        message = "You must confirm your e-mail address before registering."
    elif status == UserStatus.REGISTERED.value:
        message = "You are already registered."
    else:
        message = "You are not allowed to register. Please contact an Administrator."
    raise ForbiddenException(message=message, code="REGISTRATION_NOT_ALLOWED")


async def validate_registration(
    profanity_filter: ProfanityFilter,
    family_service: FamilyService,
    form: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Collect per-field errors for a registration form.

    Returns:
        Mapping of field name to error message; empty when valid
    """
    errors: Dict[str, Any] = {}

    for field in ("organization", "comment", "referral", "team"):
        if await profanity_filter.has_profanity(form.get(field)):
            errors[field] = ErrorMessages.PROFANITY

    for field, choices in (("donation", DONATION_CHOICES), ("sharing", SHARING_CHOICES)):
        value = form.get(field)
        if not value:
            errors[field] = ErrorMessages.REQUIRED
        elif value not in choices:
            errors[field] = ErrorMessages.BAD_CHOICE

    family_code = (form.get("familyCode") or "").strip()
    if family_code and not await family_service.exists(family_code):
        errors["familyCode"] = ErrorMessages.FAMILY

    participants = form.get("participants") or []
    if not participants:
        errors["participants"] = ErrorMessages.REQUIRED
    else:
        participant_errors = {}
        for index, participant in enumerate(participants):
            problems = {}
            if not (participant.get("firstName") or "").strip():
                problems["firstName"] = ErrorMessages.REQUIRED
            text_fields = ["firstName", "lastName"]
            if participant.get("customCommitment"):
                text_fields.append("commitment")
            for text_field in text_fields:
                if text_field not in problems and await profanity_filter.has_profanity(participant.get(text_field)):
                    problems[text_field] = ErrorMessages.PROFANITY
            if problems:
                participant_errors[str(index)] = problems
        if participant_errors:
            errors["participants"] = participant_errors

    return errors


def build_participants(participants: List[Dict[str, Any]], challenge_length: int) -> List[Dict[str, Any]]:
    """Number participants from 0 and give each an empty scorecard."""
    built = []
    for index, participant in enumerate(participants):
        entry = {field: participant.get(field) for field in PARTICIPANT_FIELDS}
        entry["id"] = index
        entry["points"] = 0
        entry["scorecard"] = generate_scorecard(challenge_length)
        built.append(entry)
    return built


async def register_pipeline(
    user_service: UserService,
    organization_service: OrganizationService,
    family_service: FamilyService,
    globals_service: GlobalsService,
    profanity_filter: ProfanityFilter,
    notifications: NotificationDispatcher,
    user: dict,
    form: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Orchestrates registration for the signed-in user.

    Args:
        user_service: For saving the registration
        organization_service: For creating unknown organizations
        family_service: For family code checks and generation
        globals_service: For the registration flag and challenge length
        profanity_filter: For free-text checks
        notifications: For the confirmation e-mail
        user: The signed-in user
        form: Registration form (camelCase keys)

    Returns:
        {"status": str, "family": Optional[str]}

    Raises:
        ForbiddenException: Registration closed or status doesn't allow it
        BadRequestException: Invalid form, with per-field details
    """
    campaign = globals_service.current
    if not campaign.registration_open:
        raise ForbiddenException(message="Registration is closed.", code="REGISTRATION_CLOSED")

    check_can_register(user)

    errors = await validate_registration(profanity_filter, family_service, form)
    if errors:
        raise BadRequestException(
            message=ErrorMessages.MISSING_FIELDS,
            code="INVALID_REGISTRATION",
            details=errors
        )

    organization = (form.get("organization") or "").strip()
    if organization:
        await organization_service.create_organization(
            organization,
            needs_approval=True,
            ignore_duplicate=True,
        )

    family = await _resolve_family(family_service, user, form)

    updates = {
        "organization": organization or None,
        "team": form.get("team"),
        "sharing": form.get("sharing"),
        "comment": form.get("comment"),
        "referral": form.get("referral"),
        "donation": form.get("donation"),
        "family": family,
        "participants": build_participants(form["participants"], campaign.challenge_length),
        "status": UserStatus.REGISTERED.value,
    }

    registered = await user_service.update_fields(user["_id"], updates)
    notifications.send_registration_confirmation(registered)

    logger.info(
        f"User {user['_id']} registered {len(updates['participants'])} participants "
        f"(organization={organization or None}, family={family})"
    )
    return {"status": REGISTRATION_COMPLETE_MESSAGE, "family": family}


async def _resolve_family(family_service: FamilyService, user: dict, form: Dict[str, Any]) -> Optional[str]:
    family_code = (form.get("familyCode") or "").strip().upper()
    if family_code:
        return family_code
    if form.get("family"):
        return await family_service.generate_code(user.get("lastName"))
    return None
