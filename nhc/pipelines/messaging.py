"""
Admin bulk messaging pipeline.
"""

import logging
from typing import List, Dict, Any, Optional

from common.utils.exceptions import BadRequestException, ForbiddenException
from config.messages import ErrorMessages
from nhc.services.auth.roles import ORG_SCOPED_ROLES, UserStatus, is_global_admin
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)


def build_recipient_query(
    actor: dict,
    statuses: List[str],
    roles: Optional[List[str]],
) -> Dict[str, Any]:
    """
    Select recipients by status and role.

    Global admins must name the roles to address. Organization admins
    only reach their own organization and at most organization-level
    roles; with no roles given they reach all of those.

    Raises:
        BadRequestException: Missing or unknown selectors
        ForbiddenException: Org admin asked for roles beyond their reach
    """
    valid_statuses = {s.value for s in UserStatus}
    if not statuses or any(s not in valid_statuses for s in statuses):
        raise BadRequestException(message=ErrorMessages.BAD_MESSAGE, code="INVALID_STATUS_SELECTOR")

    query: Dict[str, Any] = {"status": {"$in": list(statuses)}}

    if is_global_admin(actor.get("role")):
        if not roles:
            raise BadRequestException(message=ErrorMessages.BAD_MESSAGE, code="ROLES_REQUIRED")
        query["role"] = {"$in": list(roles)}
        return query

    allowed = [r.value for r in ORG_SCOPED_ROLES]
    if roles and any(r not in allowed for r in roles):
        raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="FORBIDDEN")

    query["organization"] = actor.get("organization")
    query["role"] = {"$in": list(roles) if roles else allowed}
    return query


async def send_message_pipeline(
    user_service: UserService,
    notifications: NotificationDispatcher,
    actor: dict,
    subject: Optional[str],
    body: Optional[str],
    statuses: List[str],
    roles: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Orchestrates an admin announcement e-mail.

    Returns:
        {"jobId", "recipients", "status"}; jobId is None when nobody matched

    Raises:
        BadRequestException: Missing subject, body or selectors
        ServiceUnavailableException: Mail queue full
    """
    if not subject or not subject.strip() or not body or not body.strip():
        raise BadRequestException(message=ErrorMessages.BAD_MESSAGE, code="MESSAGE_INCOMPLETE")

    query = build_recipient_query(actor, statuses, roles)
    recipients = await user_service.find_recipient_emails(query)

    if not recipients:
        return {"jobId": None, "recipients": 0, "status": "No users matched the selected filters."}

    job = notifications.send_bulk(recipients, subject.strip(), body)

    logger.info(f"Admin {actor['_id']} queued message {subject!r} to {len(recipients)} recipients (job {job.id})")
    return {
        "jobId": job.id,
        "recipients": len(recipients),
        "status": f"Your message is being sent to {len(recipients)} recipients.",
    }
