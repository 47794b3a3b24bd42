"""
FastAPI router for admin announcement e-mails.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from common.utils.exceptions import NotFoundException
from nhc.dependencies import get_dispatcher, get_user_service, require_org_admin
from nhc.pipelines.messaging import send_message_pipeline
from nhc.schemas.campaign import SendMessageRequest
from nhc.services.notifications.dispatcher import NotificationDispatcher
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/message", tags=["messages"])


@router.post("")
async def send_message(
    body: SendMessageRequest,
    admin: Annotated[dict, Depends(require_org_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Queue an announcement to users matching the status and role filters."""
    result = await send_message_pipeline(
        user_service,
        notifications,
        admin,
        subject=body.subject,
        body=body.body,
        statuses=body.status,
        roles=body.roles,
    )
    return success_response(result, message=result["status"])


@router.get("/{job_id}")
async def get_message_job(
    job_id: str,
    admin: Annotated[dict, Depends(require_org_admin)],
    notifications: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
):
    """Delivery progress of a queued announcement."""
    job = notifications.get_job(job_id)
    if job is None:
        raise NotFoundException(message="Message job not found", code="JOB_NOT_FOUND")
    return success_response(job.to_dict())
