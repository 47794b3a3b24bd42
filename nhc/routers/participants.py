"""
FastAPI router for participant and scorecard endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response, list_response
from nhc.dependencies import get_globals_service, get_user_service, require_auth, require_org_admin
from nhc.pipelines.participants import update_scorecard_pipeline
from nhc.schemas.registration import ScorecardUpdateRequest
from nhc.services.globals.globals_service import GlobalsService
from nhc.services.user.user_service import UserService

router = APIRouter(tags=["participants"])


@router.get("/participant")
async def list_my_participants(
    user: Annotated[dict, Depends(require_auth)],
):
    """The signed-in user's participants with their scorecards."""
    return list_response(user.get("participants") or [])


@router.put("/participant/scorecard")
async def update_scorecard(
    body: ScorecardUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    globals_service: Annotated[GlobalsService, Depends(get_globals_service)],
):
    """Save a participant's scorecard."""
    result = await update_scorecard_pipeline(
        user_service,
        globals_service,
        user,
        body.id,
        body.scorecard,
    )
    return success_response(result, message=result["status"])


@router.get("/admin/participant")
async def list_participants(
    admin: Annotated[dict, Depends(require_org_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Participants of registered users the admin can see."""
    return list_response(await user_service.list_participants(admin))
