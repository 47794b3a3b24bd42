"""
FastAPI router for campaign globals and the commitment catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response, list_response
from nhc.dependencies import get_commitment_service, get_globals_service, require_global_admin
from nhc.schemas.campaign import UpdateGlobalsRequest
from nhc.services.commitment.commitment_service import CommitmentService
from nhc.services.globals.globals_service import GlobalsService

router = APIRouter(tags=["campaign"])


@router.get("/globals")
async def get_globals(
    globals_service: Annotated[GlobalsService, Depends(get_globals_service)],
):
    """Current challenge dates and feature flags."""
    return success_response(globals_service.current.to_response())


@router.post("/globals")
async def update_globals(
    body: UpdateGlobalsRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    globals_service: Annotated[GlobalsService, Depends(get_globals_service)],
):
    """Change challenge dates and feature flags."""
    updated = await globals_service.update(
        challenge_start=body.challengeStart,
        challenge_end=body.challengeEnd,
        registration_open=body.registrationOpen,
        scorecard_enabled=body.scorecardEnabled,
    )
    return success_response(updated.to_response(), message="Globals updated.")


@router.get("/commitments")
async def list_commitments(
    commitment_service: Annotated[CommitmentService, Depends(get_commitment_service)],
):
    """Commitment catalog grouped by category."""
    return list_response(await commitment_service.list_commitments())
