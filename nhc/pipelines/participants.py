"""
Participant pipeline functions.
"""

import logging
from typing import List, Dict, Any

from common.utils.exceptions import NotFoundException
from nhc.services.globals.globals_service import GlobalsService
from nhc.services.registration.scorecard import normalize_scorecard
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)

SCORECARD_UPDATED_MESSAGE = "Scorecard updated successfully."


async def update_scorecard_pipeline(
    user_service: UserService,
    globals_service: GlobalsService,
    user: dict,
    participant_id: int,
    scorecard: List[List[int]],
) -> Dict[str, Any]:
    """
    Orchestrates a scorecard submission.

    The grid is fitted to the challenge length, future days are zeroed,
    other cells clamped to 0/1, and the points recomputed before saving.

    Returns:
        {"status", "scorecard", "points"}

    Raises:
        NotFoundException: The caller has no such participant
    """
    if not any(p.get("id") == participant_id for p in user.get("participants") or []):
        raise NotFoundException(message="Participant not found", code="PARTICIPANT_NOT_FOUND")

    campaign = globals_service.current
    normalized, points = normalize_scorecard(scorecard, campaign.current_day(), campaign.challenge_length)

    await user_service.update_participant_scorecard(user["_id"], participant_id, normalized, points)

    logger.info(f"User {user['_id']} participant {participant_id} scorecard updated: {points} points")
    return {"status": SCORECARD_UPDATED_MESSAGE, "scorecard": normalized, "points": points}
