"""Registration services."""

from nhc.services.registration.family_service import FamilyService
from nhc.services.registration.scorecard import generate_scorecard, normalize_scorecard, compute_points

__all__ = [
    "FamilyService",
    "generate_scorecard",
    "normalize_scorecard",
    "compute_points",
]
