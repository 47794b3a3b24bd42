"""Commitment catalog."""

from nhc.services.commitment.commitment_service import CommitmentService

__all__ = [
    "CommitmentService",
]
