"""Organization services."""

from nhc.services.organization.organization_service import OrganizationService

__all__ = [
    "OrganizationService",
]
