"""
FastAPI router for organization endpoints.

Listing is public; changes are restricted to global admins.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response, list_response
from nhc.dependencies import get_organization_service, require_global_admin
from nhc.schemas.organization import (
    CreateOrganizationRequest,
    MergeOrganizationsRequest,
    UpdateOrganizationRequest,
)
from nhc.services.organization.organization_service import OrganizationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["organizations"])


@router.get("/organizations")
async def list_organizations(
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """All organizations, sorted by name."""
    return list_response(await org_service.list_organizations())


@router.post("/admin/organizations")
async def create_organization(
    body: CreateOrganizationRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """Create an organization."""
    org = await org_service.create_organization(body.name, needs_approval=body.needsApproval)
    return success_response(org, message="Organization created.")


@router.put("/admin/organizations")
async def update_organization(
    body: UpdateOrganizationRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """Rename or re-flag an organization; members follow the rename."""
    org = await org_service.update_organization(body.id, body.name, body.needsApproval)
    return success_response(org, message="Organization updated.")


@router.delete("/admin/organizations/{organization_id}")
async def delete_organization(
    organization_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """Delete an organization and detach its members."""
    detached = await org_service.delete_organization(organization_id)
    return success_response({"usersUpdated": detached}, message="Organization deleted.")


@router.post("/admin/organizations/merge")
async def merge_organizations(
    body: MergeOrganizationsRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """Merge organizations into one under a new name."""
    org = await org_service.merge_organizations(body.ids, body.name)
    return success_response(org, message="Organizations merged.")
