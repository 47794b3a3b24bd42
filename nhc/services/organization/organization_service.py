"""
Organization service.

Manages the organization catalog. Users reference organizations by
name, so renames, deletions and merges cascade to every referencing
user. Cascades are sequential, without a transaction.
"""

import json
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.database import to_object_id
from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


class OrganizationService:
    """
    Manages organizations and their references from users.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize OrganizationService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._orgs_collection = db["organizations"]
        self._users_collection = db["users"]

    # ─────────────────────────────────────────────────────────────────
    # Organization CRUD
    # ─────────────────────────────────────────────────────────────────

    async def list_organizations(self) -> List[Dict[str, Any]]:
        cursor = self._orgs_collection.find({}).sort("name", 1)
        orgs = await cursor.to_list(length=None)
        return [self._format_organization(o) for o in orgs]

    async def exists(self, name: str) -> bool:
        return await self._orgs_collection.find_one({"name": name}) is not None

    async def create_organization(
        self,
        name: str,
        needs_approval: bool = False,
        ignore_duplicate: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Create a new organization.

        Args:
            name: Unique organization name
            needs_approval: True for organizations created by registrants
            ignore_duplicate: Return None instead of raising when the name exists

        Returns:
            Created organization dict, or None for an ignored duplicate

        Raises:
            BadRequestException: Empty name
            ConflictException: Name already exists
        """
        name = (name or "").strip()
        if not name:
            raise BadRequestException(
                message="Organization name is required",
                code="ORGANIZATION_NAME_REQUIRED"
            )

        org_doc = {"name": name, "needsApproval": needs_approval}

        try:
            result = await self._orgs_collection.insert_one(org_doc)
        except DuplicateKeyError:
            if ignore_duplicate:
                return None
            raise ConflictException(
                message="An organization with this name already exists",
                code="ORGANIZATION_EXISTS"
            )

        org_doc["_id"] = result.inserted_id
        logger.info(f"Created organization {name} (needsApproval={needs_approval})")
        return self._format_organization(org_doc)

    async def update_organization(
        self,
        organization_id: str,
        name: str,
        needs_approval: bool,
    ) -> Dict[str, Any]:
        """
        Rename and/or re-flag an organization.

        Every user referencing the old name is moved to the new one.
        """
        org = await self._get_organization(organization_id)
        new_name = (name or "").strip()
        if not new_name:
            raise BadRequestException(
                message="Organization name is required",
                code="ORGANIZATION_NAME_REQUIRED"
            )

        try:
            updated = await self._orgs_collection.find_one_and_update(
                {"_id": org["_id"]},
                {"$set": {"name": new_name, "needsApproval": needs_approval}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(
                message="An organization with this name already exists",
                code="ORGANIZATION_EXISTS"
            )

        moved = await self._rename_users(org["name"], new_name)
        logger.info(f"Updated organization {org['_id']}: {org['name']} -> {new_name}, {moved} users moved")
        return self._format_organization(updated)

    async def delete_organization(self, organization_id: str) -> int:
        """
        Delete an organization and clear it from every referencing user.

        Returns:
            Number of users whose organization was cleared
        """
        org = await self._get_organization(organization_id)

        await self._orgs_collection.delete_one({"_id": org["_id"]})
        result = await self._users_collection.update_many(
            {"organization": org["name"]},
            {"$unset": {"organization": ""}}
        )

        logger.info(f"Deleted organization {org['name']}, cleared on {result.modified_count} users")
        return result.modified_count

    async def merge_organizations(
        self,
        organization_ids: List[str],
        new_name: str,
    ) -> Dict[str, Any]:
        """
        Merge several organizations into one.

        The first organization is kept and renamed; the others are deleted.
        Users of every merged organization are moved to the new name.
        All ids are resolved before anything is written.

        Args:
            organization_ids: Organizations to merge, survivor first
            new_name: Name of the merged organization

        Returns:
            The surviving organization
        """
        new_name = (new_name or "").strip()
        if not organization_ids:
            raise BadRequestException(
                message="At least one organization is required to merge",
                code="MERGE_EMPTY"
            )
        if not new_name:
            raise BadRequestException(
                message="A name for the merged organization is required",
                code="ORGANIZATION_NAME_REQUIRED"
            )

        orgs = []
        seen = set()
        for organization_id in organization_ids:
            org = await self._get_organization(organization_id)
            if org["_id"] not in seen:
                seen.add(org["_id"])
                orgs.append(org)

        clash = await self._orgs_collection.find_one({"name": new_name})
        if clash and clash["_id"] not in seen:
            raise ConflictException(
                message="An organization with this name already exists",
                code="ORGANIZATION_EXISTS"
            )

        survivor, absorbed = orgs[0], orgs[1:]

        # Free the names first so the survivor can take one of them
        if absorbed:
            await self._orgs_collection.delete_many({"_id": {"$in": [o["_id"] for o in absorbed]}})

        try:
            updated = await self._orgs_collection.find_one_and_update(
                {"_id": survivor["_id"]},
                {"$set": {"name": new_name}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(
                message="An organization with this name already exists",
                code="ORGANIZATION_EXISTS"
            )

        moved = 0
        for org in orgs:
            moved += await self._rename_users(org["name"], new_name)

        logger.info(
            f"Merged {[o['name'] for o in orgs]} into {new_name}, {moved} users moved"
        )
        return self._format_organization(updated)

    async def seed_from_file(self, path: Union[str, Path]) -> int:
        """
        Replace the catalog with the names listed in a JSON seed file.

        Seeded organizations don't need approval. Users are not touched.

        Returns:
            Number of organizations inserted
        """
        with open(path, "r", encoding="utf-8") as f:
            names = json.load(f)

        unique_names = sorted({n.strip() for n in names if n and n.strip()})

        await self._orgs_collection.delete_many({})
        if unique_names:
            await self._orgs_collection.insert_many(
                [{"name": n, "needsApproval": False} for n in unique_names]
            )

        logger.info(f"Seeded {len(unique_names)} organizations from {path}")
        return len(unique_names)

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    async def _get_organization(self, organization_id: str) -> Dict[str, Any]:
        org = await self._orgs_collection.find_one({"_id": to_object_id(organization_id, "organization id")})
        if not org:
            raise NotFoundException(
                message="Organization not found",
                code="ORGANIZATION_NOT_FOUND"
            )
        return org

    async def _rename_users(self, old_name: str, new_name: str) -> int:
        if old_name == new_name:
            return 0
        result = await self._users_collection.update_many(
            {"organization": old_name},
            {"$set": {"organization": new_name}}
        )
        return result.modified_count

    def _format_organization(self, org: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(org["_id"]),
            "name": org.get("name"),
            "needsApproval": bool(org.get("needsApproval", False)),
        }
