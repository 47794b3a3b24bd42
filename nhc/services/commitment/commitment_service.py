"""
Commitment catalog service.

The catalog groups habit commitments by category. It is static during
a campaign and is loaded from a JSON seed file by the maintenance job.
"""

import json
import logging
from pathlib import Path
from typing import List, Dict, Any, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


class CommitmentService:
    """
    Reads and seeds the commitment catalog.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._commitments_collection = db["commitments"]

    async def list_commitments(self) -> List[Dict[str, Any]]:
        cursor = self._commitments_collection.find({}).sort("name", 1)
        categories = await cursor.to_list(length=None)
        return [self._format_category(c) for c in categories]

    async def seed_from_file(self, path: Union[str, Path]) -> int:
        """
        Replace the catalog with the contents of a seed file.

        The file holds a JSON list of {"name", "links", "commitments"}.

        Returns:
            Number of categories inserted
        """
        with open(path, "r", encoding="utf-8") as f:
            categories = json.load(f)

        docs = [
            {
                "name": c["name"],
                "links": c.get("links", []),
                "commitments": c.get("commitments", []),
            }
            for c in categories
        ]

        await self._commitments_collection.delete_many({})
        if docs:
            await self._commitments_collection.insert_many(docs)

        logger.info(f"Seeded {len(docs)} commitment categories from {path}")
        return len(docs)

    def _format_category(self, category: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(category["_id"]),
            "name": category.get("name"),
            "links": category.get("links", []),
            "commitments": category.get("commitments", []),
        }
