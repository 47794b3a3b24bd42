"""
NHC collection indexes.

Unique indexes back the duplicate checks done by the services: inserts
rely on DuplicateKeyError rather than a read-then-write check.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────
# Index definitions
# ─────────────────────────────────────────────────────────────────

COLLECTION_INDEXES = {
    "users": [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel([("facebook", ASCENDING)], unique=True, sparse=True, name="facebook_unique"),
        IndexModel([("google", ASCENDING)], unique=True, sparse=True, name="google_unique"),
        IndexModel([("code", ASCENDING)], sparse=True, name="code"),
        IndexModel([("resetCode", ASCENDING)], sparse=True, name="reset_code"),
        IndexModel([("organization", ASCENDING), ("status", ASCENDING)], name="organization_status"),
    ],
    "organizations": [
        IndexModel([("name", ASCENDING)], unique=True, name="name_unique"),
    ],
    "commitments": [
        IndexModel([("name", ASCENDING)], unique=True, name="name_unique"),
    ],
    "families": [
        IndexModel([("code", ASCENDING)], unique=True, name="code_unique"),
    ],
    "questions": [
        IndexModel([("enabled", ASCENDING)], name="enabled"),
    ],
}


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create any missing indexes. Existing ones are left as they are."""
    for collection_name, indexes in COLLECTION_INDEXES.items():
        names = await db[collection_name].create_indexes(indexes)
        logger.info(f"Indexes ensured on {collection_name}: {', '.join(names)}")
