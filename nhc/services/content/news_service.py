"""
News service.

Announcements shown on the dashboard. Items are drafts until
published; admin-only items are hidden from regular users.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from common.utils.exceptions import BadRequestException, NotFoundException
from config.messages import ErrorMessages
from nhc.services.moderation.profanity_filter import ProfanityFilter

logger = logging.getLogger(__name__)


class NewsService:
    """
    Manages news items.
    """

    def __init__(self, db: AsyncIOMotorDatabase, profanity_filter: ProfanityFilter):
        """
        Initialize NewsService.

        Args:
            db: MongoDB database connection
            profanity_filter: For checking submitted text
        """
        self._news_collection = db["news"]
        self._profanity_filter = profanity_filter

    async def list_published(self, include_admin_only: bool = False) -> List[Dict[str, Any]]:
        """Published items, newest first."""
        query: Dict[str, Any] = {"published": True}
        if not include_admin_only:
            query["adminOnly"] = {"$ne": True}

        cursor = self._news_collection.find(query).sort("publishDate", -1)
        items = await cursor.to_list(length=None)
        return [self._format_news(n) for n in items]

    async def list_all(self) -> List[Dict[str, Any]]:
        cursor = self._news_collection.find({}).sort("_id", -1)
        items = await cursor.to_list(length=None)
        return [self._format_news(n) for n in items]

    async def create_news(
        self,
        subject: str,
        body: str,
        published: bool = False,
        admin_only: bool = False,
    ) -> Dict[str, Any]:
        """
        Create a news item.

        Raises:
            BadRequestException: Missing subject/body or profanity, with
                per-field details
        """
        errors: Dict[str, str] = {}
        for field, value in (("subject", subject), ("body", body)):
            if not value or not value.strip():
                errors[field] = ErrorMessages.REQUIRED
            elif await self._profanity_filter.has_profanity(value):
                errors[field] = ErrorMessages.PROFANITY

        if errors:
            raise BadRequestException(
                message=ErrorMessages.MISSING_FIELDS,
                code="INVALID_NEWS",
                details=errors
            )

        news_doc = {
            "subject": subject.strip(),
            "body": body,
            "published": published,
            "publishDate": datetime.now(timezone.utc) if published else None,
            "adminOnly": admin_only,
        }

        result = await self._news_collection.insert_one(news_doc)
        news_doc["_id"] = result.inserted_id

        logger.info(f"Created news item {result.inserted_id} (published={published})")
        return self._format_news(news_doc)

    async def set_published(self, news_id: str, published: bool) -> Dict[str, Any]:
        """Publish (stamping the publish date) or unpublish an item."""
        updates: Dict[str, Any] = {"published": published}
        if published:
            updates["publishDate"] = datetime.now(timezone.utc)

        updated = await self._news_collection.find_one_and_update(
            {"_id": to_object_id(news_id, "news id")},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundException(message="News item not found", code="NEWS_NOT_FOUND")

        logger.info(f"News item {news_id} published={published}")
        return self._format_news(updated)

    async def delete_news(self, news_id: str) -> None:
        result = await self._news_collection.delete_one({"_id": to_object_id(news_id, "news id")})
        if result.deleted_count == 0:
            raise NotFoundException(message="News item not found", code="NEWS_NOT_FOUND")
        logger.info(f"Deleted news item {news_id}")

    def _format_news(self, news: Dict[str, Any]) -> Dict[str, Any]:
        publish_date = news.get("publishDate")
        return {
            "id": str(news["_id"]),
            "subject": news.get("subject"),
            "body": news.get("body"),
            "published": bool(news.get("published", False)),
            "publishDate": publish_date.isoformat() if publish_date else None,
            "adminOnly": bool(news.get("adminOnly", False)),
        }
