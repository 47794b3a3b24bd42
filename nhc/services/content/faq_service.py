"""
FAQ service.
"""

import logging
from typing import List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from common.utils.exceptions import BadRequestException, NotFoundException
from config.messages import ErrorMessages

logger = logging.getLogger(__name__)

FAQ_FIELDS = ("question", "answer", "category")


class FAQService:
    """
    Manages frequently asked questions.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._faqs_collection = db["faqs"]

    async def list_faqs(self) -> List[Dict[str, Any]]:
        cursor = self._faqs_collection.find({}).sort([("category", 1), ("_id", 1)])
        faqs = await cursor.to_list(length=None)
        return [self._format_faq(f) for f in faqs]

    async def create_faq(self, question: str, answer: str, category: str) -> Dict[str, Any]:
        faq_doc = self._validate(question=question, answer=answer, category=category)

        result = await self._faqs_collection.insert_one(faq_doc)
        faq_doc["_id"] = result.inserted_id

        logger.info(f"Created FAQ {result.inserted_id}")
        return self._format_faq(faq_doc)

    async def update_faq(self, faq_id: str, question: str, answer: str, category: str) -> Dict[str, Any]:
        faq_doc = self._validate(question=question, answer=answer, category=category)

        updated = await self._faqs_collection.find_one_and_update(
            {"_id": to_object_id(faq_id, "FAQ id")},
            {"$set": faq_doc},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundException(message="FAQ not found", code="FAQ_NOT_FOUND")

        logger.info(f"Updated FAQ {faq_id}")
        return self._format_faq(updated)

    async def delete_faq(self, faq_id: str) -> None:
        result = await self._faqs_collection.delete_one({"_id": to_object_id(faq_id, "FAQ id")})
        if result.deleted_count == 0:
            raise NotFoundException(message="FAQ not found", code="FAQ_NOT_FOUND")
        logger.info(f"Deleted FAQ {faq_id}")

    def _validate(self, **fields: str) -> Dict[str, str]:
        # All three fields are required
        errors = {
            name: ErrorMessages.REQUIRED
            for name, value in fields.items()
            if not value or not value.strip()
        }
        if errors:
            raise BadRequestException(
                message=ErrorMessages.MISSING_FIELDS,
                code="INVALID_FAQ",
                details=errors
            )
        return {name: value.strip() for name, value in fields.items()}

    def _format_faq(self, faq: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(faq["_id"]),
            **{field: faq.get(field) for field in FAQ_FIELDS},
        }
