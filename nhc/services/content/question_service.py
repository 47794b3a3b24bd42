"""
Bonus question service.

At most one bonus question is enabled at a time. Each user may answer
the enabled question once; answers are recorded as respondents on the
question document.
"""

import logging
from typing import List, Dict, Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.database import to_object_id
from common.utils.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
)
from config.messages import ErrorMessages
from nhc.services.moderation.profanity_filter import ProfanityFilter

logger = logging.getLogger(__name__)

CORRECT_ANSWER_MESSAGE = "Your submission was received and you answered the question correctly."
INCORRECT_ANSWER_MESSAGE = "Your submission was received but you answered the question incorrectly."


class QuestionService:
    """
    Manages bonus questions and their respondents.
    """

    def __init__(self, db: AsyncIOMotorDatabase, profanity_filter: ProfanityFilter):
        """
        Initialize QuestionService.

        Args:
            db: MongoDB database connection
            profanity_filter: For checking question text and answers
        """
        self._questions_collection = db["questions"]
        self._profanity_filter = profanity_filter

    # ─────────────────────────────────────────────────────────────────
    # Participant-facing
    # ─────────────────────────────────────────────────────────────────

    async def get_enabled(self) -> Optional[Dict[str, Any]]:
        return await self._questions_collection.find_one({"enabled": True})

    async def get_for_user(self, email: str) -> Dict[str, Any]:
        """
        The enabled question as the user should see it.

        Returns:
            {"enabled": False} when there is nothing to answer, otherwise
            {"enabled": True, "question": {"text", "answers"}}
        """
        question = await self.get_enabled()
        if not question or self._has_answered(question, email):
            return {"enabled": False}

        return {
            "enabled": True,
            "question": {
                "text": question.get("text"),
                "answers": question.get("answers", []),
            },
        }

    async def answer(self, email: str, answer: str) -> Dict[str, Any]:
        """
        Record a user's answer to the enabled question.

        The respondent is appended only if the user isn't already listed,
        so concurrent submissions record at most one answer.

        Returns:
            {"correct": bool, "message": str}

        Raises:
            ForbiddenException: No enabled question, or already answered
        """
        question = await self.get_enabled()
        if not question:
            raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="NO_BONUS_QUESTION")

        correct = answer == question.get("correctAnswer")

        result = await self._questions_collection.update_one(
            {"_id": question["_id"], "enabled": True, "respondents.user": {"$ne": email}},
            {"$push": {"respondents": {"user": email, "answeredCorrectly": correct}}}
        )
        if result.modified_count == 0:
            raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="ALREADY_ANSWERED")

        logger.info(f"Bonus question {question['_id']} answered by {email} (correct={correct})")
        return {
            "correct": correct,
            "message": CORRECT_ANSWER_MESSAGE if correct else INCORRECT_ANSWER_MESSAGE,
        }

    # ─────────────────────────────────────────────────────────────────
    # Admin
    # ─────────────────────────────────────────────────────────────────

    async def list_all(self) -> List[Dict[str, Any]]:
        cursor = self._questions_collection.find({}).sort("_id", -1)
        questions = await cursor.to_list(length=None)
        return [self._format_question(q) for q in questions]

    async def create_question(
        self,
        text: str,
        answers: List[str],
        correct_answer: str,
    ) -> Dict[str, Any]:
        """
        Create a disabled bonus question.

        Raises:
            BadRequestException: Missing fields, profanity, or a correct
                answer that isn't one of the choices
        """
        answers = [a.strip() for a in (answers or []) if a and a.strip()]
        text = (text or "").strip()
        correct_answer = (correct_answer or "").strip()

        errors: Dict[str, str] = {}
        if not text:
            errors["text"] = ErrorMessages.REQUIRED
        elif await self._profanity_filter.has_profanity(text):
            errors["text"] = ErrorMessages.PROFANITY

        if not answers:
            errors["answers"] = ErrorMessages.REQUIRED
        else:
            for answer in answers:
                if await self._profanity_filter.has_profanity(answer):
                    errors["answers"] = ErrorMessages.PROFANITY
                    break

        if not correct_answer:
            errors["correctAnswer"] = ErrorMessages.REQUIRED
        elif answers and correct_answer not in answers:
            errors["correctAnswer"] = ErrorMessages.BAD_CHOICE

        if errors:
            raise BadRequestException(
                message=ErrorMessages.MISSING_FIELDS,
                code="INVALID_QUESTION",
                details=errors
            )

        question_doc = {
            "text": text,
            "answers": answers,
            "correctAnswer": correct_answer,
            "enabled": False,
            "respondents": [],
        }

        result = await self._questions_collection.insert_one(question_doc)
        question_doc["_id"] = result.inserted_id

        logger.info(f"Created bonus question {result.inserted_id}")
        return self._format_question(question_doc)

    async def delete_question(self, question_id: str) -> None:
        result = await self._questions_collection.delete_one(
            {"_id": to_object_id(question_id, "question id")}
        )
        if result.deleted_count == 0:
            raise NotFoundException(message="Question not found", code="QUESTION_NOT_FOUND")
        logger.info(f"Deleted bonus question {question_id}")

    async def enable_question(self, question_id: str) -> None:
        """Make one question the only enabled question."""
        object_id = to_object_id(question_id, "question id")
        if not await self._questions_collection.find_one({"_id": object_id}, {"_id": 1}):
            raise NotFoundException(message="Question not found", code="QUESTION_NOT_FOUND")

        await self._questions_collection.update_many(
            {"enabled": True, "_id": {"$ne": object_id}},
            {"$set": {"enabled": False}}
        )
        await self._questions_collection.update_one(
            {"_id": object_id},
            {"$set": {"enabled": True}}
        )
        logger.info(f"Enabled bonus question {question_id}")

    async def disable_all(self) -> int:
        result = await self._questions_collection.update_many(
            {"enabled": True},
            {"$set": {"enabled": False}}
        )
        logger.info(f"Disabled {result.modified_count} bonus questions")
        return result.modified_count

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _has_answered(question: Dict[str, Any], email: str) -> bool:
        return any(r.get("user") == email for r in question.get("respondents") or [])

    def _format_question(self, question: Dict[str, Any]) -> Dict[str, Any]:
        respondents = question.get("respondents") or []
        return {
            "id": str(question["_id"]),
            "text": question.get("text"),
            "answers": question.get("answers", []),
            "correctAnswer": question.get("correctAnswer"),
            "enabled": bool(question.get("enabled", False)),
            "respondents": respondents,
            "respondentCount": len(respondents),
            "correctCount": sum(1 for r in respondents if r.get("answeredCorrectly")),
        }
