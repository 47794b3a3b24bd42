"""Tests for news, FAQ and bonus question services."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import BadRequestException, ForbiddenException, NotFoundException
from config.messages import ErrorMessages
from nhc.services.content import FAQService, NewsService, QuestionService
from nhc.services.moderation.profanity_filter import ProfanityFilter


@pytest.fixture
def profanity_filter():
    return ProfanityFilter()


# ─────────────────────────────────────────────────────────────────
# News
# ─────────────────────────────────────────────────────────────────


class TestNewsService:
    @pytest.mark.asyncio
    async def test_published_listing_hides_admin_only(self, mock_db, mock_collection, profanity_filter, make_cursor):
        mock_collection.find.return_value = make_cursor([])
        service = NewsService(mock_db, profanity_filter)

        await service.list_published()

        assert mock_collection.find.call_args.args[0] == {"published": True, "adminOnly": {"$ne": True}}

    @pytest.mark.asyncio
    async def test_admin_listing_includes_admin_only(self, mock_db, mock_collection, profanity_filter, make_cursor):
        mock_collection.find.return_value = make_cursor([])
        service = NewsService(mock_db, profanity_filter)

        await service.list_published(include_admin_only=True)

        assert mock_collection.find.call_args.args[0] == {"published": True}

    @pytest.mark.asyncio
    async def test_create_rejects_blank_and_profane(self, mock_db, mock_collection, profanity_filter):
        service = NewsService(mock_db, profanity_filter)

        with pytest.raises(BadRequestException) as exc_info:
            await service.create_news("", "what the fuck")

        assert exc_info.value.detail["details"] == {
            "subject": ErrorMessages.REQUIRED,
            "body": ErrorMessages.PROFANITY,
        }
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_published_stamps_date(self, mock_db, mock_collection, profanity_filter):
        mock_collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
        service = NewsService(mock_db, profanity_filter)

        item = await service.create_news(" Kickoff ", "See you soon", published=True)

        assert item["subject"] == "Kickoff"
        assert item["publishDate"] is not None

    @pytest.mark.asyncio
    async def test_create_draft_has_no_date(self, mock_db, mock_collection, profanity_filter):
        mock_collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
        service = NewsService(mock_db, profanity_filter)

        item = await service.create_news("Kickoff", "See you soon")

        assert item["published"] is False
        assert item["publishDate"] is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_db, mock_collection, profanity_filter):
        mock_collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

        with pytest.raises(NotFoundException):
            await NewsService(mock_db, profanity_filter).delete_news(str(ObjectId()))


# ─────────────────────────────────────────────────────────────────
# FAQ
# ─────────────────────────────────────────────────────────────────


class TestFAQService:
    @pytest.mark.asyncio
    async def test_all_fields_required(self, mock_db):
        with pytest.raises(BadRequestException) as exc_info:
            await FAQService(mock_db).create_faq("Why?", " ", None)

        assert exc_info.value.detail["details"] == {
            "answer": ErrorMessages.REQUIRED,
            "category": ErrorMessages.REQUIRED,
        }

    @pytest.mark.asyncio
    async def test_update_missing(self, mock_db, mock_collection):
        mock_collection.find_one_and_update = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException):
            await FAQService(mock_db).update_faq(str(ObjectId()), "Q", "A", "General")

    @pytest.mark.asyncio
    async def test_malformed_id(self, mock_db):
        with pytest.raises(BadRequestException):
            await FAQService(mock_db).delete_faq("123")


# ─────────────────────────────────────────────────────────────────
# Bonus questions
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def enabled_question():
    return {
        "_id": ObjectId(),
        "text": "Which is a vegetable?",
        "answers": ["Carrot", "Apple"],
        "correctAnswer": "Carrot",
        "enabled": True,
        "respondents": [{"user": "sam@example.com", "answeredCorrectly": False}],
    }


class TestQuestionService:
    @pytest.mark.asyncio
    async def test_hidden_after_answering(self, mock_db, mock_collection, profanity_filter, enabled_question):
        mock_collection.find_one = AsyncMock(return_value=enabled_question)
        service = QuestionService(mock_db, profanity_filter)

        assert await service.get_for_user("sam@example.com") == {"enabled": False}
        shown = await service.get_for_user("jane@example.com")
        assert shown == {
            "enabled": True,
            "question": {"text": "Which is a vegetable?", "answers": ["Carrot", "Apple"]},
        }

    @pytest.mark.asyncio
    async def test_answer_records_correctness(self, mock_db, mock_collection, profanity_filter, enabled_question):
        mock_collection.find_one = AsyncMock(return_value=enabled_question)
        mock_collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
        service = QuestionService(mock_db, profanity_filter)

        result = await service.answer("jane@example.com", "Carrot")

        assert result["correct"] is True
        query, update = mock_collection.update_one.call_args.args
        assert query["respondents.user"] == {"$ne": "jane@example.com"}
        assert update == {"$push": {"respondents": {"user": "jane@example.com", "answeredCorrectly": True}}}

    @pytest.mark.asyncio
    async def test_second_answer_forbidden(self, mock_db, mock_collection, profanity_filter, enabled_question):
        mock_collection.find_one = AsyncMock(return_value=enabled_question)
        mock_collection.update_one = AsyncMock(return_value=MagicMock(modified_count=0))

        with pytest.raises(ForbiddenException) as exc_info:
            await QuestionService(mock_db, profanity_filter).answer("sam@example.com", "Apple")
        assert exc_info.value.code == "ALREADY_ANSWERED"

    @pytest.mark.asyncio
    async def test_no_enabled_question(self, mock_db, mock_collection, profanity_filter):
        mock_collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(ForbiddenException):
            await QuestionService(mock_db, profanity_filter).answer("jane@example.com", "Carrot")

    @pytest.mark.asyncio
    async def test_correct_answer_must_be_a_choice(self, mock_db, profanity_filter):
        with pytest.raises(BadRequestException) as exc_info:
            await QuestionService(mock_db, profanity_filter).create_question(
                "Which is a vegetable?", ["Carrot", "Apple"], "Potato"
            )
        assert exc_info.value.detail["details"] == {"correctAnswer": ErrorMessages.BAD_CHOICE}

    @pytest.mark.asyncio
    async def test_new_question_starts_disabled(self, mock_db, mock_collection, profanity_filter):
        mock_collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))

        question = await QuestionService(mock_db, profanity_filter).create_question(
            "Which is a vegetable?", ["Carrot", " ", "Apple"], "Carrot"
        )

        assert question["enabled"] is False
        assert question["answers"] == ["Carrot", "Apple"]
        assert question["respondentCount"] == 0

    @pytest.mark.asyncio
    async def test_enable_disables_others(self, mock_db, mock_collection, profanity_filter):
        question_id = ObjectId()
        mock_collection.find_one = AsyncMock(return_value={"_id": question_id})

        await QuestionService(mock_db, profanity_filter).enable_question(str(question_id))

        mock_collection.update_many.assert_called_once_with(
            {"enabled": True, "_id": {"$ne": question_id}},
            {"$set": {"enabled": False}},
        )
        mock_collection.update_one.assert_called_once_with(
            {"_id": question_id},
            {"$set": {"enabled": True}},
        )
