"""
FastAPI router for news, FAQ and bonus question endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response, list_response
from nhc.dependencies import (
    get_faq_service,
    get_news_service,
    get_question_service,
    require_auth,
    require_global_admin,
)
from nhc.schemas.content import (
    AnswerQuestionRequest,
    CreateFAQRequest,
    CreateNewsRequest,
    CreateQuestionRequest,
    UpdateFAQRequest,
)
from nhc.services.auth.roles import Role, has_role
from nhc.services.content.faq_service import FAQService
from nhc.services.content.news_service import NewsService
from nhc.services.content.question_service import QuestionService

router = APIRouter(tags=["content"])


# ─────────────────────────────────────────────────────────────────
# News
# ─────────────────────────────────────────────────────────────────

@router.get("/news")
async def list_news(
    user: Annotated[dict, Depends(require_auth)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    """Published news; admin-only items are included for admins."""
    include_admin_only = has_role(user.get("role"), Role.ORG_ADMIN)
    return list_response(await news_service.list_published(include_admin_only))


@router.get("/admin/news")
async def list_all_news(
    admin: Annotated[dict, Depends(require_global_admin)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    return list_response(await news_service.list_all())


@router.post("/admin/news")
async def create_news(
    body: CreateNewsRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    item = await news_service.create_news(
        subject=body.subject,
        body=body.body,
        published=body.published,
        admin_only=body.adminOnly,
    )
    return success_response(item, message="News created.")


@router.delete("/admin/news/{news_id}")
async def delete_news(
    news_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    await news_service.delete_news(news_id)
    return success_response(message="News deleted.")


@router.put("/admin/news/{news_id}/publish")
async def publish_news(
    news_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    item = await news_service.set_published(news_id, True)
    return success_response(item, message="News published.")


@router.put("/admin/news/{news_id}/unpublish")
async def unpublish_news(
    news_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    news_service: Annotated[NewsService, Depends(get_news_service)],
):
    item = await news_service.set_published(news_id, False)
    return success_response(item, message="News unpublished.")


# ─────────────────────────────────────────────────────────────────
# FAQ
# ─────────────────────────────────────────────────────────────────

@router.get("/faq")
async def list_faqs(
    faq_service: Annotated[FAQService, Depends(get_faq_service)],
):
    return list_response(await faq_service.list_faqs())


@router.post("/admin/faq")
async def create_faq(
    body: CreateFAQRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    faq_service: Annotated[FAQService, Depends(get_faq_service)],
):
    faq = await faq_service.create_faq(body.question, body.answer, body.category)
    return success_response(faq, message="FAQ created.")


@router.put("/admin/faq")
async def update_faq(
    body: UpdateFAQRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    faq_service: Annotated[FAQService, Depends(get_faq_service)],
):
    faq = await faq_service.update_faq(body.id, body.question, body.answer, body.category)
    return success_response(faq, message="FAQ updated.")


@router.delete("/admin/faq/{faq_id}")
async def delete_faq(
    faq_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    faq_service: Annotated[FAQService, Depends(get_faq_service)],
):
    await faq_service.delete_faq(faq_id)
    return success_response(message="FAQ deleted.")


# ─────────────────────────────────────────────────────────────────
# Bonus question
# ─────────────────────────────────────────────────────────────────

@router.get("/bonus-question")
async def get_bonus_question(
    user: Annotated[dict, Depends(require_auth)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    """The enabled bonus question, unless the user already answered it."""
    return success_response(await question_service.get_for_user(user["email"]))


@router.post("/bonus-question")
async def answer_bonus_question(
    body: AnswerQuestionRequest,
    user: Annotated[dict, Depends(require_auth)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    result = await question_service.answer(user["email"], body.answer)
    return success_response(result, message=result["message"])


@router.get("/admin/bonus-question")
async def list_bonus_questions(
    admin: Annotated[dict, Depends(require_global_admin)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    return list_response(await question_service.list_all())


@router.post("/admin/bonus-question")
async def create_bonus_question(
    body: CreateQuestionRequest,
    admin: Annotated[dict, Depends(require_global_admin)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    question = await question_service.create_question(body.text, body.answers, body.correctAnswer)
    return success_response(question, message="Question created.")


@router.put("/admin/bonus-question/disable")
async def disable_bonus_questions(
    admin: Annotated[dict, Depends(require_global_admin)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    disabled = await question_service.disable_all()
    return success_response({"disabled": disabled}, message="Bonus questions disabled.")


@router.delete("/admin/bonus-question/{question_id}")
async def delete_bonus_question(
    question_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    await question_service.delete_question(question_id)
    return success_response(message="Question deleted.")


@router.put("/admin/bonus-question/{question_id}/enable")
async def enable_bonus_question(
    question_id: str,
    admin: Annotated[dict, Depends(require_global_admin)],
    question_service: Annotated[QuestionService, Depends(get_question_service)],
):
    await question_service.enable_question(question_id)
    return success_response(message="Question enabled.")
