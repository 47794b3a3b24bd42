"""Content services."""

from nhc.services.content.news_service import NewsService
from nhc.services.content.faq_service import FAQService
from nhc.services.content.question_service import QuestionService

__all__ = [
    "NewsService",
    "FAQService",
    "QuestionService",
]
