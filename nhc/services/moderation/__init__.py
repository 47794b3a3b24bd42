"""Moderation services."""

from nhc.services.moderation.profanity_filter import ProfanityFilter

__all__ = [
    "ProfanityFilter",
]
