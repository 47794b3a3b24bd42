"""
Profanity filter for user-submitted text.

Checks a local word list first and, when configured, asks a remote
filter API. The remote check fails open: network errors and malformed
replies are logged and the text is treated as clean.
"""

import logging
import re
from typing import Iterable, Optional
from urllib.parse import quote_plus

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BLOCKED_WORDS = (
    "asshole",
    "bastard",
    "bitch",
    "cunt",
    "fuck",
    "motherfucker",
    "shit",
)

_NON_WORD = re.compile(r"\W+")


def add_spaces(text: str) -> str:
    """Collapse every run of non-word characters into a single space."""
    return _NON_WORD.sub(" ", text).strip()


class ProfanityFilter:
    """Detects profanity in free text."""

    def __init__(
        self,
        blocked_words: Optional[Iterable[str]] = None,
        api_url: Optional[str] = None,
        timeout: float = 3.0,
    ):
        """
        Initialize ProfanityFilter.

        Args:
            blocked_words: Extra words to block on top of the built-in list
            api_url: Remote filter endpoint; the query is appended to it and
                the reply is expected as {"response": "true" | "false"}
            timeout: Remote request timeout in seconds
        """
        self._blocked = set(DEFAULT_BLOCKED_WORDS)
        self._blocked.update(w.lower() for w in (blocked_words or []))
        self._api_url = api_url
        self._timeout = timeout

    async def has_profanity(self, text: Optional[str]) -> bool:
        """
        Check text for profanity.

        Args:
            text: Text to check; empty values are always clean

        Returns:
            True if the text contains a blocked word
        """
        if not text:
            return False

        normalized = add_spaces(text)
        if not normalized:
            return False

        words = normalized.lower().split()
        if any(word in self._blocked for word in words):
            return True

        if self._api_url:
            return await self._query_remote(normalized)

        return False

    async def _query_remote(self, query: str) -> bool:
        url = f"{self._api_url}{quote_plus(query)}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url)
            if response.status_code != 200:
                logger.warning(f"Profanity API returned {response.status_code}")
                return False
            data = response.json()
            if not isinstance(data, dict):
                return False
            return str(data.get("response", "")).lower() == "true"
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Profanity API request failed: {e}")
            return False
