"""
Family code service.

A family code links several registrations into one household. Codes
are the registrant's upper-cased last name followed by four digits.
"""

import logging
import random
import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

_NON_LETTERS = re.compile(r"[^A-Z]")

DEFAULT_FAMILY_PREFIX = "FAMILY"


def create_code(last_name: Optional[str], rng: Optional[random.Random] = None) -> str:
    """
    Build a candidate family code.

    Args:
        last_name: Registrant's last name
        rng: Random source (tests pass a seeded one)

    Returns:
        e.g. "SMITH0427"
    """
    prefix = _NON_LETTERS.sub("", (last_name or "").upper()) or DEFAULT_FAMILY_PREFIX
    digits = (rng or random).randint(0, 9999)
    return f"{prefix}{digits:04d}"


class FamilyService:
    """
    Issues and checks family codes.
    """

    def __init__(self, db: AsyncIOMotorDatabase, max_attempts: int = 100):
        """
        Initialize FamilyService.

        Args:
            db: MongoDB database connection
            max_attempts: Collisions tolerated before giving up
        """
        self._families_collection = db["families"]
        self._max_attempts = max_attempts

    async def exists(self, code: Optional[str]) -> bool:
        if not code:
            return False
        found = await self._families_collection.find_one({"code": code.strip().upper()})
        return found is not None

    async def generate_code(self, last_name: Optional[str]) -> str:
        """
        Generate and reserve a family code that isn't in use.

        Candidates are regenerated until one is free; a concurrent insert
        of the same code (duplicate key) also triggers a retry.

        Raises:
            RuntimeError: No free code after max_attempts candidates
        """
        for _ in range(self._max_attempts):
            code = create_code(last_name)
            if await self.exists(code):
                continue
            try:
                await self._families_collection.insert_one({"code": code})
            except DuplicateKeyError:
                continue
            logger.info(f"Generated family code {code}")
            return code

        raise RuntimeError(f"Could not generate a free family code for {last_name!r}")
