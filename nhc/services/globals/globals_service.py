"""
Campaign globals service.

Globals is a singleton document (challenge dates and feature flags)
that nearly every request reads and only admins write. The current
value is held as an immutable snapshot: readers take the reference
without locking, writers persist and then swap the reference while
holding a lock so concurrent updates apply in order.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import BadRequestException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CampaignGlobals:
    challenge_start: datetime
    challenge_end: datetime
    registration_open: bool = True
    scorecard_enabled: bool = False

    @property
    def challenge_length(self) -> int:
        """Number of challenge days, both ends inclusive."""
        return (self.challenge_end.date() - self.challenge_start.date()).days + 1

    def current_day(self, today: Optional[date] = None) -> int:
        """Zero-based challenge day for today; negative before the start."""
        today = today or datetime.now(timezone.utc).date()
        return (today - self.challenge_start.date()).days

    def to_document(self) -> Dict[str, Any]:
        return {
            "challengeStart": self.challenge_start,
            "challengeEnd": self.challenge_end,
            "challengeLength": self.challenge_length,
            "registrationOpen": self.registration_open,
            "scorecardEnabled": self.scorecard_enabled,
        }

    def to_response(self) -> Dict[str, Any]:
        doc = self.to_document()
        doc["challengeStart"] = self.challenge_start.isoformat()
        doc["challengeEnd"] = self.challenge_end.isoformat()
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CampaignGlobals":
        return cls(
            challenge_start=_as_utc(doc["challengeStart"]),
            challenge_end=_as_utc(doc["challengeEnd"]),
            registration_open=bool(doc.get("registrationOpen", True)),
            scorecard_enabled=bool(doc.get("scorecardEnabled", False)),
        )


DEFAULT_GLOBALS = CampaignGlobals(
    challenge_start=datetime(2016, 2, 1, tzinfo=timezone.utc),
    challenge_end=datetime(2016, 2, 29, tzinfo=timezone.utc),
    registration_open=True,
    scorecard_enabled=False,
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class GlobalsService:
    """
    Loads, caches and updates the campaign globals.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize GlobalsService.

        Args:
            db: MongoDB database connection
        """
        self._globals_collection = db["globals"]
        self._current: Optional[CampaignGlobals] = None
        self._write_lock = asyncio.Lock()

    @property
    def current(self) -> CampaignGlobals:
        """
        The cached globals snapshot.

        Raises:
            RuntimeError: load() hasn't run yet
        """
        snapshot = self._current
        if snapshot is None:
            raise RuntimeError("Globals not loaded. Call load() first.")
        return snapshot

    async def load(self) -> CampaignGlobals:
        """
        Read globals from the database into the cache.

        Inserts the defaults when no globals document exists yet.
        """
        async with self._write_lock:
            doc = await self._globals_collection.find_one({})
            if doc is None:
                logger.warning("No globals document found, inserting defaults")
                await self._globals_collection.insert_one(DEFAULT_GLOBALS.to_document())
                snapshot = DEFAULT_GLOBALS
            else:
                snapshot = CampaignGlobals.from_document(doc)

            self._current = snapshot

        logger.info(
            f"Globals loaded: {snapshot.challenge_start.date()} to {snapshot.challenge_end.date()}, "
            f"registrationOpen={snapshot.registration_open}, scorecardEnabled={snapshot.scorecard_enabled}"
        )
        return snapshot

    async def update(
        self,
        challenge_start: Optional[datetime] = None,
        challenge_end: Optional[datetime] = None,
        registration_open: Optional[bool] = None,
        scorecard_enabled: Optional[bool] = None,
    ) -> CampaignGlobals:
        """
        Persist new globals and refresh the cache.

        Omitted values keep their current setting. The challenge length is
        always recomputed from the dates.

        Raises:
            BadRequestException: End date before start date
        """
        async with self._write_lock:
            base = self._current or DEFAULT_GLOBALS
            changes: Dict[str, Any] = {}
            if challenge_start is not None:
                changes["challenge_start"] = _as_utc(challenge_start)
            if challenge_end is not None:
                changes["challenge_end"] = _as_utc(challenge_end)
            if registration_open is not None:
                changes["registration_open"] = registration_open
            if scorecard_enabled is not None:
                changes["scorecard_enabled"] = scorecard_enabled

            snapshot = replace(base, **changes)
            if snapshot.challenge_end.date() < snapshot.challenge_start.date():
                raise BadRequestException(
                    message="The challenge must end on or after its start date",
                    code="INVALID_CHALLENGE_DATES"
                )

            await self._globals_collection.update_one(
                {},
                {"$set": snapshot.to_document()},
                upsert=True,
            )
            self._current = snapshot

        logger.info(f"Globals updated: {snapshot.to_response()}")
        return snapshot

    async def reset(self) -> CampaignGlobals:
        """Replace the stored globals with the defaults."""
        async with self._write_lock:
            await self._globals_collection.delete_many({})
            await self._globals_collection.insert_one(DEFAULT_GLOBALS.to_document())
            self._current = DEFAULT_GLOBALS

        logger.info("Globals reset to defaults")
        return DEFAULT_GLOBALS
