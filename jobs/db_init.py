"""
Database initialization and integrity job.

Ensures indexes, optionally reseeds the reference data, and optionally
repairs user records.

Usage:
    python -m jobs.db_init              # indexes only
    python -m jobs.db_init --seed       # replace organizations, commitments and globals
    python -m jobs.db_init --check      # promote pending users, backfill scorecards
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, Any

from motor.motor_asyncio import AsyncIOMotorClient

from common.auth import JWTAuth
from nhc.config import settings
from nhc.database import ensure_indexes
from nhc.services.commitment.commitment_service import CommitmentService
from nhc.services.globals.globals_service import GlobalsService
from nhc.services.organization.organization_service import OrganizationService
from nhc.services.user.user_service import UserService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class DatabaseInitJob:
    """
    Prepares the database for a campaign.

    Actions performed:
    1. Creates any missing indexes
    2. With seed: replaces organizations and commitments from the seed
       files and resets globals to the defaults
    3. With check: moves every pending user to registered and gives each
       participant lacking a scorecard an empty one
    """

    def __init__(self, db_uri: str, db_name: str):
        """
        Initialize the job.

        Args:
            db_uri: MongoDB connection string
            db_name: Database name
        """
        self._client = AsyncIOMotorClient(db_uri, tz_aware=True)
        self._db = self._client[db_name]

        self._globals_service = GlobalsService(db=self._db)
        self._organization_service = OrganizationService(db=self._db)
        self._commitment_service = CommitmentService(db=self._db)
        # Password hashing is unused here; any key satisfies the constructor.
        self._user_service = UserService(db=self._db, jwt_auth=JWTAuth(secret="db-init"))

    async def run(self, seed: bool = False, check: bool = False) -> Dict[str, Any]:
        """
        Run the requested steps.

        Returns:
            Counts for each step that ran
        """
        results: Dict[str, Any] = {}

        await ensure_indexes(self._db)
        results["indexes"] = True

        if seed:
            results["organizationsSeeded"] = await self._organization_service.seed_from_file(
                settings.ORGANIZATIONS_SEED_FILE
            )
            results["commitmentsSeeded"] = await self._commitment_service.seed_from_file(
                settings.COMMITMENTS_SEED_FILE
            )
            await self._globals_service.reset()
            results["globalsReset"] = True

        if check:
            globals_snapshot = await self._globals_service.load()
            results["pendingPromoted"] = await self._user_service.promote_pending()
            results["scorecardsBackfilled"] = await self._user_service.backfill_scorecards(
                globals_snapshot.challenge_length
            )

        return results

    def close(self) -> None:
        """Close the database connection."""
        self._client.close()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initialize the NHC database.")
    parser.add_argument("--seed", action="store_true", help="replace organizations, commitments and globals")
    parser.add_argument("--check", action="store_true", help="promote pending users and backfill scorecards")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main entry point for the database init job."""
    args = parse_args(argv)

    job = DatabaseInitJob(db_uri=settings.MONGODB_URI, db_name=settings.MONGODB_DATABASE)
    try:
        results = await job.run(seed=args.seed, check=args.check)
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=e)
        return 1
    finally:
        job.close()

    print("\n=== Database Init Results ===")
    for key, value in results.items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
