"""
MongoDB connection manager using Motor.

The API process holds a single client, so every request shares one
connection pool. Services receive the database handle once at startup
and the pool is closed on shutdown.

Example:
    from common.database import MongoDB

    main_db = MongoDB()
    await main_db.connect(uri="mongodb://localhost:27017", database_name="nhc")
    users = main_db.db["users"]
    ...
    await main_db.disconnect()
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


def mask_uri(uri: str) -> str:
    """Drop credentials from a connection string for logging."""
    return uri.rsplit("@", 1)[-1]


class MongoDB:
    """Owns the process-wide Motor client."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None

    async def connect(
        self,
        uri: str,
        database_name: str,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """
        Open the client and ping the server.

        Datetimes come back timezone-aware (UTC) so challenge dates
        compare cleanly with datetime.now(timezone.utc).

        Raises:
            RuntimeError: Already connected
            pymongo.errors.PyMongoError: Server unreachable
        """
        if self._client is not None:
            raise RuntimeError("Database already connected")

        logger.info(f"Connecting to MongoDB: {mask_uri(uri)}")
        client = AsyncIOMotorClient(
            uri,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
            tz_aware=True,
        )
        try:
            await client.admin.command("ping")
        except Exception as e:
            client.close()
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        self._client = client
        self._database_name = database_name
        logger.info(f"Successfully connected to MongoDB database: {database_name}")

    async def disconnect(self) -> None:
        if self._client is None:
            return
        logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
        self._client.close()
        self._client = None
        self._database_name = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """
        The application database.

        Raises:
            RuntimeError: connect() hasn't run
        """
        if self._client is None:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]
