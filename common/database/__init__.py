"""
Database module - Generic async MongoDB connection using Motor.

Usage:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(uri, database_name)
    users = db.db["users"]
"""

from common.database.mongodb import MongoDB
from common.database.object_id import to_object_id

__all__ = ["MongoDB", "to_object_id"]
