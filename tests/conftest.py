"""Shared test fixtures for NHC backend tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.auth import JWTAuth

TEST_SECRET = "test-secret-key-for-nhc"


@pytest.fixture
def jwt_auth():
    return JWTAuth(secret=TEST_SECRET)


@pytest.fixture
def sample_user_id():
    return ObjectId()


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # update_one etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


def _make_cursor(docs):
    cursor = MagicMock()
    cursor.sort = MagicMock(return_value=cursor)
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def make_cursor():
    """Motor-style cursor factory: chainable sort(), awaitable to_list()."""
    return _make_cursor


@pytest.fixture
def sample_user_doc(sample_user_id):
    now = datetime.now(timezone.utc)
    return {
        "_id": sample_user_id,
        "email": "jane@example.com",
        "password": None,
        "firstName": "Jane",
        "lastName": "O'Neil",
        "organization": "Virginia Tech",
        "role": "user",
        "status": "unregistered",
        "participants": [],
        "createdOn": now,
        "lastLogin": now,
    }


@pytest.fixture
def registered_user_doc(sample_user_doc):
    doc = dict(sample_user_doc)
    doc["status"] = "registered"
    doc["participants"] = [
        {"id": 0, "firstName": "Jane", "points": 0, "scorecard": [[0] * 7 for _ in range(4)]},
        {"id": 1, "firstName": "Sam", "points": 0, "scorecard": [[0] * 7 for _ in range(4)]},
    ]
    return doc
