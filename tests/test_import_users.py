"""Tests for the CSV user import script."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import ConflictException
from config.messages import IMPORTED_PARTICIPANT_CATEGORY, UNKNOWN_COMMITMENT
from nhc.services.auth.roles import UserStatus
from scripts.import_users import find_commitment, import_users, parse_records


def _row(first, last, email, family="", organization="", commitment=""):
    row = [""] * 54
    row[1] = first
    row[2] = last
    row[4] = family
    row[5] = email
    row[6] = organization
    if commitment:
        row[30] = commitment
    return row


class TestParseRecords:
    def test_groups_consecutive_rows_by_email(self):
        users = parse_records([
            _row("Jane", "Doe", "Jane@Example.com", "doe0001", "YMCA", "Eat an apple"),
            _row("Sam", "Doe", "jane@example.com"),
            _row("Ann", "Lee", "ann@example.com"),
        ])

        assert [u["email"] for u in users] == ["jane@example.com", "ann@example.com"]
        jane = users[0]
        assert jane["family"] == "DOE0001"
        assert jane["organization"] == "YMCA"
        assert [p["id"] for p in jane["participants"]] == [0, 1]
        assert jane["participants"][0]["commitment"] == "Eat an apple"
        assert jane["participants"][1]["commitment"] == UNKNOWN_COMMITMENT
        assert jane["participants"][1]["category"] == IMPORTED_PARTICIPANT_CATEGORY
        assert users[1]["family"] is None

    def test_blank_emails_skipped(self):
        users = parse_records([_row("Nobody", "Here", "  ")])
        assert users == []

    def test_find_commitment(self):
        assert find_commitment(["", " ", " Drink water "]) == "Drink water"
        assert find_commitment([]) == UNKNOWN_COMMITMENT


class TestImportUsers:
    @pytest.mark.asyncio
    async def test_creates_users_and_counts_failures(self):
        users = parse_records([
            _row("Jane", "Doe", "jane@example.com"),
            _row("Ann", "Lee", "ann@example.com"),
        ])
        user_service = AsyncMock()
        user_service.create_user.side_effect = [
            {"_id": ObjectId(), "email": "jane@example.com", "firstName": "Jane"},
            ConflictException(message="User already exists. Please log in instead.", code="USER_EXISTS"),
        ]

        counts = await import_users(user_service, users)

        assert counts == {"created": 1, "failed": 1, "emailed": 0, "emailFailed": 0}
        kwargs = user_service.create_user.call_args_list[0].kwargs
        assert kwargs["status"] == UserStatus.REGISTERED
        assert kwargs["password"]

    @pytest.mark.asyncio
    async def test_sends_reset_mail_to_created_users(self):
        users = parse_records([_row("Jane", "Doe", "jane@example.com")])
        user_service = AsyncMock()
        user_service.create_user.return_value = {"_id": ObjectId(), "email": "jane@example.com", "firstName": "Jane"}
        user_service.set_reset_code.return_value = "reset-1"
        email_service = MagicMock()
        email_service.send_mail = AsyncMock()

        counts = await import_users(user_service, users, email_service)

        assert counts["emailed"] == 1
        email_service.reset_password_message.assert_called_once_with("Jane", "reset-1")
        email_service.send_mail.assert_called_once()
