"""Tests for admin bulk messaging."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import BadRequestException, ForbiddenException
from nhc.pipelines.messaging import build_recipient_query, send_message_pipeline


@pytest.fixture
def org_admin():
    return {"_id": ObjectId(), "role": "org_admin", "organization": "Virginia Tech"}


@pytest.fixture
def global_admin():
    return {"_id": ObjectId(), "role": "global_admin", "organization": "NHC"}


class TestBuildRecipientQuery:
    def test_unknown_status_rejected(self, global_admin):
        with pytest.raises(BadRequestException):
            build_recipient_query(global_admin, ["registered", "bogus"], ["user"])

    def test_empty_statuses_rejected(self, global_admin):
        with pytest.raises(BadRequestException):
            build_recipient_query(global_admin, [], ["user"])

    def test_global_admin_must_name_roles(self, global_admin):
        with pytest.raises(BadRequestException) as exc_info:
            build_recipient_query(global_admin, ["registered"], None)
        assert exc_info.value.code == "ROLES_REQUIRED"

    def test_global_admin_reaches_everyone(self, global_admin):
        query = build_recipient_query(global_admin, ["registered"], ["user", "global_admin"])

        assert query == {
            "status": {"$in": ["registered"]},
            "role": {"$in": ["user", "global_admin"]},
        }

    def test_org_admin_scoped_to_organization(self, org_admin):
        query = build_recipient_query(org_admin, ["registered", "unregistered"], None)

        assert query["organization"] == "Virginia Tech"
        assert query["role"] == {"$in": ["user", "org_admin", "org_super_admin"]}

    def test_org_admin_cannot_address_global_roles(self, org_admin):
        with pytest.raises(ForbiddenException):
            build_recipient_query(org_admin, ["registered"], ["global_admin"])


class TestSendMessagePipeline:
    @pytest.mark.asyncio
    async def test_incomplete_message(self, org_admin):
        with pytest.raises(BadRequestException) as exc_info:
            await send_message_pipeline(AsyncMock(), MagicMock(), org_admin, "  ", "body", ["registered"])
        assert exc_info.value.code == "MESSAGE_INCOMPLETE"

    @pytest.mark.asyncio
    async def test_no_recipients_skips_queue(self, org_admin):
        user_service = AsyncMock()
        user_service.find_recipient_emails.return_value = []
        notifications = MagicMock()

        result = await send_message_pipeline(
            user_service, notifications, org_admin, "Hello", "<p>Hi</p>", ["registered"]
        )

        assert result["jobId"] is None
        assert result["recipients"] == 0
        notifications.send_bulk.assert_not_called()

    @pytest.mark.asyncio
    async def test_queues_bulk_job(self, org_admin):
        user_service = AsyncMock()
        user_service.find_recipient_emails.return_value = ["a@example.com", "b@example.com"]
        notifications = MagicMock()
        notifications.send_bulk.return_value = MagicMock(id="job-1")

        result = await send_message_pipeline(
            user_service, notifications, org_admin, " Hello ", "<p>Hi</p>", ["registered"]
        )

        assert result == {
            "jobId": "job-1",
            "recipients": 2,
            "status": "Your message is being sent to 2 recipients.",
        }
        notifications.send_bulk.assert_called_once_with(["a@example.com", "b@example.com"], "Hello", "<p>Hi</p>")
