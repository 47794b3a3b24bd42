"""Tests for the background mail dispatcher."""

import pytest
from unittest.mock import AsyncMock

from common.utils.exceptions import ServiceUnavailableException
from nhc.services.email.email_service import EmailDeliveryError, EmailService
from nhc.services.notifications.dispatcher import JobStatus, NotificationDispatcher


@pytest.fixture
def email_service():
    service = EmailService(mode="console", site_url="https://nhc.example")
    service.send_mail = AsyncMock()
    return service


@pytest.fixture
def dispatcher(email_service):
    return NotificationDispatcher(email_service, max_queue_size=10, workers=2, bulk_delay=0)


class TestDispatcher:
    @pytest.mark.asyncio
    async def test_bulk_job_sends_to_every_recipient(self, dispatcher, email_service):
        await dispatcher.start()
        try:
            job = dispatcher.send_bulk(["a@example.com", "b@example.com"], "Hello", "<p>Hi</p>")
            await dispatcher.join()
        finally:
            await dispatcher.stop()

        assert job.status == JobStatus.SENT
        assert job.sent == 2
        assert email_service.send_mail.call_count == 2
        assert dispatcher.get_job(job.id).to_dict()["recipients"] == 2

    @pytest.mark.asyncio
    async def test_partial_failure_is_recorded(self, dispatcher, email_service):
        email_service.send_mail.side_effect = [None, EmailDeliveryError("nope")]

        await dispatcher.start()
        try:
            job = dispatcher.send_bulk(["a@example.com", "b@example.com"], "Hello", "<p>Hi</p>")
            await dispatcher.join()
        finally:
            await dispatcher.stop()

        assert job.status == JobStatus.PARTIAL
        assert job.failed_recipients == ["b@example.com"]
        assert job.finished_at is not None

    @pytest.mark.asyncio
    async def test_all_failed(self, dispatcher, email_service):
        email_service.send_mail.side_effect = EmailDeliveryError("nope")

        await dispatcher.start()
        try:
            job = dispatcher.send_verification({"email": "a@example.com", "firstName": "Jane", "code": "abc"})
            await dispatcher.join()
        finally:
            await dispatcher.stop()

        assert job.status == JobStatus.FAILED
        assert "/verify/abc" in job.message.html

    @pytest.mark.asyncio
    async def test_full_queue_is_refused(self, email_service):
        dispatcher = NotificationDispatcher(email_service, max_queue_size=1)

        dispatcher.send_bulk(["a@example.com"], "One", "1")
        with pytest.raises(ServiceUnavailableException) as exc_info:
            dispatcher.send_bulk(["b@example.com"], "Two", "2")
        assert exc_info.value.code == "MAIL_QUEUE_FULL"

    @pytest.mark.asyncio
    async def test_full_queue_drops_transactional_mail(self, email_service):
        dispatcher = NotificationDispatcher(email_service, max_queue_size=1)
        dispatcher.send_bulk(["a@example.com"], "One", "1")

        job = dispatcher.send_verification({"email": "b@example.com", "firstName": "Jane", "code": "abc"})

        assert job is None
        assert dispatcher.send_password_reset({"email": "b@example.com", "resetCode": "r-1"}) is None

    @pytest.mark.asyncio
    async def test_stop_drains_queue(self, dispatcher, email_service):
        job = dispatcher.send_password_reset({"email": "a@example.com", "resetCode": "r-1"})

        await dispatcher.start()
        await dispatcher.stop()

        assert job.status == JobStatus.SENT
        assert not dispatcher.is_running

    def test_unknown_job(self, dispatcher):
        assert dispatcher.get_job("missing") is None
