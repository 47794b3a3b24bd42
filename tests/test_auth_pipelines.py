"""Tests for the login, signup, verification and password reset pipelines."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from common.utils.exceptions import BadRequestException, NotFoundException
from nhc.pipelines.auth import (
    FORGOT_PASSWORD_MESSAGE,
    forgot_password_pipeline,
    login_pipeline,
    resend_verification_pipeline,
    reset_password_pipeline,
    signup_pipeline,
    verify_email_pipeline,
)
from nhc.services.auth.roles import UserStatus
from nhc.services.email.email_service import EmailService
from nhc.services.notifications.dispatcher import NotificationDispatcher


@pytest.fixture
def user_service():
    return AsyncMock()


@pytest.fixture
def notifications():
    return MagicMock()


# ─────────────────────────────────────────────────────────────────
# Login / signup
# ─────────────────────────────────────────────────────────────────


class TestLogin:
    @pytest.mark.asyncio
    async def test_missing_credentials(self, user_service, jwt_auth):
        with pytest.raises(BadRequestException):
            await login_pipeline(user_service, jwt_auth, "jane@example.com", None)
        user_service.authenticate.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_token_for_user(self, user_service, jwt_auth, sample_user_doc):
        user_service.authenticate.return_value = sample_user_doc

        result = await login_pipeline(user_service, jwt_auth, "jane@example.com", "hunter222")

        payload = await jwt_auth.verify_token(result["token"])
        assert payload["sub"] == str(sample_user_doc["_id"])
        user_service.touch_last_login.assert_called_once_with(sample_user_doc["_id"])


class TestSignup:
    @pytest.mark.asyncio
    async def test_short_password_rejected(self, user_service, jwt_auth, notifications):
        with pytest.raises(BadRequestException) as exc_info:
            await signup_pipeline(user_service, jwt_auth, notifications, "jane@example.com", "short")
        assert exc_info.value.code == "WEAK_PASSWORD"
        user_service.create_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_unconfirmed_user_and_queues_mail(
        self, user_service, jwt_auth, notifications, sample_user_doc
    ):
        user_service.create_user.return_value = sample_user_doc

        result = await signup_pipeline(
            user_service, jwt_auth, notifications, "jane@example.com", "long-enough", "Jane", "Doe"
        )

        kwargs = user_service.create_user.call_args.kwargs
        assert kwargs["status"] == UserStatus.UNCONFIRMED
        assert kwargs["code"]
        notifications.send_verification.assert_called_once_with(sample_user_doc)
        assert result["token"]

    @pytest.mark.asyncio
    async def test_full_mail_queue_still_signs_up(self, user_service, jwt_auth, sample_user_doc):
        email_service = EmailService(mode="console", site_url="https://nhc.example")
        dispatcher = NotificationDispatcher(email_service, max_queue_size=1)
        dispatcher.send_bulk(["other@example.com"], "Busy", "busy")
        user_service.create_user.return_value = {**sample_user_doc, "code": "abc"}

        result = await signup_pipeline(
            user_service, jwt_auth, dispatcher, "jane@example.com", "long-enough", "Jane", "Doe"
        )

        assert result["token"]
        assert user_service.create_user.await_count == 1


# ─────────────────────────────────────────────────────────────────
# Verification
# ─────────────────────────────────────────────────────────────────


class TestVerifyEmail:
    @pytest.mark.asyncio
    async def test_unknown_code(self, user_service, jwt_auth):
        user_service.get_by_code.return_value = None

        with pytest.raises(NotFoundException):
            await verify_email_pipeline(user_service, jwt_auth, "bogus", None)

    @pytest.mark.asyncio
    async def test_anonymous_caller_gets_token(self, user_service, jwt_auth, sample_user_doc):
        user_service.get_by_code.return_value = sample_user_doc

        result = await verify_email_pipeline(user_service, jwt_auth, "code", None)

        assert "token" in result
        user_service.mark_verified.assert_called_once_with(sample_user_doc)

    @pytest.mark.asyncio
    async def test_signed_in_caller_gets_status(self, user_service, jwt_auth, sample_user_doc):
        user_service.get_by_code.return_value = sample_user_doc

        result = await verify_email_pipeline(user_service, jwt_auth, "code", sample_user_doc)

        assert result == {"status": "ok"}


class TestResendVerification:
    @pytest.mark.asyncio
    async def test_already_verified(self, user_service, notifications, sample_user_doc):
        with pytest.raises(BadRequestException):
            await resend_verification_pipeline(user_service, notifications, sample_user_doc)

    @pytest.mark.asyncio
    async def test_issues_code_when_missing(self, user_service, notifications, sample_user_doc):
        sample_user_doc["status"] = "unconfirmed"
        user_service.set_confirmation_code.return_value = "fresh"

        result = await resend_verification_pipeline(user_service, notifications, sample_user_doc)

        sent = notifications.send_verification.call_args.args[0]
        assert sent["code"] == "fresh"
        assert "jane@example.com" in result["status"]

    @pytest.mark.asyncio
    async def test_reuses_existing_code(self, user_service, notifications, sample_user_doc):
        sample_user_doc["status"] = "unconfirmed"
        sample_user_doc["code"] = "existing"

        await resend_verification_pipeline(user_service, notifications, sample_user_doc)

        user_service.set_confirmation_code.assert_not_called()
        assert notifications.send_verification.call_args.args[0]["code"] == "existing"


# ─────────────────────────────────────────────────────────────────
# Password reset
# ─────────────────────────────────────────────────────────────────


class TestForgotPassword:
    @pytest.mark.asyncio
    async def test_unknown_email_answers_the_same(self, user_service, notifications):
        user_service.get_by_email.return_value = None

        result = await forgot_password_pipeline(user_service, notifications, "ghost@example.com")

        assert result == {"status": FORGOT_PASSWORD_MESSAGE}
        notifications.send_password_reset.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_email_sends_reset(self, user_service, notifications, sample_user_doc):
        user_service.get_by_email.return_value = sample_user_doc
        user_service.set_reset_code.return_value = "reset-123"

        result = await forgot_password_pipeline(user_service, notifications, "jane@example.com")

        assert result == {"status": FORGOT_PASSWORD_MESSAGE}
        sent = notifications.send_password_reset.call_args.args[0]
        assert sent["resetCode"] == "reset-123"


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_unknown_reset_code(self, user_service):
        user_service.get_by_reset_code.return_value = None

        with pytest.raises(NotFoundException):
            await reset_password_pipeline(user_service, "bogus", "long-enough")

    @pytest.mark.asyncio
    async def test_weak_password_checked_first(self, user_service):
        with pytest.raises(BadRequestException):
            await reset_password_pipeline(user_service, "reset-123", "short")
        user_service.get_by_reset_code.assert_not_called()

    @pytest.mark.asyncio
    async def test_changes_password(self, user_service, sample_user_doc):
        user_service.get_by_reset_code.return_value = sample_user_doc

        await reset_password_pipeline(user_service, "reset-123", "long-enough")

        user_service.change_password.assert_called_once_with(sample_user_doc["_id"], "long-enough")
