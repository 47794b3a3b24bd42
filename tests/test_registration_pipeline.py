"""Tests for the registration and scorecard pipelines."""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from common.utils.exceptions import BadRequestException, ForbiddenException, NotFoundException
from config.messages import ErrorMessages
from nhc.pipelines.participants import update_scorecard_pipeline
from nhc.pipelines.registration import (
    build_participants,
    check_can_register,
    register_pipeline,
    validate_registration,
)
from nhc.services.email.email_service import EmailService
from nhc.services.globals.globals_service import CampaignGlobals
from nhc.services.moderation.profanity_filter import ProfanityFilter
from nhc.services.notifications.dispatcher import NotificationDispatcher


def _campaign(registration_open=True, start=None, length=28):
    start = start or datetime(2016, 2, 1, tzinfo=timezone.utc)
    return CampaignGlobals(
        challenge_start=start,
        challenge_end=start + timedelta(days=length - 1),
        registration_open=registration_open,
    )


def _form(**overrides):
    form = {
        "organization": "Virginia Tech",
        "team": "Hokies",
        "sharing": "everyone",
        "comment": "",
        "referral": "A friend",
        "donation": "none",
        "family": False,
        "familyCode": "",
        "participants": [
            {"firstName": "Jane", "lastName": "Doe", "ageRange": [18, 25],
             "category": "Fruits", "commitment": "Eat an apple", "customCommitment": False},
        ],
    }
    form.update(overrides)
    return form


@pytest.fixture
def profanity_filter():
    return ProfanityFilter()


@pytest.fixture
def family_service():
    service = AsyncMock()
    service.exists.return_value = True
    service.generate_code.return_value = "DOE0042"
    return service


@pytest.fixture
def globals_service():
    service = MagicMock()
    service.current = _campaign()
    return service


@pytest.fixture
def deps(family_service, globals_service, profanity_filter):
    user_service = AsyncMock()
    user_service.update_fields.side_effect = lambda user_id, updates: {"_id": user_id, "email": "jane@example.com", **updates}
    return {
        "user_service": user_service,
        "organization_service": AsyncMock(),
        "family_service": family_service,
        "globals_service": globals_service,
        "profanity_filter": profanity_filter,
        "notifications": MagicMock(),
    }


# ─────────────────────────────────────────────────────────────────
# Status checks and validation
# ─────────────────────────────────────────────────────────────────


class TestCheckCanRegister:
    def test_unregistered_may_register(self, sample_user_doc):
        check_can_register(sample_user_doc)

    @pytest.mark.parametrize("status", ["unconfirmed", "registered", "pending", "unknown"])
    def test_other_statuses_forbidden(self, sample_user_doc, status):
        sample_user_doc["status"] = status
        with pytest.raises(ForbiddenException):
            check_can_register(sample_user_doc)


class TestValidateRegistration:
    @pytest.mark.asyncio
    async def test_valid_form_has_no_errors(self, profanity_filter, family_service):
        assert await validate_registration(profanity_filter, family_service, _form()) == {}

    @pytest.mark.asyncio
    async def test_choice_fields(self, profanity_filter, family_service):
        errors = await validate_registration(
            profanity_filter, family_service, _form(donation="", sharing="friends")
        )
        assert errors == {"donation": ErrorMessages.REQUIRED, "sharing": ErrorMessages.BAD_CHOICE}

    @pytest.mark.asyncio
    async def test_profanity_in_free_text(self, profanity_filter, family_service):
        errors = await validate_registration(profanity_filter, family_service, _form(team="Holy Sh!t team"))
        assert errors == {}

        errors = await validate_registration(profanity_filter, family_service, _form(team="shit happens"))
        assert errors == {"team": ErrorMessages.PROFANITY}

    @pytest.mark.asyncio
    async def test_unknown_family_code(self, profanity_filter, family_service):
        family_service.exists.return_value = False

        errors = await validate_registration(profanity_filter, family_service, _form(familyCode="NOPE0000"))

        assert errors == {"familyCode": ErrorMessages.FAMILY}

    @pytest.mark.asyncio
    async def test_participants_required(self, profanity_filter, family_service):
        errors = await validate_registration(profanity_filter, family_service, _form(participants=[]))
        assert errors == {"participants": ErrorMessages.REQUIRED}

    @pytest.mark.asyncio
    async def test_per_participant_errors(self, profanity_filter, family_service):
        participants = [
            {"firstName": "Jane", "commitment": "fuck vegetables", "customCommitment": False},
            {"firstName": "", "lastName": "Doe"},
            {"firstName": "Sam", "commitment": "fuck vegetables", "customCommitment": True},
        ]

        errors = await validate_registration(profanity_filter, family_service, _form(participants=participants))

        assert errors == {
            "participants": {
                "1": {"firstName": ErrorMessages.REQUIRED},
                "2": {"commitment": ErrorMessages.PROFANITY},
            }
        }


class TestBuildParticipants:
    def test_numbers_and_blank_scorecards(self):
        built = build_participants(
            [{"firstName": "Jane", "extra": "dropped"}, {"firstName": "Sam"}],
            challenge_length=29,
        )

        assert [p["id"] for p in built] == [0, 1]
        assert all(p["points"] == 0 for p in built)
        assert [len(week) for week in built[0]["scorecard"]] == [7, 7, 7, 7, 1]
        assert "extra" not in built[0]


# ─────────────────────────────────────────────────────────────────
# register_pipeline
# ─────────────────────────────────────────────────────────────────


class TestRegisterPipeline:
    @pytest.mark.asyncio
    async def test_closed_registration(self, deps, globals_service, sample_user_doc):
        globals_service.current = _campaign(registration_open=False)

        with pytest.raises(ForbiddenException) as exc_info:
            await register_pipeline(**deps, user=sample_user_doc, form=_form())
        assert exc_info.value.code == "REGISTRATION_CLOSED"

    @pytest.mark.asyncio
    async def test_invalid_form_carries_details(self, deps, sample_user_doc):
        with pytest.raises(BadRequestException) as exc_info:
            await register_pipeline(**deps, user=sample_user_doc, form=_form(donation=None))
        assert exc_info.value.detail["details"] == {"donation": ErrorMessages.REQUIRED}
        deps["user_service"].update_fields.assert_not_called()

    @pytest.mark.asyncio
    async def test_registers_household(self, deps, sample_user_doc):
        result = await register_pipeline(**deps, user=sample_user_doc, form=_form())

        assert result == {"status": "Registration complete.", "family": None}
        deps["organization_service"].create_organization.assert_called_once_with(
            "Virginia Tech", needs_approval=True, ignore_duplicate=True
        )
        updates = deps["user_service"].update_fields.call_args.args[1]
        assert updates["status"] == "registered"
        assert len(updates["participants"][0]["scorecard"]) == 4
        deps["notifications"].send_registration_confirmation.assert_called_once()

    @pytest.mark.asyncio
    async def test_full_mail_queue_still_registers(self, deps, sample_user_doc):
        dispatcher = NotificationDispatcher(EmailService(mode="console"), max_queue_size=1)
        dispatcher.send_bulk(["other@example.com"], "Busy", "busy")
        deps["notifications"] = dispatcher

        result = await register_pipeline(**deps, user=sample_user_doc, form=_form())

        assert result["status"] == "Registration complete."
        deps["user_service"].update_fields.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_family_code_is_kept(self, deps, sample_user_doc):
        result = await register_pipeline(**deps, user=sample_user_doc, form=_form(familyCode="doe0001"))

        assert result["family"] == "DOE0001"
        deps["family_service"].generate_code.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_family_code_generated(self, deps, sample_user_doc):
        result = await register_pipeline(**deps, user=sample_user_doc, form=_form(family=True))

        assert result["family"] == "DOE0042"
        deps["family_service"].generate_code.assert_called_once_with("O'Neil")


# ─────────────────────────────────────────────────────────────────
# update_scorecard_pipeline
# ─────────────────────────────────────────────────────────────────


class TestUpdateScorecardPipeline:
    @pytest.mark.asyncio
    async def test_unknown_participant(self, globals_service, registered_user_doc):
        with pytest.raises(NotFoundException):
            await update_scorecard_pipeline(AsyncMock(), globals_service, registered_user_doc, 7, [[1] * 7])

    @pytest.mark.asyncio
    async def test_future_days_zeroed(self, globals_service, registered_user_doc):
        today = datetime.now(timezone.utc)
        globals_service.current = _campaign(start=today - timedelta(days=2))
        user_service = AsyncMock()

        result = await update_scorecard_pipeline(
            user_service, globals_service, registered_user_doc, 1, [[1] * 7, [1] * 7]
        )

        assert result["scorecard"] == [[1, 1, 1, 0, 0, 0, 0], [0] * 7, [0] * 7, [0] * 7]
        assert result["points"] == 3
        user_service.update_participant_scorecard.assert_called_once_with(
            registered_user_doc["_id"], 1, result["scorecard"], 3
        )

    @pytest.mark.asyncio
    async def test_oversized_grid_is_cut_to_challenge_length(self, globals_service, registered_user_doc):
        globals_service.current = _campaign(start=datetime.now(timezone.utc) - timedelta(days=400), length=29)
        user_service = AsyncMock()

        result = await update_scorecard_pipeline(
            user_service, globals_service, registered_user_doc, 1, [[1] * 300]
        )

        assert result["scorecard"] == [[1] * 7, [0] * 7, [0] * 7, [0] * 7, [0]]
        assert result["points"] == 7
