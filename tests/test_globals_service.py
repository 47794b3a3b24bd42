"""Tests for the campaign globals snapshot."""

from dataclasses import FrozenInstanceError
from datetime import date, datetime, timezone

import pytest
from unittest.mock import AsyncMock

from common.utils.exceptions import BadRequestException
from nhc.services.globals.globals_service import (
    DEFAULT_GLOBALS,
    CampaignGlobals,
    GlobalsService,
)


def _doc(**overrides):
    doc = {
        "challengeStart": datetime(2017, 3, 1),
        "challengeEnd": datetime(2017, 3, 28),
        "registrationOpen": False,
        "scorecardEnabled": True,
    }
    doc.update(overrides)
    return doc


class TestCampaignGlobals:
    def test_length_is_inclusive(self):
        assert DEFAULT_GLOBALS.challenge_length == 29

    def test_current_day(self):
        assert DEFAULT_GLOBALS.current_day(date(2016, 2, 1)) == 0
        assert DEFAULT_GLOBALS.current_day(date(2016, 2, 10)) == 9
        assert DEFAULT_GLOBALS.current_day(date(2016, 1, 30)) == -2

    def test_snapshot_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_GLOBALS.registration_open = False

    def test_naive_dates_read_as_utc(self):
        snapshot = CampaignGlobals.from_document(_doc())
        assert snapshot.challenge_start.tzinfo == timezone.utc
        assert snapshot.to_response()["challengeLength"] == 28


class TestGlobalsService:
    def test_current_before_load(self, mock_db):
        with pytest.raises(RuntimeError):
            GlobalsService(mock_db).current

    @pytest.mark.asyncio
    async def test_load_existing(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=_doc())
        service = GlobalsService(mock_db)

        snapshot = await service.load()

        assert service.current is snapshot
        assert snapshot.registration_open is False
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_inserts_defaults(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=None)
        service = GlobalsService(mock_db)

        assert await service.load() == DEFAULT_GLOBALS
        mock_collection.insert_one.assert_called_once_with(DEFAULT_GLOBALS.to_document())

    @pytest.mark.asyncio
    async def test_update_swaps_snapshot(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=_doc())
        service = GlobalsService(mock_db)
        before = await service.load()

        after = await service.update(registration_open=True)

        assert before.registration_open is False
        assert service.current is after
        assert after.registration_open is True
        assert after.challenge_start == before.challenge_start
        _, update = mock_collection.update_one.call_args.args
        assert update["$set"]["challengeLength"] == 28

    @pytest.mark.asyncio
    async def test_update_rejects_reversed_dates(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=_doc())
        service = GlobalsService(mock_db)
        before = await service.load()

        with pytest.raises(BadRequestException):
            await service.update(challenge_end=datetime(2017, 2, 1, tzinfo=timezone.utc))

        assert service.current is before
        mock_collection.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_reset(self, mock_db, mock_collection):
        service = GlobalsService(mock_db)

        assert await service.reset() is DEFAULT_GLOBALS
        mock_collection.delete_many.assert_called_once_with({})
        assert service.current is DEFAULT_GLOBALS
