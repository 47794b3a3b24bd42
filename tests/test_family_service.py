"""Unit tests for family code generation."""

import random
import re

import pytest
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import DuplicateKeyError

from nhc.services.registration.family_service import FamilyService, create_code


# ─────────────────────────────────────────────────────────────────
# create_code
# ─────────────────────────────────────────────────────────────────


class TestCreateCode:
    def test_uppercases_and_strips_non_letters(self):
        code = create_code("O'Neil-Smith", rng=random.Random(1))
        assert re.fullmatch(r"ONEILSMITH\d{4}", code)

    def test_empty_last_name_uses_default_prefix(self):
        assert create_code("", rng=random.Random(1)).startswith("FAMILY")
        assert create_code(None, rng=random.Random(1)).startswith("FAMILY")

    def test_digits_are_zero_padded(self):
        rng = MagicMock()
        rng.randint.return_value = 7
        assert create_code("Lee", rng=rng) == "LEE0007"


# ─────────────────────────────────────────────────────────────────
# FamilyService
# ─────────────────────────────────────────────────────────────────


class TestFamilyService:
    @pytest.mark.asyncio
    async def test_exists_uppercases_lookup(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value={"code": "LEE0001"})
        service = FamilyService(mock_db)

        assert await service.exists(" lee0001 ")
        mock_collection.find_one.assert_called_once_with({"code": "LEE0001"})

    @pytest.mark.asyncio
    async def test_exists_false_for_empty(self, mock_db):
        assert not await FamilyService(mock_db).exists("")

    @pytest.mark.asyncio
    async def test_generate_inserts_free_code(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=None)
        mock_collection.insert_one = AsyncMock()
        service = FamilyService(mock_db)

        code = await service.generate_code("Lee")

        assert code.startswith("LEE")
        mock_collection.insert_one.assert_called_once_with({"code": code})

    @pytest.mark.asyncio
    async def test_generate_retries_taken_codes(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(side_effect=[{"code": "taken"}, None])
        mock_collection.insert_one = AsyncMock()

        await FamilyService(mock_db).generate_code("Lee")

        assert mock_collection.find_one.call_count == 2
        mock_collection.insert_one.assert_called_once()

    @pytest.mark.asyncio
    async def test_generate_retries_on_duplicate_key_race(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=None)
        mock_collection.insert_one = AsyncMock(side_effect=[DuplicateKeyError("dup"), None])

        code = await FamilyService(mock_db).generate_code("Lee")

        assert code.startswith("LEE")
        assert mock_collection.insert_one.call_count == 2

    @pytest.mark.asyncio
    async def test_generate_gives_up_after_max_attempts(self, mock_db, mock_collection):
        mock_collection.find_one = AsyncMock(return_value={"code": "taken"})

        with pytest.raises(RuntimeError):
            await FamilyService(mock_db, max_attempts=3).generate_code("Lee")
