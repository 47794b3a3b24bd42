"""Tests for the profanity filter."""

import httpx
import pytest

from nhc.services.moderation import profanity_filter as profanity_module
from nhc.services.moderation.profanity_filter import ProfanityFilter, add_spaces


def _patch_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(profanity_module.httpx, "AsyncClient", client_factory)


class TestAddSpaces:
    def test_collapses_punctuation(self):
        assert add_spaces("  hello,,world!!  again ") == "hello world again"


class TestProfanityFilter:
    @pytest.mark.asyncio
    async def test_empty_text_is_clean(self):
        assert not await ProfanityFilter().has_profanity(None)
        assert not await ProfanityFilter().has_profanity("?!")

    @pytest.mark.asyncio
    async def test_builtin_words(self):
        assert await ProfanityFilter().has_profanity("Well, SHIT.")

    @pytest.mark.asyncio
    async def test_extra_words(self):
        assert await ProfanityFilter(blocked_words=["Broccoli"]).has_profanity("I hate broccoli")
        assert not await ProfanityFilter().has_profanity("I hate broccoli")

    @pytest.mark.asyncio
    async def test_remote_positive(self, monkeypatch):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"response": "true"})

        _patch_transport(monkeypatch, handler)

        flagged = await ProfanityFilter(api_url="https://filter.example/check?q=").has_profanity("rude words")

        assert flagged
        assert seen["url"].endswith("q=rude+words")

    @pytest.mark.asyncio
    async def test_remote_failure_fails_open(self, monkeypatch):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        _patch_transport(monkeypatch, handler)

        assert not await ProfanityFilter(api_url="https://filter.example/check?q=").has_profanity("hello")

    @pytest.mark.asyncio
    async def test_remote_garbage_fails_open(self, monkeypatch):
        _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="not json"))

        assert not await ProfanityFilter(api_url="https://filter.example/check?q=").has_profanity("hello")
