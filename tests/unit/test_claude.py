"""Tests for the Claude client and the chat fallback."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
from anthropic import APIConnectionError, APIStatusError

from gymbuddy.core.chat import ChatResponder, build_system_prompt
from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.infra.claude import ChatReply, ClaudeClient, ClaudeClientError, get_claude_client

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def api_response(text: str = "Let's go!"):
    """Build a mock messages.create response."""
    block = MagicMock()
    block.type = "text"
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage.input_tokens = 12
    response.usage.output_tokens = 4
    return response


def server_error() -> APIStatusError:
    return APIStatusError(
        "overloaded",
        response=httpx.Response(529, request=REQUEST),
        body=None,
    )


@pytest.fixture
def claude():
    client = ClaudeClient(api_key="sk-test", model="primary", fallback_model="backup", max_retries=2)
    client._client = MagicMock()
    return client


class TestClaudeClient:
    """Test ClaudeClient."""

    def test_requires_api_key(self):
        with patch("gymbuddy.infra.claude.settings") as mock_settings:
            mock_settings.anthropic_api_key = ""
            with pytest.raises(ValueError):
                ClaudeClient()

    @pytest.mark.asyncio
    async def test_chat_returns_text(self, claude):
        claude._client.messages.create = AsyncMock(return_value=api_response("  Let's go!  "))

        reply = await claude.chat("hi", system="be nice", max_tokens=50, temperature=0.2)

        assert reply.text == "Let's go!"
        assert reply.model == "primary"
        kwargs = claude._client.messages.create.await_args.kwargs
        assert kwargs["system"] == "be nice"
        assert kwargs["max_tokens"] == 50
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_falls_back_to_second_model(self, claude):
        claude._client.messages.create = AsyncMock(side_effect=[server_error(), api_response()])

        reply = await claude.chat("hi")

        assert reply.model == "backup"

    @pytest.mark.asyncio
    async def test_retries_connection_errors(self, claude):
        claude._client.messages.create = AsyncMock(
            side_effect=[APIConnectionError(request=REQUEST), api_response()]
        )

        with patch("gymbuddy.infra.claude.asyncio.sleep", new=AsyncMock()) as sleep:
            reply = await claude.chat("hi")

        assert reply.model == "primary"
        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_all_models_fail(self, claude):
        claude._client.messages.create = AsyncMock(side_effect=server_error())

        with pytest.raises(ClaudeClientError):
            await claude.chat("hi")

        assert claude._client.messages.create.await_count == 2


class TestChatResponder:
    """Test ChatResponder."""

    def test_system_prompt_includes_availability(self):
        prompt = build_system_prompt("Ivan", [TimeSlot(day="monday", start_hour=9, end_hour=11)])

        assert "User: Ivan" in prompt
        assert "Monday: 9:00 AM - 11:00 AM" in prompt

    def test_system_prompt_without_slots(self):
        assert "No availability set yet" in build_system_prompt(None, [])

    @pytest.mark.asyncio
    async def test_respond(self):
        client = MagicMock()
        client.chat = AsyncMock(
            return_value=ChatReply(text="Nice!", model="m", input_tokens=1, output_tokens=1, latency_ms=3.0)
        )

        reply = await ChatResponder(claude_client=client).respond("I did squats", name="Ivan")

        assert reply == "Nice!"

    @pytest.mark.asyncio
    async def test_respond_without_client(self):
        with patch("gymbuddy.core.chat.get_claude_client", return_value=None):
            responder = ChatResponder()

            assert not responder.available
            assert await responder.respond("hello") is None

    @pytest.mark.asyncio
    async def test_respond_on_failure(self):
        client = MagicMock()
        client.chat = AsyncMock(side_effect=ClaudeClientError("down"))

        assert await ChatResponder(claude_client=client).respond("hello") is None

    def test_get_claude_client_singleton(self):
        with patch("gymbuddy.infra.claude.settings") as mock_settings:
            mock_settings.chat_enabled = True
            mock_settings.anthropic_api_key = "sk-test"
            mock_settings.chat_model = "primary"
            mock_settings.chat_fallback_model = "backup"
            ClaudeClient.reset_instance()
            try:
                assert get_claude_client() is get_claude_client()
            finally:
                ClaudeClient.reset_instance()

    def test_get_claude_client_disabled(self):
        with patch("gymbuddy.infra.claude.settings") as mock_settings:
            mock_settings.chat_enabled = False

            assert get_claude_client() is None
