"""
Tests for the external model adapter: prompt construction, markdown cleanup
and the timeout race.
"""

import asyncio

import pytest

from clientqa.clients.model_client import ModelError, ModelResponseError, ModelTimeoutError
from clientqa.config.settings import AssistantConfig
from clientqa.models.client import Client
from clientqa.services.model_service import PROMPT_CLIENT_LIMIT, ModelService, clean_markdown

from tests.conftest import StubModelClient


@pytest.fixture
def config() -> AssistantConfig:
    return AssistantConfig(model_api_key="test-key", timeout_ms=50)


class TestCleanMarkdown:
    """Markdown stripping."""

    def test_strips_emphasis_and_headings(self):
        text = "# Summary\n**Client 3** is your *top* client.\n\n\n\n* Client 5\n+ Client 1"

        assert clean_markdown(text) == "Summary\nClient 3 is your top client.\n\n- Client 5\n- Client 1"

    def test_strips_underscore_emphasis(self):
        assert clean_markdown("__Finance__ and _Energy_ clients") == "Finance and Energy clients"

    def test_keeps_snake_case_words(self):
        assert clean_markdown("value_total stays") == "value_total stays"

    def test_trims_whitespace(self):
        assert clean_markdown("  You have 6 clients.  \n") == "You have 6 clients."


class TestPrompt:
    """Prompt construction."""

    def test_uses_compact_projection(self, config, user_one, user_one_clients):
        service = ModelService(StubModelClient(), config)

        prompt = service.build_prompt("how many clients?", user_one, user_one_clients)

        assert "User: User 1" in prompt
        assert "Clients (6):" in prompt
        assert '"name":"Client 3","company":"Company 3","industry":"Manufacturing","value":320000' in prompt
        assert "Query: how many clients?" in prompt
        assert "phone" not in prompt
        assert "@company.com" not in prompt

    def test_caps_client_list(self, config, user_one):
        clients = [Client(id=n, name=f"Client {n}") for n in range(1, PROMPT_CLIENT_LIMIT + 51)]
        service = ModelService(StubModelClient(), config)

        prompt = service.build_prompt("list", user_one, clients)

        assert f"Clients ({PROMPT_CLIENT_LIMIT + 50}):" in prompt
        assert prompt.count('"id":') == PROMPT_CLIENT_LIMIT


class TestInvoke:
    """The model call raced against the timeout."""

    @pytest.mark.asyncio
    async def test_returns_cleaned_answer(self, config, user_one, user_one_clients):
        stub = StubModelClient(reply="**You have 6 clients.**")
        service = ModelService(stub, config)

        answer = await service.invoke("how many clients?", user_one, user_one_clients)

        assert answer == "You have 6 clients."
        assert len(stub.prompts) == 1

    @pytest.mark.asyncio
    async def test_timeout_wins_race(self, config, user_one, user_one_clients):
        stub = StubModelClient(delay=0.3)
        service = ModelService(stub, config)

        with pytest.raises(ModelTimeoutError, match="Timeout: AI response took longer than 50ms"):
            await service.invoke("how many clients?", user_one, user_one_clients)

        # The late call is held until it settles, then dropped
        assert len(service._abandoned) == 1
        await asyncio.sleep(0.4)
        assert not service._abandoned

    @pytest.mark.asyncio
    async def test_timeout_override(self, config, user_one, user_one_clients):
        service = ModelService(StubModelClient(delay=0.05), config)

        answer = await service.invoke("how many clients?", user_one, user_one_clients, timeout_ms=1000)

        assert answer == "You have 6 clients."

    @pytest.mark.asyncio
    async def test_wraps_unexpected_errors(self, config, user_one, user_one_clients):
        service = ModelService(StubModelClient(error=RuntimeError("boom")), config)

        with pytest.raises(ModelError, match="RuntimeError: boom"):
            await service.invoke("how many clients?", user_one, user_one_clients)

    @pytest.mark.asyncio
    async def test_model_errors_pass_through(self, config, user_one, user_one_clients):
        service = ModelService(StubModelClient(error=ModelResponseError("empty")), config)

        with pytest.raises(ModelResponseError):
            await service.invoke("how many clients?", user_one, user_one_clients)

    @pytest.mark.asyncio
    async def test_rejects_blank_answer(self, config, user_one, user_one_clients):
        service = ModelService(StubModelClient(reply="** **"), config)

        with pytest.raises(ModelResponseError):
            await service.invoke("how many clients?", user_one, user_one_clients)
