"""
Tests for the generative model client configuration.
"""

from clientqa.clients.model_client import GenerativeModelClient
from clientqa.config.settings import AssistantConfig


class TestGenerativeModelClient:
    """SDK client construction."""

    def test_sdk_client_bounded_by_answer_timeout(self):
        client = GenerativeModelClient(AssistantConfig(model_api_key="test-key", timeout_ms=3000))

        sdk = client._get_client()

        assert sdk.timeout == 3.0
        assert sdk.max_retries == 0

    def test_sdk_client_is_reused(self):
        client = GenerativeModelClient(AssistantConfig(model_api_key="test-key"))

        assert client._get_client() is client._get_client()
