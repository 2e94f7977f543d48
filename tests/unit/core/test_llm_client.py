from unittest.mock import AsyncMock, patch

import pytest

from permit_buddy.core.config import LLMSettings
from permit_buddy.core.exceptions import APIClientError, ConfigurationError
from permit_buddy.core.llm_client import GeminiClient, OpenRouterClient, create_llm_client


@pytest.fixture
def client() -> OpenRouterClient:
    return OpenRouterClient(
        api_key="key",
        model="openai/gpt-4o",
        base_url="https://openrouter.ai/api/v1/chat/completions",
    )


def test_build_user_content_encodes_inline_data():
    content = OpenRouterClient.build_user_content([
        {"text": "Extract the permit"},
        {"inline_data": {"mime_type": "image/png", "data": b"\x89PNG"}},
    ])

    assert content[0] == {"type": "text", "text": "Extract the permit"}
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw=="}}


@pytest.mark.asyncio
async def test_generate_content_requests_json(client):
    with patch.object(client.client, "call_api", new_callable=AsyncMock) as mock_call:
        mock_call.return_value = {"choices": [{"message": {"content": '{"title": "x"}'}}]}

        result = await client.generate_content(
            "Extract",
            system_instruction="Be precise",
            generation_config={"temperature": 0.0, "response_mime_type": "application/json"},
        )

    assert result == '{"title": "x"}'
    payload = mock_call.call_args.kwargs["payload"]
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"][0] == {"role": "system", "content": "Be precise"}
    assert payload["model"] == "openai/gpt-4o"


@pytest.mark.asyncio
async def test_generate_content_without_choices(client):
    with patch.object(client.client, "call_api", new_callable=AsyncMock) as mock_call:
        mock_call.return_value = {"error": {"message": "No endpoints found"}}

        with pytest.raises(APIClientError):
            await client.generate_content("Extract")


def test_unknown_provider():
    with pytest.raises(ConfigurationError):
        create_llm_client(LLMSettings(LLM_PROVIDER="bedrock"))


def test_gemini_client_applies_llm_timeout():
    settings = LLMSettings(LLM_PROVIDER="gemini", GEMINI_API_KEY="gemini-key", LLM_TIMEOUT=45)

    with patch("permit_buddy.core.llm_client.genai.Client") as mock_client_cls:
        client = create_llm_client(settings)

    assert isinstance(client, GeminiClient)
    kwargs = mock_client_cls.call_args.kwargs
    assert kwargs["api_key"] == "gemini-key"
    assert kwargs["http_options"].timeout == 45_000
