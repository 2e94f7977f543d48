"""Clients for the hosted vision models used by document extraction.

Both clients expose ``generate_content(contents, system_instruction,
generation_config)``. ``contents`` is a string or a list of parts, where a
part is a string, ``{"text": ...}`` or ``{"inline_data": {"mime_type": ...,
"data": <bytes>}}``.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional, Union

import httpx
from google import genai
from google.genai import types
from httpx import HTTPStatusError, TimeoutException

from permit_buddy.core.config import LLMSettings
from permit_buddy.core.exceptions import APIClientError, APITimeoutError, ConfigurationError
from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)

ContentPart = Union[str, Dict[str, Any]]
Contents = Union[str, List[ContentPart]]


def to_data_url(mime_type: str, data: bytes) -> str:
    """Encode bytes as a ``data:`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class BaseLLMClient:
    """HTTP transport for JSON LLM APIs with bounded retries.

    4xx responses other than 429 fail immediately; timeouts, 429 and 5xx
    are retried with exponential backoff until ``max_retries`` attempts
    have been made.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = 60,
        max_retries: int = 1,
        retry_delay: int = 2,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.logger = LOGGER

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded JSON response.

        Raises:
            APIClientError: If the API call fails after retries
            APITimeoutError: If every attempt timed out
        """
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url
        request_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.post(url, headers=request_headers, json=payload)
                    response.raise_for_status()
                    return response.json()
                except HTTPStatusError as e:
                    await self._handle_http_error(e, attempt, url)
                except TimeoutException as e:
                    await self._handle_timeout_error(e, attempt, url)
                except httpx.HTTPError as e:
                    await self._handle_transport_error(e, attempt, url)

        raise APIClientError(f"Failed to call API {url} after {self.max_retries} attempts")

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, url: str) -> None:
        status_code = error.response.status_code
        error_body = error.response.text

        self.logger.warning(
            f"API HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "status_code": status_code, "error_body": error_body[:500]},
        )

        if 400 <= status_code < 500 and status_code != 429:
            raise APIClientError(f"API Client Error {status_code}: {error_body}") from error

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API HTTP Error {status_code}: {error_body}") from error

    async def _handle_timeout_error(self, error: TimeoutException, attempt: int, url: str) -> None:
        self.logger.warning(f"API Timeout (Attempt {attempt + 1}/{self.max_retries})", extra={"url": url})
        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APITimeoutError(f"API Timeout after {self.max_retries} attempts") from error

    async def _handle_transport_error(self, error: httpx.HTTPError, attempt: int, url: str) -> None:
        self.logger.warning(
            f"API transport error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "error": str(error)},
        )
        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API Error: {str(error)}") from error

    async def _wait_before_retry(self, attempt: int) -> None:
        await asyncio.sleep(self.retry_delay * (2 ** attempt))


class OpenRouterClient:
    """OpenRouter (OpenAI-compatible chat completions) client."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: int = 120,
        max_retries: int = 1,
    ):
        self.model = model
        self.client = BaseLLMClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        LOGGER.info(f"Initialized OpenRouter client with model {self.model}")

    @staticmethod
    def build_user_content(contents: Contents) -> Union[str, List[Dict[str, Any]]]:
        """Translate content parts into chat-completions message content."""
        if isinstance(contents, str):
            return contents

        parts: List[Dict[str, Any]] = []
        for part in contents:
            if isinstance(part, str):
                parts.append({"type": "text", "text": part})
            elif "text" in part:
                parts.append({"type": "text", "text": part["text"]})
            elif "inline_data" in part:
                inline = part["inline_data"]
                parts.append({
                    "type": "image_url",
                    "image_url": {"url": to_data_url(inline["mime_type"], inline["data"])},
                })
        return parts

    async def generate_content(
        self,
        contents: Contents,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate a completion and return the first choice's text.

        Raises:
            APIClientError: If the request fails or the response has no choices
        """
        messages: List[Dict[str, Any]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": self.build_user_content(contents)})

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.0,
        }
        config = generation_config or {}
        if "temperature" in config:
            payload["temperature"] = config["temperature"]
        if "max_output_tokens" in config:
            payload["max_tokens"] = config["max_output_tokens"]
        if config.get("response_mime_type") == "application/json":
            payload["response_format"] = {"type": "json_object"}

        response = await self.client.call_api(payload=payload)

        choices = response.get("choices") or []
        if not choices:
            LOGGER.error(f"Unexpected OpenRouter response format: {response}")
            raise APIClientError("Invalid response format from OpenRouter")

        content = (choices[0].get("message") or {}).get("content") or ""
        if not content:
            LOGGER.warning("Empty response from OpenRouter")
        return content


class GeminiClient:
    """Google Gemini client using the async ``google-genai`` SDK."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", timeout: int = 120, max_retries: int = 1):
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        # HttpOptions takes milliseconds
        self.client = genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout * 1000))
        LOGGER.info(f"Initialized Gemini client with model {self.model}")

    @staticmethod
    def build_parts(contents: Contents) -> Union[str, List[Any]]:
        if isinstance(contents, str):
            return contents

        parts: List[Any] = []
        for part in contents:
            if isinstance(part, str):
                parts.append(types.Part.from_text(text=part))
            elif "text" in part:
                parts.append(types.Part.from_text(text=part["text"]))
            elif "inline_data" in part:
                inline = part["inline_data"]
                parts.append(types.Part.from_bytes(data=inline["data"], mime_type=inline["mime_type"]))
        return parts

    async def generate_content(
        self,
        contents: Contents,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate content and return the response text.

        Raises:
            APIClientError: If generation fails after retries
        """
        config = types.GenerateContentConfig(temperature=0.0)
        for key in ("temperature", "max_output_tokens", "response_mime_type"):
            if generation_config and key in generation_config:
                setattr(config, key, generation_config[key])
        if system_instruction:
            config.system_instruction = system_instruction

        parts = self.build_parts(contents)
        for attempt in range(self.max_retries):
            try:
                response = await self.client.aio.models.generate_content(
                    model=self.model,
                    contents=parts,
                    config=config,
                )
                if not response.text:
                    LOGGER.warning("Empty response from Gemini")
                    return ""
                return response.text
            except Exception as e:
                LOGGER.warning(f"Gemini API error (Attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                else:
                    raise APIClientError(f"Gemini generation failed: {e}", original_error=e) from e

        raise APIClientError("Gemini generation failed")


LLMClient = Union[OpenRouterClient, GeminiClient]


def create_llm_client(llm_settings: LLMSettings) -> LLMClient:
    """Build the client for the configured provider.

    Raises:
        ConfigurationError: If the provider is unknown
    """
    provider = llm_settings.provider.lower()
    if provider == "openrouter":
        return OpenRouterClient(
            api_key=llm_settings.openrouter_api_key,
            model=llm_settings.openrouter_model,
            base_url=llm_settings.openrouter_api_url,
            timeout=llm_settings.timeout,
            max_retries=llm_settings.max_retries,
        )
    if provider == "gemini":
        return GeminiClient(
            api_key=llm_settings.gemini_api_key,
            model=llm_settings.gemini_model,
            timeout=llm_settings.timeout,
            max_retries=llm_settings.max_retries,
        )
    raise ConfigurationError(f"Unsupported LLM provider: {llm_settings.provider}")
