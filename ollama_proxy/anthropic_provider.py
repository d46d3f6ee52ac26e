"""
Anthropic provider implementation.

Implements LLMProvider on top of the Anthropic Messages API. Anthropic has
no model catalog in the Ollama shape, so /api/tags and /api/show are served
from a fixed table.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from .errors import APIError, ModelNotFoundError, ParseError
from .provider import ChatOptions, ChatResponse, LLMProvider, Message, Model, ModelDetails


logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096
CATALOG_MODEL_SIZE = 175_000_000_000

# name -> (digest, description, parameter_size)
KNOWN_MODELS = {
    "claude-3-5-sonnet-20241022": (
        "anthropic-claude-3-5-sonnet", "Our most intelligent model", "200B",
    ),
    "claude-3-5-haiku-20241022": (
        "anthropic-claude-3-5-haiku", "Our fastest model", "100B",
    ),
    "claude-3-opus-20240229": (
        "anthropic-claude-3-opus", "Powerful model for highly complex tasks", "400B",
    ),
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _details(parameter_size: str) -> ModelDetails:
    return ModelDetails(
        parent_model="",
        format="gguf",
        family="claude",
        families=["claude"],
        parameter_size=parameter_size,
        quantization_level="Q4_K_M",
    )


class AnthropicProvider(LLMProvider):
    """LLM provider using Anthropic's Messages API."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "claude-3-5-sonnet-20241022",
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.provider_name = "anthropic"
        self.model_name = model_name
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings) -> "AnthropicProvider":
        return cls(
            api_key=settings.anthropic_api_key,
            model_name=settings.anthropic_model,
            base_url=settings.anthropic_base_url,
            api_version=settings.anthropic_version,
            timeout=settings.request_timeout,
        )

    async def initialize(self) -> None:
        """Create the HTTP client unless one was injected."""
        if not self._api_key:
            logger.error("ANTHROPIC_API_KEY not set! Chat requests will be rejected")
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        logger.info("Anthropic client initialized: %s", self._base_url)

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def build_payload(self, messages: list[Message], options: ChatOptions) -> dict:
        """Map a conversation onto a Messages API request body."""
        system_messages = [m for m in messages if m.role == "system"]
        chat_messages = [m for m in messages if m.role != "system"]
        # Only the first system message is used
        system = system_messages[0].content if system_messages else ""

        return {
            "model": self.model_name,
            "system": system,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in chat_messages
            ],
            "temperature": options.temperature,
            "top_p": options.top_p,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
        }

    async def chat(self, messages: list[Message], options: ChatOptions) -> ChatResponse:
        """Send a chat completion request to Anthropic."""
        if self._client is None:
            raise RuntimeError("Anthropic client not initialized")

        payload = self.build_payload(messages, options)
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self._api_version,
            "content-type": "application/json",
            "accept": "application/json",
        }

        try:
            response = await self._client.post(
                f"{self._base_url}/v1/messages",
                json=payload,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("Anthropic request failed: %s", e)
            raise APIError(f"Anthropic request failed: {e}") from e

        if response.status_code != 200:
            logger.warning("Anthropic returned HTTP %d", response.status_code)
            raise APIError(response.text, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError("Response body is not JSON") from e

        return ChatResponse(
            content=self._extract_text(data),
            prompt_tokens=self._usage(data, "input_tokens"),
            completion_tokens=self._usage(data, "output_tokens"),
            model=self.model_name,
            created_at=_now_iso(),
        )

    @staticmethod
    def _extract_text(data) -> str:
        # Only the first content block is used
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError("Missing content") from e
        if not isinstance(text, str) or not text:
            raise ParseError("Missing content")
        return text

    @staticmethod
    def _usage(data, key: str) -> Optional[int]:
        usage = data.get("usage") if isinstance(data, dict) else None
        if not isinstance(usage, dict):
            return None
        value = usage.get(key)
        return value if isinstance(value, int) else None

    def get_models(self) -> list[Model]:
        """Return the fixed catalog; Anthropic has no compatible listing."""
        current_time = _now_iso()
        return [
            Model(
                name=name,
                model=name,
                modified_at=current_time,
                size=CATALOG_MODEL_SIZE,
                digest=digest,
                details=_details(parameter_size),
            )
            for name, (digest, _, parameter_size) in KNOWN_MODELS.items()
        ]

    async def get_model_details(self, name: str) -> dict:
        """Build an /api/show document for a catalog model."""
        if name not in KNOWN_MODELS:
            raise ModelNotFoundError(name)
        _, description, parameter_size = KNOWN_MODELS[name]
        details = _details(parameter_size)

        return {
            "license": "Anthropic Research License",
            "system": description,
            "details": {
                "parent_model": details.parent_model,
                "format": details.format,
                "family": details.family,
                "families": details.families,
                "parameter_size": details.parameter_size,
                "quantization_level": details.quantization_level,
            },
            "model_info": {
                "general.architecture": "claude",
                "general.file_type": 15,
                "general.context_length": 200000,
                "general.parameter_count": 200_000_000_000,
            },
            "modified_at": _now_iso(),
        }
