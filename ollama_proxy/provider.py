"""
Abstract base class for LLM providers.

Implementations must subclass LLMProvider and implement all abstract methods.
The server module only talks to this interface, so adding a backend means
adding a subclass, never touching the routes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Message:
    """A single message in a conversation."""
    role: str  # "system", "user", or "assistant"
    content: str


@dataclass
class ChatOptions:
    """Sampling options for a chat completion."""
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: Optional[int] = None  # None lets the provider pick its default


@dataclass
class ChatResponse:
    """Result from a chat completion."""
    content: str
    model: str
    created_at: str  # ISO-8601, UTC
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


@dataclass
class ModelDetails:
    """Nested metadata for a catalog entry."""
    parent_model: str = ""
    format: str = "gguf"
    family: str = ""
    families: list[str] = field(default_factory=list)
    parameter_size: str = ""
    quantization_level: str = ""


@dataclass
class Model:
    """A catalog entry as listed by /api/tags."""
    name: str
    model: str
    modified_at: str
    size: int  # bytes
    digest: str
    details: ModelDetails = field(default_factory=ModelDetails)


class LLMProvider(ABC):
    """
    Abstract interface that all backends must satisfy.

    Implementations should:
    1. Set provider_name and model_name in __init__
    2. Implement all abstract methods
    3. Keep no per-request state; calls may run concurrently
    """

    provider_name: str  # e.g., "anthropic"
    model_name: str     # model id sent to the backend

    async def initialize(self) -> None:
        """Called on application startup. Set up clients here."""

    async def shutdown(self) -> None:
        """Called on application shutdown. Release clients here."""

    @abstractmethod
    async def chat(self, messages: list[Message], options: ChatOptions) -> ChatResponse:
        """
        Perform a chat completion.

        Args:
            messages: Conversation in order
            options: Sampling options

        Returns:
            ChatResponse with non-empty content

        Raises:
            APIError: the backend rejected the request or was unreachable
            ParseError: the backend response had an unexpected shape
        """

    @abstractmethod
    def get_models(self) -> list[Model]:
        """
        List the models this provider exposes.

        Must be fast and must not raise.
        """

    @abstractmethod
    async def get_model_details(self, name: str) -> dict:
        """
        Describe a single model in the /api/show document shape.

        Raises:
            ModelNotFoundError: name is not in the catalog
        """
