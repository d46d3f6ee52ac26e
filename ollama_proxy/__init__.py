"""
Ollama Proxy - serve the Ollama API on top of a hosted model.

This package provides:
- The LLMProvider interface and its data records
- An Anthropic Messages API provider
- FastAPI app factory with the Ollama endpoints
- A supervisor that starts and stops the server from any thread

Backends only need to subclass LLMProvider and implement the abstract methods.
"""

from .provider import LLMProvider, Message, ChatOptions, ChatResponse, Model, ModelDetails
from .errors import (
    LLMError,
    APIError,
    ParseError,
    ModelNotFoundError,
    InvalidRequestError,
    PortInUseError,
    ServerStartError,
)
from .anthropic_provider import AnthropicProvider
from .config import Settings, get_settings, setup_logging
from .server import create_app
from .supervisor import ServerSupervisor, ServerState

__all__ = [
    # Provider interface
    "LLMProvider",
    "Message",
    "ChatOptions",
    "ChatResponse",
    "Model",
    "ModelDetails",
    # Errors
    "LLMError",
    "APIError",
    "ParseError",
    "ModelNotFoundError",
    "InvalidRequestError",
    "PortInUseError",
    "ServerStartError",
    # Backends
    "AnthropicProvider",
    # Config
    "Settings",
    "get_settings",
    "setup_logging",
    # App factory and lifecycle
    "create_app",
    "ServerSupervisor",
    "ServerState",
]
