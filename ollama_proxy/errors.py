"""
Error types for the Ollama proxy.

Provider failures derive from LLMError. The server maps each class to an
HTTP status and an Ollama-style {"error": "..."} body.
"""

from typing import Optional


class LLMError(Exception):
    """Base class for failures raised by an LLMProvider."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class APIError(LLMError):
    """The remote backend rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(LLMError):
    """The remote backend answered in a shape we could not interpret."""


class ModelNotFoundError(ParseError):
    """The requested model is not in the provider's catalog."""

    def __init__(self, model_name: str):
        super().__init__(f"model '{model_name}' not found")
        self.model_name = model_name


class InvalidRequestError(Exception):
    """An inbound request body is malformed or missing a required field."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PortInUseError(RuntimeError):
    """The configured port is already bound by another process."""

    def __init__(self, port: int):
        super().__init__(
            f"Port {port} is already in use. "
            f"Please stop any other services using this port."
        )
        self.port = port


class ServerStartError(RuntimeError):
    """The HTTP server did not come up."""
