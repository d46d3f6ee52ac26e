"""Shared test fixtures for ollama-proxy tests."""

import socket
from typing import Optional

import pytest

from ollama_proxy.config import Settings
from ollama_proxy.errors import ModelNotFoundError
from ollama_proxy.provider import ChatOptions, ChatResponse, LLMProvider, Message, Model, ModelDetails


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

MOCK_API_KEY = "sk-ant-test"
MOCK_BASE_URL = "https://anthropic.test"
MESSAGES_URL = f"{MOCK_BASE_URL}/v1/messages"
SONNET = "claude-3-5-sonnet-20241022"


def anthropic_response(text="hello", input_tokens: Optional[int] = 12, output_tokens: Optional[int] = 7) -> dict:
    """Build a Messages API success body."""
    body = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": SONNET,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
    }
    if input_tokens is not None or output_tokens is not None:
        body["usage"] = {}
        if input_tokens is not None:
            body["usage"]["input_tokens"] = input_tokens
        if output_tokens is not None:
            body["usage"]["output_tokens"] = output_tokens
    return body


# ─────────────────────────────────────────────────────────────────────
# FAKE PROVIDER
# ─────────────────────────────────────────────────────────────────────

class FakeProvider(LLMProvider):
    """In-memory provider that records calls."""

    def __init__(self, reply="hello", error: Optional[Exception] = None, usage=(3, 5)):
        self.provider_name = "fake"
        self.model_name = "fake-model"
        self.reply = reply
        self.error = error
        self.usage = usage
        self.calls: list[tuple[list[Message], ChatOptions]] = []
        self.initialized = False
        self.shut_down = False

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.shut_down = True

    async def chat(self, messages, options):
        self.calls.append((messages, options))
        if self.error is not None:
            raise self.error
        prompt_tokens, completion_tokens = self.usage if self.usage else (None, None)
        return ChatResponse(
            content=self.reply,
            model=self.model_name,
            created_at="2024-10-22T12:00:00Z",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

    def get_models(self):
        return [
            Model(
                name="fake-model",
                model="fake-model",
                modified_at="2024-10-22T12:00:00Z",
                size=1024,
                digest="fake-digest",
                details=ModelDetails(family="fake", parameter_size="1B"),
            )
        ]

    async def get_model_details(self, name):
        if name != "fake-model":
            raise ModelNotFoundError(name)
        return {
            "details": {"family": "fake", "parameter_size": "1B"},
            "model_info": {"general.context_length": 4096},
        }


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def sample_messages():
    """Conversation with one system prompt."""
    return [
        Message(role="system", content="You are terse."),
        Message(role="user", content="hi"),
        Message(role="assistant", content="hello"),
        Message(role="user", content="how are you?"),
    ]


def pick_free_port() -> int:
    """A loopback port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def free_port():
    return pick_free_port()


@pytest.fixture
def proxy_settings(free_port):
    """Settings bound to a free port with no shutdown delays."""
    return Settings(
        anthropic_api_key=MOCK_API_KEY,
        host="127.0.0.1",
        port=free_port,
        startup_timeout=5.0,
        shutdown_grace_period=0.5,
        shutdown_timeout=2.0,
        port_release_delay=0.0,
    )
