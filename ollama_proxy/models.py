"""
Pydantic models for the Ollama wire format.

Only the fields the proxy reads are declared; anything else a client sends
is ignored so newer Ollama clients keep working.
"""

from typing import Optional

from pydantic import BaseModel, field_validator

from .provider import ChatOptions, Message, Model


class ChatMessage(BaseModel):
    """A message as sent by Ollama clients."""
    role: str = "user"
    content: str

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value):
        # Missing, null or non-string roles decode as "user"
        return value if isinstance(value, str) else "user"


class ChatRequestOptions(BaseModel):
    """The subset of Ollama "options" the proxy honours."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    num_predict: Optional[int] = None


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""
    messages: list[ChatMessage]
    model: Optional[str] = None  # informational, the provider picks the model
    options: Optional[ChatRequestOptions] = None

    def to_messages(self) -> list[Message]:
        return [Message(role=m.role, content=m.content) for m in self.messages]

    def to_options(self) -> ChatOptions:
        options = ChatOptions()
        if self.options is None:
            return options
        if self.options.temperature is not None:
            options.temperature = self.options.temperature
        if self.options.top_p is not None:
            options.top_p = self.options.top_p
        if self.options.num_predict is not None and self.options.num_predict > 0:
            options.max_tokens = self.options.num_predict
        return options


class ChatResponseBody(BaseModel):
    """Response body for POST /api/chat (non-streaming)."""
    model: str
    created_at: str
    message: ChatMessage
    done: bool = True
    # Timing fields carry no measurement, they only keep the shape
    total_duration: int = 0
    load_duration: int = 0
    prompt_eval_count: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: int = 0


class ShowRequest(BaseModel):
    """Request body for POST /api/show."""
    name: str


class TagsResponse(BaseModel):
    """Response body for GET /api/tags."""
    models: list[Model]


class ErrorResponse(BaseModel):
    """Error body, same shape Ollama itself returns."""
    error: str
