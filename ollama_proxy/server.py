"""
FastAPI application factory for the Ollama-compatible front end.

Decodes Ollama requests, calls the LLMProvider and encodes the results back
into Ollama response shapes. It never talks to a backend directly.
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError

from .errors import APIError, InvalidRequestError, LLMError, ModelNotFoundError
from .models import ChatMessage, ChatRequest, ChatResponseBody, ErrorResponse, ShowRequest, TagsResponse
from .provider import LLMProvider


logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _log_body(label: str, body) -> None:
    """Debug-log a request or response body."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    else:
        body = json.dumps(body)
    logger.debug("%s: %s", label, body)


async def _decode(request: Request, schema: type[BaseModel]):
    body = await request.body()
    try:
        return schema.model_validate_json(body)
    except ValidationError as e:
        errors = e.errors()
        reason = errors[0]["msg"] if errors else str(e)
        location = ".".join(str(p) for p in errors[0]["loc"]) if errors else ""
        if location:
            reason = f"{location}: {reason}"
        raise InvalidRequestError(f"invalid request body ({reason})") from e


def create_app(
    provider: LLMProvider,
    title: str = "Ollama Proxy",
    description: str = "Ollama-compatible API backed by a hosted model",
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create a FastAPI application serving the Ollama API.

    Args:
        provider: Backend implementation. initialize()/shutdown() are called
                  from the app lifespan.
        title: OpenAPI title
        description: OpenAPI description
        version: OpenAPI version

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Ollama proxy starting up")
        logger.info("Provider: %s", provider.provider_name)
        logger.info("Model: %s", provider.model_name)

        await provider.initialize()
        yield

        logger.info("Ollama proxy shutting down")
        await provider.shutdown()

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=lifespan,
    )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return _error(400, exc.message)

    @app.exception_handler(ModelNotFoundError)
    async def model_not_found_handler(request: Request, exc: ModelNotFoundError):
        logger.warning("Unknown model requested: %s", exc.model_name)
        return _error(404, exc.message)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.error("%s rejected the request (HTTP %s)", provider.provider_name, exc.status_code)
        return _error(502, exc.message)

    @app.exception_handler(LLMError)
    async def llm_error_handler(request: Request, exc: LLMError):
        logger.error("Unexpected %s response: %s", provider.provider_name, exc.message)
        return _error(502, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Error processing %s: %s", request.url.path, exc)
        return _error(500, str(exc) or exc.__class__.__name__)

    @app.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    async def root():
        """Liveness probe."""
        return "Ollama is running"

    @app.get("/api/tags", response_model=TagsResponse)
    async def tags():
        """List the provider's catalog."""
        return TagsResponse(models=provider.get_models())

    @app.post("/api/show")
    async def show(request: Request):
        """Describe a single model."""
        show_request = await _decode(request, ShowRequest)
        details = await provider.get_model_details(show_request.name)
        return JSONResponse(content=details, media_type="application/json")

    @app.post("/api/chat")
    async def chat(request: Request):
        """Chat completion endpoint."""
        _log_body("Request body", await request.body())

        try:
            chat_request = await _decode(request, ChatRequest)
            result = await provider.chat(chat_request.to_messages(), chat_request.to_options())
        except Exception as e:
            logger.debug("[POST /api/chat] failed: %s", e, exc_info=True)
            raise

        body = ChatResponseBody(
            model=result.model,
            created_at=result.created_at,
            message=ChatMessage(role="assistant", content=result.content),
            prompt_eval_count=result.prompt_tokens,
            eval_count=result.completion_tokens,
        ).model_dump(exclude_none=True)

        _log_body("Response body", body)
        logger.debug("[POST /api/chat] responded with 200")
        return JSONResponse(content=body)

    return app
