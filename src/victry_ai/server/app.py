"""FastAPI application exposing the completion and streaming routes."""

import asyncio
import os
from typing import AsyncIterator, Optional

from anthropic import AsyncAnthropic
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse

from victry_ai.llm_core.config import Settings
from victry_ai.llm_core.exceptions import InvalidRequestError, LLMRequestError
from victry_ai.llm_core.logger import get_logger, setup_logging
from victry_ai.llm_core.tools import ToolRegistry
from victry_ai.llm_core.tools.catalog import build_default_registry
from victry_ai.llm_impl.anthropic_api import (
    ClaudeCompletion,
    ClaudeStreaming,
    CompletionRequest,
    JobAnalysisRequest,
    StreamSession,
)

logger = get_logger(__name__)

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def create_app(
    registry: Optional[ToolRegistry] = None,
    client: Optional[AsyncAnthropic] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        registry: Tools whose handlers requests may enable through ``toolHandlers``.
                  Defaults to the predefined resume-analysis tools.
        client: Anthropic client. Defaults to the shared client, built on the first request.
        settings: Request defaults and client configuration. Defaults to ``Settings.from_env()``.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Victry AI",
        description="Claude completions with local tool execution and streaming",
        version="0.1.0",
    )
    app.state.registry = registry if registry is not None else build_default_registry()
    app.state.completion = ClaudeCompletion(client=client, settings=settings)
    app.state.streaming = ClaudeStreaming(client=client, settings=settings)

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LLMRequestError)
    async def handle_request_error(request: Request, exc: LLMRequestError) -> JSONResponse:
        if isinstance(exc, InvalidRequestError):
            logger.debug("Rejected %s: %s", request.url.path, exc.message)
        else:
            logger.error("Request to %s failed: %s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = InvalidRequestError("Invalid request body", details={"errors": jsonable_encoder(exc.errors())})
        logger.debug("Rejected %s: invalid request body", request.url.path)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _register_routes(app: FastAPI) -> None:
    @app.post("/api/ai/claude")
    async def claude_completion(body: CompletionRequest, request: Request) -> JSONResponse:
        """Single completion, with one round of tool execution when handlers are enabled."""
        handlers = None
        if body.tool_handlers is not None:
            handlers = request.app.state.registry.select_handlers(body.tool_handlers)

        response = await request.app.state.completion.complete(body, tool_handlers=handlers)
        return JSONResponse(response.to_payload())

    @app.post("/api/ai/analyze-job")
    async def analyze_job(body: JobAnalysisRequest, request: Request) -> JSONResponse:
        """Structured analysis of a job description."""
        options = {"model": body.model} if body.model else {}
        analysis = await request.app.state.completion.analyze_job(body.job_description, **options)
        return JSONResponse({"analysis": analysis})

    @app.post("/api/ai/claude-stream")
    async def claude_stream(body: CompletionRequest, request: Request) -> StreamingResponse:
        """Stream the completion text as raw UTF-8 chunks."""
        abort = asyncio.Event()
        session = await request.app.state.streaming.open(body, abort_signal=abort)
        return StreamingResponse(_stream_body(session, abort), headers=STREAM_HEADERS)


async def _stream_body(session: StreamSession, abort: asyncio.Event) -> AsyncIterator[bytes]:
    try:
        async for chunk in session.channel:
            yield chunk
    finally:
        # Disconnects cancel this generator; a finished session ignores the signal
        abort.set()


def main() -> None:
    """Run the API under uvicorn. Binds to ``VICTRY_HOST``/``VICTRY_PORT`` (default 127.0.0.1:8000)."""
    import uvicorn

    setup_logging()
    host = os.getenv("VICTRY_HOST", "127.0.0.1")
    port = int(os.getenv("VICTRY_PORT", "8000"))
    logger.info("Starting Victry AI on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level="info")
