"""HTTP surface: FastAPI application factory and uvicorn entry point."""

from .app import STREAM_HEADERS, create_app, main

__all__ = ["STREAM_HEADERS", "create_app", "main"]
