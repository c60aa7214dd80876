"""Streaming Claude completions forwarded to an outbound byte channel."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from anthropic import AsyncAnthropic

from victry_ai.llm_core.config import Settings
from victry_ai.llm_core.logger import get_logger
from .client import get_anthropic_client, handle_provider_error
from .core import build_message_params, normalize_messages
from .models import CompletionRequest

logger = get_logger(__name__)

_END = object()


class _Failure:
    def __init__(self, error: BaseException) -> None:
        self.error = error


class OutboundChannel:
    """
    Byte channel between a stream session (the only writer) and the HTTP response body.

    Writes never block. The channel finishes exactly once, either by ``close()`` or by
    ``error()``; whichever comes first wins and everything after it is refused.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def enqueue(self, chunk: bytes) -> bool:
        """Queue a chunk. Returns False when the channel is already finished."""
        if self._finished:
            return False
        self._queue.put_nowait(chunk)
        return True

    def close(self) -> bool:
        """Finish the channel normally. Returns False when it was already finished."""
        return self._finish(_END)

    def error(self, error: BaseException) -> bool:
        """Finish the channel with an error, raised to the reader after queued chunks."""
        return self._finish(_Failure(error))

    def _finish(self, marker: Any) -> bool:
        if self._finished:
            return False
        self._finished = True
        self._queue.put_nowait(marker)
        return True

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            if isinstance(item, _Failure):
                raise item.error
            yield item


class StreamSession:
    """
    One streaming request: an upstream Claude stream paired with an outbound channel.

    ``run()`` is the single receive loop. Text events are encoded and queued, the end of the
    upstream closes the channel, and an upstream failure is delivered through the channel's
    error path. ``abort()`` cancels the upstream stream at most once.
    """

    def __init__(
        self,
        upstream: Any,
        *,
        channel: Optional[OutboundChannel] = None,
        on_finish: Optional[Callable[[], Awaitable[Any]]] = None,
    ) -> None:
        """
        Args:
            upstream: Async iterable of stream events with an async ``close()`` method
                      (``anthropic.lib.streaming.AsyncMessageStream``).
            channel: Outbound channel. A fresh one is created when omitted.
            on_finish: Cleanup awaited once the receive loop has ended.
        """
        self.upstream = upstream
        self.channel = channel or OutboundChannel()
        self._on_finish = on_finish
        self._aborted = False
        self._done = False
        self._pump: Optional[asyncio.Task[None]] = None
        self._abort_watch: Optional[asyncio.Task[None]] = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    def bind_abort(self, signal: asyncio.Event) -> None:
        """Abort the upstream stream as soon as ``signal`` is set."""
        self._abort_watch = asyncio.create_task(self._watch_abort(signal))

    def start(self) -> "StreamSession":
        """Run the receive loop in the background."""
        self._pump = asyncio.create_task(self.run())
        return self

    async def run(self) -> None:
        try:
            async for event in self.upstream:
                text = _event_text(event)
                if not text:
                    continue
                if not self.channel.enqueue(text.encode("utf-8")):
                    logger.debug("Outbound stream already finished; no longer reading upstream events.")
                    break
        except Exception as exc:
            if self._aborted:
                logger.debug("Upstream stream ended after abort: %s", exc)
            else:
                error = handle_provider_error(exc)
                logger.error("Streaming error: %s", error.message)
                self.channel.error(error)
        else:
            self.channel.close()
        finally:
            self._done = True
            # An abort in progress finishes closing the upstream on its own
            if self._abort_watch is not None and not self._aborted:
                self._abort_watch.cancel()
            if self._on_finish is not None:
                await self._on_finish()

    async def abort(self) -> None:
        """Cancel the upstream stream. No-op once the stream has finished or was aborted."""
        if self._aborted or self._done:
            return
        self._aborted = True
        logger.info("Client disconnected; aborting upstream Claude stream.")
        self.channel.close()
        await self.upstream.close()

    async def _watch_abort(self, signal: asyncio.Event) -> None:
        await signal.wait()
        await self.abort()


def _event_text(event: Any) -> Optional[str]:
    # Only "text" events carry output; the SDK also yields raw protocol events
    if getattr(event, "type", None) == "text":
        return getattr(event, "text", None)
    return None


class ClaudeStreaming:
    """Opens streaming Claude requests and hands back a running ``StreamSession``."""

    def __init__(self, client: Optional[AsyncAnthropic] = None, settings: Optional[Settings] = None):
        """
        Args:
            client: Anthropic client. Defaults to the shared client, resolved on first use.
            settings: Request defaults and client configuration. Defaults to ``Settings.from_env()``.
        """
        self._client = client
        self.settings = settings or Settings.from_env()

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = get_anthropic_client(self.settings)
        return self._client

    async def open(self, request: CompletionRequest, abort_signal: Optional[asyncio.Event] = None) -> StreamSession:
        """
        Open a streaming request.

        Failures before the upstream stream exists are raised here, so callers can still
        answer with a plain error response. Later failures travel through the session's channel.

        Args:
            request: The completion request. ``tools`` are forwarded, handlers are not used.
            abort_signal: Set by the caller when the client goes away.

        Returns:
            The running session.

        Raises:
            InvalidRequestError: If the request has neither prompt nor messages.
            ProviderError: If Claude rejects the request.
        """
        messages = normalize_messages(request)
        params = build_message_params(request, messages, self.settings)

        stack = AsyncExitStack()
        try:
            upstream = await stack.enter_async_context(self.client.messages.stream(**params))
        except Exception as exc:
            await stack.aclose()
            raise handle_provider_error(exc) from exc

        session = StreamSession(upstream, on_finish=stack.aclose)
        if abort_signal is not None:
            session.bind_abort(abort_signal)
        logger.info("Opened Claude stream (model=%s).", params["model"])
        return session.start()
