"""
workshop-factory — generator session streaming

File: src/workshop_factory/generation/stream.py
Last updated: 2026-10-17

Purpose
- Bridge a push-based generator session (delta, final-message and idle
  callbacks) into one ordered async iterator of ``StreamChunk`` objects.

Ordering and cleanup
- Callbacks run synchronously on the event loop and only append to a FIFO
  buffer. The consumer suspends on a single-slot wake-up future; the
  "buffer empty?" check and the creation of that future happen with no
  ``await`` in between, so a wake-up cannot be lost.
- The idle signal enqueues the end-of-stream sentinel one loop tick later
  (``loop.call_soon``), so content events already scheduled are delivered
  first.
- All three subscriptions are released in a ``finally`` block: on exhaustion,
  on early ``aclose()`` by the consumer, and when an error propagates.

Callers that may stop iterating early should wrap the iterator in
``contextlib.aclosing`` so cleanup happens deterministically rather than at
garbage collection. No timeout is applied here.
"""

from __future__ import annotations

import asyncio
import enum
from collections import deque
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import structlog

from workshop_factory.constants import DELTA_EVENT, IDLE_EVENT, MESSAGE_EVENT

Unsubscribe = Callable[[], None]


class TransportFailure(RuntimeError):
    """Raised when the outbound message cannot be sent to the generator session."""


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """Event delivered by a generator session to subscribed handlers."""

    type: str
    content: str = ""


SessionHandler = Callable[[SessionEvent], None]


@runtime_checkable
class GeneratorSession(Protocol):
    """Minimal surface consumed from an external generator session."""

    async def send(self, message: str) -> Any: ...

    def on(self, event_type: str, handler: SessionHandler) -> Unsubscribe: ...


class ChunkKind(enum.Enum):
    DELTA = "delta"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class StreamChunk:
    """One unit yielded by ``stream_response``.

    ``content`` is the fragment for ``DELTA`` chunks and the final assembled
    text for ``COMPLETE`` chunks; ``accumulated`` is the text received so far.
    """

    kind: ChunkKind
    content: str
    accumulated: str


async def stream_response(
    session: GeneratorSession,
    message: str,
    *,
    logger: Any | None = None,
) -> AsyncIterator[StreamChunk]:
    """Send ``message`` and yield chunks until the session reports idle."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    loop = asyncio.get_running_loop()
    buffer: deque[StreamChunk | None] = deque()
    fragments: list[str] = []
    wakeup: asyncio.Future[None] | None = None

    def _enqueue(item: StreamChunk | None) -> None:
        nonlocal wakeup
        buffer.append(item)
        waiter, wakeup = wakeup, None
        if waiter is not None and not waiter.done():
            waiter.set_result(None)

    def _on_delta(event: SessionEvent) -> None:
        fragments.append(event.content)
        _enqueue(
            StreamChunk(
                kind=ChunkKind.DELTA,
                content=event.content,
                accumulated="".join(fragments),
            )
        )

    def _on_message(event: SessionEvent) -> None:
        _enqueue(
            StreamChunk(
                kind=ChunkKind.COMPLETE,
                content=event.content,
                accumulated=event.content,
            )
        )

    def _on_idle(_event: SessionEvent) -> None:
        loop.call_soon(_enqueue, None)

    unsubscribers: list[Unsubscribe] = []
    try:
        unsubscribers.append(session.on(DELTA_EVENT, _on_delta))
        unsubscribers.append(session.on(MESSAGE_EVENT, _on_message))
        unsubscribers.append(session.on(IDLE_EVENT, _on_idle))

        try:
            await session.send(message)
        except Exception as exc:
            log.warning("stream_send_failed", error=str(exc), error_type=type(exc).__name__)
            raise TransportFailure(f"failed to send message to generator session: {exc}") from exc

        while True:
            if not buffer:
                wakeup = loop.create_future()
                await wakeup
            while buffer:
                chunk = buffer.popleft()
                if chunk is None:
                    return
                yield chunk
    finally:
        for unsubscribe in reversed(unsubscribers):
            unsubscribe()


async def collect_response(
    session: GeneratorSession,
    message: str,
    *,
    on_chunk: Callable[[StreamChunk], None] | None = None,
    logger: Any | None = None,
) -> str:
    """Drain the stream and return the final assembled text.

    The ``COMPLETE`` chunk wins when one arrives; otherwise the accumulated
    deltas are returned. Subscriptions are released before this returns or
    raises, including when ``on_chunk`` raises.
    """

    final: str | None = None
    accumulated = ""
    async with aclosing(stream_response(session, message, logger=logger)) as stream:
        async for chunk in stream:
            if on_chunk is not None:
                on_chunk(chunk)
            accumulated = chunk.accumulated
            if chunk.kind is ChunkKind.COMPLETE:
                final = chunk.content
    return final if final is not None else accumulated


__all__ = [
    "ChunkKind",
    "GeneratorSession",
    "SessionEvent",
    "SessionHandler",
    "StreamChunk",
    "TransportFailure",
    "Unsubscribe",
    "collect_response",
    "stream_response",
]
