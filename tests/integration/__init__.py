"""
workshop-factory — integration test helpers

File: tests/integration/__init__.py

Purpose
- Scripted in-memory generator session shared by the integration tests.
- Must not trigger provider calls or network access.
"""

from __future__ import annotations

import asyncio
from typing import Any

from workshop_factory.constants import DELTA_EVENT, IDLE_EVENT, MESSAGE_EVENT
from workshop_factory.generation import SessionEvent


class ScriptedSession:
    """Answers every ``send`` by streaming ``response`` in fixed-size deltas."""

    def __init__(self, response: str, *, chunk_size: int = 40, final_message: bool = False) -> None:
        self.response = response
        self.chunk_size = chunk_size
        self.final_message = final_message
        self.sent: list[str] = []
        self._handlers: dict[str, list[Any]] = {}

    async def send(self, message: str) -> None:
        self.sent.append(message)
        asyncio.get_running_loop().call_soon(self._stream_ticks, 0)

    def on(self, event_type: str, handler: Any) -> Any:
        self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self._handlers[event_type].remove(handler)

    @property
    def subscriber_count(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())

    def _stream_ticks(self, offset: int) -> None:
        if offset < len(self.response):
            chunk = self.response[offset : offset + self.chunk_size]
            self._emit(SessionEvent(DELTA_EVENT, chunk))
            asyncio.get_running_loop().call_soon(self._stream_ticks, offset + self.chunk_size)
            return
        if self.final_message:
            self._emit(SessionEvent(MESSAGE_EVENT, self.response))
        self._emit(SessionEvent(IDLE_EVENT))

    def _emit(self, event: SessionEvent) -> None:
        for handler in list(self._handlers.get(event.type, ())):
            handler(event)
