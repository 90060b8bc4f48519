from __future__ import annotations

import logging
from typing import Any, Iterable


class ScriptExhausted(BaseException):
    """Raised when an operation is invoked more often than scripted.

    Derives from BaseException so the executor cannot absorb it into a retry.
    """


class ScriptedOperation:
    """Replay a fixed outcome sequence; exceptions in it are raised, anything else returned."""

    def __init__(self, outcomes: Iterable[Any], events: list[tuple[str, Any]] | None = None) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0
        self.events = events if events is not None else []

    def _next(self) -> Any:
        if self.calls >= len(self._outcomes):
            raise ScriptExhausted(f"operation called {self.calls + 1} times, scripted {len(self._outcomes)}")
        item = self._outcomes[self.calls]
        self.calls += 1
        self.events.append(("invoke", self.calls))
        if isinstance(item, BaseException):
            raise item
        return item

    def __call__(self) -> Any:
        return self._next()


class AsyncScriptedOperation(ScriptedOperation):
    async def __call__(self) -> Any:
        return self._next()


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self, events: list[tuple[str, Any]] | None = None) -> None:
        self.delays: list[float] = []
        self.events = events if events is not None else []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.events.append(("sleep", seconds))


class EventHandler(logging.Handler):
    """Logging handler that appends messages to a shared event list."""

    def __init__(self, events: list[tuple[str, Any]]) -> None:
        super().__init__(level=logging.DEBUG)
        self.events = events

    def emit(self, record: logging.LogRecord) -> None:
        self.events.append(("log", record.getMessage()))
