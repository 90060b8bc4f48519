"""Retry-until-success executors.

Every variant drives the same state machine (:func:`_retry_steps`). It asks its
driver either to invoke the operation or to pause, and reports each newly seen
failure once. The blocking drivers answer a pause with nothing; the async
drivers answer it by sleeping for the pacing interval.

There is deliberately no attempt limit: these helpers are for operations that
must eventually succeed, such as waiting on infrastructure during startup. An
operation that never converges keeps the caller blocked forever. Wrap the
async variants in ``asyncio.wait_for`` when a deadline is needed.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Coroutine, Generator
from datetime import timedelta
from typing import Any, Optional, TypeVar

from blockon.config import RetryConfig, retry_config_from_env
from blockon.core.callsite import resolve_locator
from blockon.core.outcome import OptionShape, Outcome, OutcomeShape, ResultShape

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]

LOGGER = logging.getLogger(__name__)

_NO_MARKER = object()


class Step(enum.Enum):
    INVOKE = "invoke"
    PAUSE = "pause"


class FailureTracker:
    """Emit one diagnostic per distinct consecutive failure signature."""

    def __init__(self, shape: OutcomeShape, locator: str | None) -> None:
        self._shape = shape
        self._locator = locator
        self._marker: Any = _NO_MARKER

    def observe(self, outcome: Outcome[Any]) -> bool:
        """Record a failed outcome, returning True when it was reported."""

        if self._marker is not _NO_MARKER and self._marker == outcome.signature:
            return False
        LOGGER.warning(self._shape.message(outcome, self._locator))
        self._marker = outcome.signature
        return True


def _retry_steps(
    shape: OutcomeShape, locator: str | None
) -> Generator[Step, Optional[Outcome[Any]], Any]:
    tracker = FailureTracker(shape, locator)
    outcome = yield Step.INVOKE
    while not outcome.ok:
        tracker.observe(outcome)
        yield Step.PAUSE
        outcome = yield Step.INVOKE
    return outcome.value


def _invoke(operation: Callable[[], Any], shape: OutcomeShape) -> Outcome[Any]:
    try:
        value = operation()
    except shape.catches as exc:
        return shape.classify_error(exc)
    return shape.classify(value)


async def _invoke_async(operation: Callable[[], Awaitable[Any]], shape: OutcomeShape) -> Outcome[Any]:
    try:
        value = await operation()
    except shape.catches as exc:
        return shape.classify_error(exc)
    return shape.classify(value)


def _drive(operation: Callable[[], Any], shape: OutcomeShape, locator: str | None) -> Any:
    steps = _retry_steps(shape, locator)
    request = next(steps)
    while True:
        reply = _invoke(operation, shape) if request is Step.INVOKE else None
        try:
            request = steps.send(reply)
        except StopIteration as done:
            return done.value


async def _drive_async(
    operation: Callable[[], Awaitable[Any]],
    shape: OutcomeShape,
    locator: str | None,
    *,
    interval: float,
    sleep: SleepFn,
) -> Any:
    steps = _retry_steps(shape, locator)
    request = next(steps)
    while True:
        if request is Step.INVOKE:
            reply = await _invoke_async(operation, shape)
        else:
            await sleep(interval)
            reply = None
        try:
            request = steps.send(reply)
        except StopIteration as done:
            return done.value


def _result_shape(config: RetryConfig) -> ResultShape:
    return ResultShape(config.exception_types(), compare=config.compare)


def _interval_seconds(wait: float | timedelta | None, config: RetryConfig) -> float:
    if wait is None:
        return config.interval_seconds
    seconds = wait.total_seconds() if isinstance(wait, timedelta) else float(wait)
    if seconds < 0:
        raise ValueError(f"wait must be non-negative, got {seconds}")
    return seconds


def retry_until_ok(
    operation: Callable[[], T],
    *,
    label: str | None = None,
    config: RetryConfig | None = None,
) -> T:
    """Call ``operation`` back-to-back until it returns without raising.

    Exceptions matching ``config.retry_on`` count as failures; anything else
    propagates. Returns the first successful value.
    """
    cfg = config or retry_config_from_env()
    locator = resolve_locator(label, track_caller=cfg.track_caller, stacklevel=2)
    return _drive(operation, _result_shape(cfg), locator)


def retry_until_ok_async(
    operation: Callable[[], Awaitable[T]],
    *,
    wait: float | timedelta | None = None,
    label: str | None = None,
    config: RetryConfig | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> Coroutine[Any, Any, T]:
    """Await ``operation()`` until it resolves without raising.

    Sleeps ``wait`` (seconds or timedelta, default ``config.interval_ms``)
    after every failed attempt. The call site is captured when this function
    is called, not when the returned coroutine is first awaited.
    """
    cfg = config or retry_config_from_env()
    interval = _interval_seconds(wait, cfg)
    locator = resolve_locator(label, track_caller=cfg.track_caller, stacklevel=2)
    return _drive_async(operation, _result_shape(cfg), locator, interval=interval, sleep=sleep)


def retry_until_some(
    operation: Callable[[], Optional[T]],
    *,
    label: str | None = None,
    config: RetryConfig | None = None,
) -> T:
    """Call ``operation`` back-to-back until it returns something other than None."""
    cfg = config or retry_config_from_env()
    locator = resolve_locator(label, track_caller=cfg.track_caller, stacklevel=2)
    return _drive(operation, OptionShape(), locator)


def retry_until_some_async(
    operation: Callable[[], Awaitable[Optional[T]]],
    *,
    wait: float | timedelta | None = None,
    label: str | None = None,
    config: RetryConfig | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> Coroutine[Any, Any, T]:
    """Await ``operation()`` until it resolves to something other than None."""
    cfg = config or retry_config_from_env()
    interval = _interval_seconds(wait, cfg)
    locator = resolve_locator(label, track_caller=cfg.track_caller, stacklevel=2)
    return _drive_async(operation, OptionShape(), locator, interval=interval, sleep=sleep)


__all__ = [
    "FailureTracker",
    "Step",
    "retry_until_ok",
    "retry_until_ok_async",
    "retry_until_some",
    "retry_until_some_async",
]
