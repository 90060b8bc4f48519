"""Outcome classification for result-shaped and option-shaped operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, Optional, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

CompareMode = Literal["equality", "text"]


class _Absent:
    def __repr__(self) -> str:
        return "ABSENT"


# Every absence looks alike, so option variants only ever announce once.
ABSENT: Any = _Absent()


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a single invocation of the retried operation."""

    ok: bool
    value: Optional[T] = None
    signature: Any = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, signature: Any, detail: str | None = None) -> "Outcome[T]":
        return cls(ok=False, signature=signature, detail=detail)


@runtime_checkable
class OutcomeShape(Protocol):
    """How an invocation is turned into an :class:`Outcome` and reported."""

    catches: tuple[type[BaseException], ...]

    def classify(self, value: Any) -> Outcome[Any]:
        """Classify a value returned by the operation."""
        ...

    def classify_error(self, exc: BaseException) -> Outcome[Any]:
        """Classify an exception listed in ``catches``."""
        ...

    def message(self, outcome: Outcome[Any], locator: str | None) -> str:
        """Render the diagnostic line for a newly seen failure."""
        ...


class ResultShape:
    """Operations that return on success and raise on failure."""

    def __init__(
        self,
        retry_on: tuple[type[Exception], ...] = (Exception,),
        *,
        compare: CompareMode = "equality",
    ) -> None:
        if not retry_on:
            raise ValueError("retry_on must contain at least one exception type")
        if compare not in ("equality", "text"):
            raise ValueError(f"unknown compare mode {compare!r}")
        self.catches = tuple(retry_on)
        self.compare = compare

    def classify(self, value: Any) -> Outcome[Any]:
        return Outcome.success(value)

    def classify_error(self, exc: BaseException) -> Outcome[Any]:
        return Outcome.failure(self.signature(exc), repr(exc))

    def signature(self, exc: BaseException) -> Any:
        """Return the value compared against the last reported failure.

        ``equality`` uses the exception class's own ``__eq__`` when it defines
        one, otherwise type and ``args``, with chained errors inside ``args``
        compared the same way. ``text`` compares ``repr`` renderings.
        """
        if self.compare == "text":
            return repr(exc)
        return _error_key(exc)

    def message(self, outcome: Outcome[Any], locator: str | None) -> str:
        if locator:
            return f"Error at {locator}: {outcome.detail}, will block till success..."
        return f"Error: {outcome.detail}, will block till success..."


class OptionShape:
    """Operations that return ``None`` while the value is not available yet."""

    catches: tuple[type[BaseException], ...] = ()

    def classify(self, value: Any) -> Outcome[Any]:
        if value is None:
            return Outcome.failure(ABSENT)
        return Outcome.success(value)

    # Unreachable while ``catches`` is empty; present to satisfy OutcomeShape.
    def classify_error(self, exc: BaseException) -> Outcome[Any]:
        raise TypeError("option-shaped operations do not retry on exceptions") from exc

    def message(self, outcome: Outcome[Any], locator: str | None) -> str:
        if locator:
            return f"None at {locator}, will block till Some..."
        return "None, will block till Some..."


def _error_key(exc: BaseException) -> Any:
    if type(exc).__eq__ is not BaseException.__eq__:
        # The type goes first so a user __eq__ only ever sees its own class.
        return (type(exc), exc)
    return (type(exc), _arg_key(exc.args))


def _arg_key(value: Any) -> Any:
    # Exceptions compare by identity, so a wrapped cause would make every
    # repeat of one outage look new.
    if isinstance(value, BaseException):
        return _error_key(value)
    if isinstance(value, tuple):
        return tuple(_arg_key(item) for item in value)
    if isinstance(value, list):
        return [_arg_key(item) for item in value]
    return value


__all__ = [
    "ABSENT",
    "CompareMode",
    "OptionShape",
    "Outcome",
    "OutcomeShape",
    "ResultShape",
]
