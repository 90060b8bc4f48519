"""Retry-until-success combinators for operations that must eventually succeed."""

from blockon.core.executor import (
    retry_until_ok,
    retry_until_ok_async,
    retry_until_some,
    retry_until_some_async,
)

__all__ = [
    "retry_until_ok",
    "retry_until_ok_async",
    "retry_until_some",
    "retry_until_some_async",
]
