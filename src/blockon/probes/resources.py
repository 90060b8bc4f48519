"""Ready-made operations for waiting on external resources."""

from __future__ import annotations

import socket
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import requests

DEFAULT_HEADERS: Mapping[str, str] = {
    "User-Agent": "blockon-probe",
    "Accept": "*/*",
    "Connection": "close",
}


class ProbeError(RuntimeError):
    """Raised when a resource is unreachable or answers with the wrong status."""


def http_probe(
    url: str,
    *,
    timeout_seconds: float,
    expect_status: int | None = None,
    headers: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> requests.Response:
    """GET ``url`` once, raising ``ProbeError`` unless the response counts as ready.

    Without ``expect_status`` any status below 400 is accepted. The error args
    are ``(url, status)`` or ``(url, exception name)`` so that a resource stuck
    in the same state keeps producing equal failures.
    """
    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, timeout=timeout_seconds, headers=merged_headers)
    except requests.RequestException as exc:
        raise ProbeError(url, type(exc).__name__) from exc

    if expect_status is not None:
        ready = response.status_code == expect_status
    else:
        ready = response.status_code < 400
    if not ready:
        raise ProbeError(url, response.status_code)
    return response


def tcp_probe(host: str, port: int, *, timeout_seconds: float) -> tuple[str, int]:
    """Open and close a TCP connection, raising ``OSError`` while refused."""
    with socket.create_connection((host, port), timeout=timeout_seconds):
        pass
    return host, port


def path_probe(path: Path) -> Optional[Path]:
    """Return ``path`` once it exists, otherwise None."""
    if path.exists():
        return path
    return None


__all__ = ["DEFAULT_HEADERS", "ProbeError", "http_probe", "path_probe", "tcp_probe"]
