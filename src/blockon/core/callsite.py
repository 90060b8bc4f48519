"""Call-site locators attached to retry diagnostics."""

from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass


@dataclass(frozen=True)
class CallSite:
    """Source position where a retry loop was started."""

    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


def capture_call_site(stacklevel: int = 1) -> CallSite:
    """Return the position of the frame ``stacklevel`` levels above this call.

    ``stacklevel=1`` is the direct caller. Columns are 1-based; ``0`` means the
    interpreter did not record one.
    """
    if stacklevel < 1:
        raise ValueError("stacklevel must be >= 1")
    frame = sys._getframe(stacklevel)
    summary = traceback.extract_stack(frame, limit=1)[-1]
    colno = getattr(summary, "colno", None)
    return CallSite(
        file=summary.filename,
        line=summary.lineno or frame.f_lineno,
        column=colno + 1 if colno is not None else 0,
    )


def resolve_locator(label: str | None, *, track_caller: bool, stacklevel: int = 1) -> str | None:
    """Pick the locator for a retry loop: explicit label, traced caller, or none."""
    if label:
        return label
    if track_caller:
        return str(capture_call_site(stacklevel + 1))
    return None


__all__ = ["CallSite", "capture_call_site", "resolve_locator"]
