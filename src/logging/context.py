# src/logging/context.py — v2
"""Contextual logging support — attach render_id, fingerprint, reference to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per render call.
_render_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "render_id", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_reference: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "reference", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    render_id: str | None = None
    fingerprint: str | None = None
    reference: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        render_id=_render_id.get(),
        fingerprint=_fingerprint.get(),
        reference=_reference.get(),
    )


def set_render_context(render_id: str, reference: str | None = None) -> None:
    """Set render-level context (called once per render call)."""
    _render_id.set(render_id)
    _reference.set(reference)
    _fingerprint.set(None)


def set_fingerprint_context(fingerprint: str) -> None:
    """Record the fingerprint being looked up or compiled."""
    _fingerprint.set(fingerprint)


def clear_context() -> None:
    """Reset all context variables."""
    _render_id.set(None)
    _fingerprint.set(None)
    _reference.set(None)
