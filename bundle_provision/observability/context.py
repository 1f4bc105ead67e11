from __future__ import annotations

import secrets
from contextvars import ContextVar


_attempt_id: ContextVar[str | None] = ContextVar("attempt_id", default=None)
_state: ContextVar[str | None] = ContextVar("state", default=None)
_errors: ContextVar[list[str] | None] = ContextVar("errors", default=None)


def new_attempt_id() -> str:
    return secrets.token_hex(8)


def bind_attempt(attempt_id: str | None = None) -> str:
    """Start a fresh logging context for one provisioning attempt."""

    value = attempt_id or new_attempt_id()
    _attempt_id.set(value)
    _state.set(None)
    _errors.set([])
    return value


def set_state(state: str) -> None:
    _state.set(state)


def add_error(message: str) -> None:
    errs = list(_errors.get() or [])
    errs.append(message)
    _errors.set(errs)


def snapshot() -> dict[str, object]:
    """Return a snapshot of current observability context for logging."""

    out: dict[str, object] = {}
    if (v := _attempt_id.get()) is not None:
        out["attempt_id"] = v
    if (v := _state.get()) is not None:
        out["state"] = v
    if errs := _errors.get():
        out["errors"] = list(errs)
    return out
