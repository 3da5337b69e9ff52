from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from tessera.exceptions import OperationCancelled


class CancellationToken:
    """Thread-safe cancellation flag shared between a request and its caller."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class Deadline:
    deadline_ns: int

    @classmethod
    def from_timeout_ms(cls, milliseconds: int) -> "Deadline":
        return cls(time.monotonic_ns() + int(milliseconds) * 1_000_000)

    def expired(self) -> bool:
        return time.monotonic_ns() >= self.deadline_ns


@dataclass(frozen=True)
class CancellationScope:
    token: CancellationToken = field(default_factory=CancellationToken)
    deadline: Deadline | None = None


_scope_var: ContextVar[CancellationScope | None] = ContextVar(
    "tessera_cancellation_scope",
    default=None,
)


def set_cancellation_scope(scope: CancellationScope) -> Token[CancellationScope | None]:
    return _scope_var.set(scope)


def reset_cancellation_scope(token: Token[CancellationScope | None]) -> None:
    _scope_var.reset(token)


@contextmanager
def cancellation_scope(
    token: CancellationToken | None = None, *, deadline: Deadline | None = None
):
    scope = CancellationScope(token=token or CancellationToken(), deadline=deadline)
    context_token = set_cancellation_scope(scope)
    try:
        yield scope
    finally:
        reset_cancellation_scope(context_token)


def check_cancelled() -> None:
    scope = _scope_var.get()
    if scope is None:
        return
    if scope.token.cancelled:
        raise OperationCancelled("Operation was cancelled.")
    if scope.deadline is not None and scope.deadline.expired():
        raise OperationCancelled("Operation deadline expired.")
