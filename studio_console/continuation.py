"""Deferred command completion delivered through the console tick."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from studio_console.exceptions import ConsoleBusyError
from studio_console.logging import get_logger

log = get_logger(__name__)


class ConsoleState(str, Enum):
    """Whether the console accepts a new command."""

    READY = "ready"
    BUSY = "busy"
    COMPLETING = "completing"


class Completion(BaseModel):
    """Outcome of a deferred operation, success or failure."""

    ok: bool = True
    value: Any = None
    error: str | None = None

    @model_validator(mode="after")
    def _normalize_failure_error(self) -> "Completion":
        """Ensure failed completions always provide an error message."""
        if not self.ok and not (self.error or "").strip():
            self.error = "Operation failed"
        return self

    @classmethod
    def success(cls, value: Any = None) -> "Completion":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str | None = None) -> "Completion":
        return cls(ok=False, error=error)


CompletionHandler = Callable[[Completion], None]
ProgressHandler = Callable[[Any], None]


@dataclass
class PendingAsync:
    """Continuation of a command waiting on an external collaborator.

    Collaborators receive `complete` (or the `resolve`/`fail` shortcuts,
    or `notify` for progress) as their callback. Calls only queue the
    result; the continuation runs on the next console tick.
    """

    kind: str
    on_complete: CompletionHandler
    on_progress: ProgressHandler | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    resolved: bool = False
    _scheduler: "ContinuationScheduler | None" = field(default=None, repr=False)

    def complete(self, completion: Completion) -> None:
        if self.resolved:
            log.warning("Duplicate completion ignored", kind=self.kind)
            return
        self.resolved = True
        if self._scheduler is not None:
            self._scheduler.post(self, completion)

    def resolve(self, value: Any = None) -> None:
        self.complete(Completion.success(value))

    def fail(self, error: str | None = None) -> None:
        self.complete(Completion.failure(error))

    def notify(self, event: Any) -> None:
        if self.resolved:
            return
        if self._scheduler is not None:
            self._scheduler.post(self, event)


class ContinuationScheduler:
    """Holds at most one pending continuation and the events queued for it."""

    def __init__(self) -> None:
        self._pending: PendingAsync | None = None
        self._events: deque[tuple[PendingAsync, Any]] = deque()
        self._notices: deque[Callable[[], None]] = deque()

    @property
    def pending(self) -> PendingAsync | None:
        return self._pending

    @property
    def idle(self) -> bool:
        return self._pending is None

    def begin(
        self,
        kind: str,
        on_complete: CompletionHandler,
        *,
        on_progress: ProgressHandler | None = None,
        **payload: Any,
    ) -> PendingAsync:
        """Register the single outstanding continuation."""
        if self._pending is not None:
            raise ConsoleBusyError(kind, self._pending.kind)
        pending = PendingAsync(
            kind=kind,
            on_complete=on_complete,
            on_progress=on_progress,
            payload=dict(payload),
            _scheduler=self,
        )
        self._pending = pending
        log.debug("Deferred command completion", kind=kind, payload=pending.payload)
        return pending

    def discard(self) -> None:
        """Drop the outstanding continuation after its command was aborted."""
        if self._pending is not None:
            log.warning("Discarding pending continuation", kind=self._pending.kind)
        self._pending = None
        self._events.clear()

    def post(self, pending: PendingAsync, item: Any) -> None:
        if pending is not self._pending:
            log.warning("Late callback for finished continuation", kind=pending.kind)
            return
        self._events.append((pending, item))

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Queue a background notice that runs on the next tick without blocking input."""
        self._notices.append(callback)

    def drain(self) -> list[tuple[PendingAsync, Any]]:
        """Take queued progress events and the completion, in arrival order.

        The pending slot is released when its completion is taken, so the
        continuation may register a follow-up deferral.
        """
        items: list[tuple[PendingAsync, Any]] = []
        while self._events:
            pending, item = self._events.popleft()
            items.append((pending, item))
            if isinstance(item, Completion):
                self._pending = None
                break
        return items

    def drain_notices(self) -> list[Callable[[], None]]:
        notices = list(self._notices)
        self._notices.clear()
        return notices
