"""Check telemetry — timing spans that tally DID validation outcomes.

Disabled by default (one ContextVar read per call).  With ``--verbose`` a
``@traced`` service method opens a root span, ``trace_span`` nests phases
under it, and every validated candidate is tallied with
:func:`record_outcome`.  The finished tree lands in
``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections import Counter
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from atdid.services.result import ServiceResult

ACCEPTED = "accepted"

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_active: ContextVar[CheckSpan | None] = ContextVar("_active", default=None)


@dataclass
class CheckSpan:
    """One timed phase of a check, with per-outcome candidate counts.

    ``outcomes`` maps ``"accepted"`` or a rejection code (``TOO_SHORT``,
    ``INVALID_METHOD``, ``METHOD_NOT_ALLOWED`` ...) to a count.  Counts
    recorded on a child are also added to every ancestor.
    """

    name: str
    parent: CheckSpan | None = None
    children: list[CheckSpan] = field(default_factory=list)
    outcomes: Counter[str] = field(default_factory=Counter)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    @property
    def candidates(self) -> int:
        return sum(self.outcomes.values())

    @property
    def rejected(self) -> int:
        return self.candidates - self.outcomes[ACCEPTED]

    def record(self, code: str | None) -> None:
        key = code or ACCEPTED
        span: CheckSpan | None = self
        while span is not None:
            span.outcomes[key] += 1
            span = span.parent

    def close(self) -> None:
        self.finished = time.perf_counter()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 3),
            "candidates": self.candidates,
            "rejected": self.rejected,
        }
        if self.outcomes:
            data["outcomes"] = dict(sorted(self.outcomes.items()))
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


@contextmanager
def _open(name: str, parent: CheckSpan | None) -> Iterator[CheckSpan]:
    span = CheckSpan(name=name, parent=parent)
    if parent is not None:
        parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    finally:
        span.close()
        _active.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[CheckSpan | None]:
    """Nest a phase under the active span; yields None when there is none."""
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    with _open(name, parent) as span:
        yield span


def record_outcome(code: str | None) -> None:
    """Tally one candidate on the active span (None means accepted)."""
    if not _enabled.get():
        return
    span = _active.get()
    if span is not None:
        span.record(code)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run a service method under a root span and attach the tree to its result."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        log = structlog.get_logger("atdid.telemetry")
        with _open(func.__qualname__, None) as span:
            try:
                result = func(*args, **kwargs)
            except Exception:
                log.debug("check.failed", span_name=span.name)
                raise

        log.debug(
            "check.complete",
            span_name=span.name,
            duration_ms=round(span.duration_ms, 3),
            candidates=span.candidates,
            rejected=span.rejected,
        )
        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Switch telemetry on (called by AppContext for ``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def active_span() -> CheckSpan | None:
    if not _enabled.get():
        return None
    return _active.get()
