"""
GRAPHWIRE - Async Utilities

Sequencing primitives used by the service locator's bulk initialization:
- Strictly ordered execution of lazily started async steps
- Failure settling (a failed step counts as a successful ``True`` outcome)
- Watchdog timers that emit a diagnostic without cancelling work

All utilities integrate with OpenTelemetry for observability.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    List,
    Optional,
    Sequence,
)

from opentelemetry import trace

tracer = trace.get_tracer(__name__)

AsyncStep = Callable[[], Awaitable[Any]]


@dataclass
class SequenceConfig:
    """Configuration for ordered step execution."""

    settle_failures: bool = True
    settled_value: Any = True


async def all_in_order(
    steps: Sequence[AsyncStep],
    config: Optional[SequenceConfig] = None,
    on_failure: Optional[Callable[[int, Exception], None]] = None,
) -> List[Any]:
    """
    Run async steps one after another.

    A step is a zero-argument callable returning an awaitable, so nothing
    starts before the previous step has settled. With ``settle_failures``
    enabled a raising step contributes ``settled_value`` to the results and
    the sequence continues; otherwise the first exception propagates.

    Usage:
        results = await all_in_order([
            lambda: db.connect(),
            lambda: cache.warm_up(),
        ])
    """
    config = config or SequenceConfig()
    results: List[Any] = []

    with tracer.start_as_current_span("sequence.all_in_order") as span:
        span.set_attribute("sequence.step_count", len(steps))

        for index, step in enumerate(steps):
            try:
                results.append(await step())
            except Exception as e:
                if not config.settle_failures:
                    raise
                if on_failure:
                    on_failure(index, e)
                results.append(config.settled_value)

        return results


@asynccontextmanager
async def warn_after(
    seconds: Optional[float],
    callback: Callable[[], None],
) -> AsyncIterator[None]:
    """
    Call ``callback`` once if the block is still running after ``seconds``.

    The block itself is never cancelled. A falsy ``seconds`` disables the
    watchdog.

    Usage:
        async with warn_after(3.0, lambda: logger.warning("Still waiting")):
            await slow_operation()
    """
    if not seconds or seconds <= 0:
        yield
        return

    handle = asyncio.get_running_loop().call_later(seconds, callback)
    try:
        yield
    finally:
        handle.cancel()
