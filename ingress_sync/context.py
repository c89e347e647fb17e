"""Tracing of nested operations such as admission reviews and syncs.

Spans are tracked per task with a context variable, so concurrent reviews
each log their own nesting.
"""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


trace: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "trace", default=()
)


@contextmanager
def trace_context(
    name: str, slow_threshold: float | None = None
) -> Generator[None, None, None]:
    """Log entry and exit of a span nested under the enclosing spans.

    A span lasting longer than `slow_threshold` seconds is logged as a warning.
    """
    stack = trace.get() + (name,)
    token = trace.set(stack)
    label = " > ".join(stack)
    start = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        elapsed = perf_counter() - start
        trace.reset(token)
        if slow_threshold is not None and elapsed > slow_threshold:
            _LOGGER.warning("[Trace] < %s was slow (%0.2fs)", label, elapsed)
        else:
            _LOGGER.debug("[Trace] < %s (%0.2fs)", label, elapsed)
