"""Double-buffered mutation queue.

Mutations are appended to the *active* buffer. Whoever finds the queue idle
becomes the drainer: it flips the active index so new work lands in the other
buffer, executes the captured buffer in FIFO order outside the lock, and keeps
swapping until both buffers are empty. The lock is only held for appends,
swaps and flag updates, so slow mutations never block other threads from
enqueueing.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

from .errors import MutationError

logger = logging.getLogger(__name__)

ON_ERROR_POLICIES = ("raise", "log")


def _call(mutation: Callable[[], Any]) -> None:
    mutation()


class _Barrier:
    """Marker mutation used by flush() to detect that earlier work has run."""

    __slots__ = ("done",)

    def __init__(self) -> None:
        self.done = False

    def __repr__(self) -> str:
        return "<flush barrier>"


class MutationQueue:
    """Thread-safe FIFO of deferred mutations with a double-buffered drain.

    Args:
        apply: Callable executing one mutation. Defaults to calling the mutation
            with no arguments, so plain closures can be queued.
        on_error: ``"raise"`` stops the drain pass and raises MutationError in the
            draining thread; ``"log"`` logs the failure and keeps draining.
    """

    def __init__(
        self,
        apply: Optional[Callable[[Any], None]] = None,
        *,
        on_error: str = "raise",
    ) -> None:
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {on_error!r}")
        self._apply = apply or _call
        self._on_error = on_error
        self._buffers: Tuple[Deque[Any], Deque[Any]] = (deque(), deque())
        self._active = 0
        self._busy = False
        self._drainer: Optional[int] = None
        self._cond = threading.Condition(threading.Lock())

    @property
    def busy(self) -> bool:
        with self._cond:
            return self._busy

    @property
    def pending(self) -> int:
        """Number of queued entries not yet executed, flush markers included."""
        with self._cond:
            return len(self._buffers[0]) + len(self._buffers[1])

    @property
    def on_error(self) -> str:
        return self._on_error

    def enqueue(self, mutation: Any) -> None:
        """Queue a mutation; drain in the calling thread if the queue is idle.

        Returns immediately when another thread is draining: the mutation is
        picked up by that drain pass.
        """
        with self._cond:
            self._buffers[self._active].append(mutation)
            if self._busy:
                return
            self._claim()
        self._drain()

    def flush(self) -> None:
        """Block until every mutation enqueued before this call has executed.

        If the queue is idle the caller drains it. If another thread is draining,
        the caller waits, and takes over if that drainer stops early. Mutations
        enqueued after the call are not waited for.
        """
        barrier = _Barrier()
        with self._cond:
            if self._busy and self._drainer == threading.get_ident():
                raise RuntimeError("flush() cannot be called from inside a mutation")
            self._buffers[self._active].append(barrier)
            while not barrier.done:
                if not self._busy:
                    self._claim()
                    break
                self._cond.wait()
            if barrier.done:
                return
        self._drain()

    # Internal helpers

    def _claim(self) -> None:
        """Mark the calling thread as the drainer. Caller must hold the lock."""
        self._busy = True
        self._drainer = threading.get_ident()

    def _release(self) -> None:
        """Return to idle and wake flush() waiters. Caller must hold the lock."""
        self._busy = False
        self._drainer = None
        self._cond.notify_all()

    def _drain(self) -> None:
        while True:
            with self._cond:
                index = self._active
                captured = self._buffers[index]
                if not captured:
                    self._release()
                    return
                self._active = index ^ 1
            try:
                self._run(captured)
            except BaseException:
                with self._cond:
                    # Untouched remainder goes back ahead of anything enqueued meanwhile
                    other = self._buffers[index ^ 1]
                    captured.extend(other)
                    other.clear()
                    self._active = index
                    self._release()
                raise

    def _run(self, captured: Deque[Any]) -> None:
        while captured:
            mutation = captured.popleft()
            if isinstance(mutation, _Barrier):
                with self._cond:
                    mutation.done = True
                    self._cond.notify_all()
                continue
            try:
                self._apply(mutation)
            except Exception as exc:
                if self._on_error == "log":
                    logger.exception("Mutation %r failed; skipping", mutation)
                    continue
                logger.error("Mutation %r failed; stopping drain: %s", mutation, exc)
                raise MutationError(mutation, exc) from exc
