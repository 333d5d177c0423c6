# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Cancellable event streams delivered by a transport or a client."""

from __future__ import annotations

import collections
import queue
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

# ###############
# Public Interface
# ###############

T = TypeVar("T")
U = TypeVar("U")


class SubscriptionClosed(Exception):
    """Raised when reading from a subscription that has been unsubscribed."""


class Subscription(Generic[T]):
    """A thread-safe stream of events with an explicit cancel handle.

    Producers call :meth:`publish`; consumers call :meth:`get` or iterate.
    :meth:`unsubscribe` may be called any number of times from any thread.
    Once it returns no further event is delivered: pending events are
    discarded and blocked readers are woken with :class:`SubscriptionClosed`.

    Args:
        on_cancel: Called once, on the first :meth:`unsubscribe`.
    """

    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._on_cancel = on_cancel

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: T) -> bool:
        """Queue *event* for delivery.

        Returns:
            False if the subscription is already closed and the event was dropped.
        """
        with self._lock:
            if self._closed:
                return False
            self._queue.put_nowait(event)
            return True

    def get(self, timeout: float | None = None) -> T:
        """Return the next event, blocking up to *timeout* seconds.

        Raises:
            SubscriptionClosed: If the subscription is or becomes closed.
            TimeoutError: If no event arrives in time.
        """
        if self._closed:
            raise SubscriptionClosed("subscription is closed")
        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no event within {timeout} seconds") from None
        if event is _CLOSED or self._closed:
            # Wake the next blocked reader too.
            self._queue.put_nowait(_CLOSED)
            raise SubscriptionClosed("subscription is closed")
        return event

    def unsubscribe(self) -> None:
        """Stop delivery and release the underlying registration. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            _drain(self._queue)
            self._queue.put_nowait(_CLOSED)
            on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()

    def map(self, fn: Callable[[T], Iterable[U]]) -> Subscription[U]:
        """Derive a subscription whose events are ``fn(event)`` for each source event.

        *fn* returns zero or more derived events per source event.  It runs
        lazily, in the consuming thread.  Unsubscribing the derived
        subscription unsubscribes this one.
        """
        return _DerivedSubscription(self, fn)

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {state}>"


# ################
# Implementation
# ################

_CLOSED = object()


def _drain(q: queue.Queue[Any]) -> None:
    while True:
        try:
            q.get_nowait()
        except queue.Empty:
            return


class _DerivedSubscription(Subscription[U]):
    """A subscription fed by transforming another one on demand."""

    def __init__(self, source: Subscription[Any], fn: Callable[[Any], Iterable[U]]) -> None:
        super().__init__(on_cancel=source.unsubscribe)
        self._source = source
        self._fn = fn
        self._pending: collections.deque[U] = collections.deque()
        self._consume_lock = threading.Lock()

    def publish(self, event: U) -> bool:
        raise TypeError("derived subscriptions are fed by their source")

    def get(self, timeout: float | None = None) -> U:
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._consume_lock:
            while True:
                if self._closed:
                    raise SubscriptionClosed("subscription is closed")
                if self._pending:
                    return self._pending.popleft()
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                try:
                    event = self._source.get(timeout=remaining)
                except SubscriptionClosed:
                    self.unsubscribe()
                    raise
                self._pending.extend(self._fn(event))

    def unsubscribe(self) -> None:
        super().unsubscribe()
        self._pending.clear()
