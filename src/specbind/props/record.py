# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Base class for property records and the reader/writer lock guarding them."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from specbind.props.descriptors import prop

# ###############
# Public Interface
# ###############


class RWLock:
    """A reader/writer lock: many concurrent readers or one writer.

    Not reentrant.  Readers do not block each other; a writer waits until no
    reader or writer holds the lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a matching acquire_read()")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a matching acquire_write()")
            self._writer = False
            self._cond.notify_all()


@dataclass
class PropertiesRecord:
    """Base for records exchanged with a property map.

    Hold :meth:`read_locked` while reading fields (and around
    :func:`~specbind.props.marshal.to_map`) and :meth:`write_locked` while
    assigning fields or updating the record from a map in place.
    """

    _lock: RWLock = prop(skip=True, default_factory=RWLock, init=False, repr=False, compare=False)

    def lock(self) -> None:
        """Acquire exclusive (write) access."""
        self._lock.acquire_write()

    def unlock(self) -> None:
        self._lock.release_write()

    def rlock(self) -> None:
        """Acquire shared (read) access."""
        self._lock.acquire_read()

    def runlock(self) -> None:
        self._lock.release_read()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self._lock.acquire_read()
        try:
            yield
        finally:
            self._lock.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self._lock.acquire_write()
        try:
            yield
        finally:
            self._lock.release_write()
