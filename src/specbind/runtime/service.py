# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""The properties interface of locally exported objects.

A :class:`PropertiesService` answers ``Get``, ``GetAll`` and ``Set`` for the
records exported at one object path and announces every change with a
``PropertiesChanged`` signal.  It is the server-side counterpart of
:class:`~specbind.runtime.client.InterfaceClient`: a transport routes
incoming calls to :meth:`PropertiesService.handle` and forwards the
messages of :meth:`PropertiesService.watch` to the bus.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Any

from specbind.props.descriptors import FieldDescriptor, register, resolve
from specbind.props.marshal import TypeMismatch, to_variants, update_from_map
from specbind.props.record import PropertiesRecord
from specbind.props.variant import ObjectPath, Variant
from specbind.runtime.subscription import Subscription
from specbind.runtime.transport import PROPERTIES_CHANGED, PROPERTIES_INTERFACE, SignalMessage, TransportError

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

UNKNOWN_INTERFACE = "org.freedesktop.DBus.Error.UnknownInterface"
UNKNOWN_PROPERTY = "org.freedesktop.DBus.Error.UnknownProperty"
UNKNOWN_METHOD = "org.freedesktop.DBus.Error.UnknownMethod"
PROPERTY_READ_ONLY = "org.freedesktop.DBus.Error.PropertyReadOnly"
INVALID_ARGS = "org.freedesktop.DBus.Error.InvalidArgs"


class PropertiesService:
    """Serves the properties of the records exported at one object path.

    Each exported interface is backed by one :class:`PropertiesRecord`.  Reads
    hold the record's shared lock, writes its exclusive lock.  Only fields
    declared ``writable`` may be set by a peer.  Code that changes a record
    directly calls :meth:`notify` to announce the change.

    Errors are raised as :class:`TransportError` carrying the standard
    D-Bus error name, ready to be sent back to the caller.

    Args:
        path: Object path the records are exported at.
    """

    def __init__(self, path: str) -> None:
        self._path = ObjectPath(path)
        self._records: dict[str, PropertiesRecord] = {}
        self._watchers: list[Subscription[SignalMessage]] = []
        self._lock = threading.Lock()

    @property
    def path(self) -> ObjectPath:
        return self._path

    def interfaces(self) -> list[str]:
        """Return the exported interface names, sorted."""
        with self._lock:
            return sorted(self._records)

    def add_properties(self, interface: str, record: PropertiesRecord) -> None:
        """Export *record* as the properties of *interface*.

        The record type is resolved eagerly so that unmarshallable fields are
        reported now rather than on the first call.

        Raises:
            ValueError: If *interface* is already exported.
        """
        register(type(record))
        with self._lock:
            if interface in self._records:
                raise ValueError(f"Properties of {interface} are already exported at {self._path}")
            self._records[interface] = record
        logger.debug("Exported properties of %s at %s", interface, self._path)

    def remove_properties(self, interface: str) -> None:
        """Stop exporting *interface*.  Unknown names are ignored."""
        with self._lock:
            self._records.pop(interface, None)

    def get(self, interface: str, name: str) -> Variant:
        """Return the current value of one property."""
        variants = self.get_all(interface)
        if name not in variants:
            raise TransportError(f"No property {name} in {interface}", UNKNOWN_PROPERTY)
        return variants[name]

    def get_all(self, interface: str) -> dict[str, Variant]:
        """Return every property of *interface* that is currently emitted."""
        record = self._record(interface)
        with record.read_locked():
            return to_variants(record)

    def set(self, interface: str, name: str, value: Any) -> None:
        """Assign one writable property on behalf of a peer and announce the change."""
        record = self._record(interface)
        descriptor = self._descriptor(record, interface, name)
        if not descriptor.writable:
            raise TransportError(f"Property {interface}.{name} is read-only", PROPERTY_READ_ONLY)
        with record.write_locked():
            try:
                update_from_map(record, {name: value})
            except TypeMismatch as exc:
                raise TransportError(str(exc), INVALID_ARGS) from exc
        self.notify(interface, name)

    def notify(self, interface: str, *names: str) -> None:
        """Emit ``PropertiesChanged`` for *names* of *interface*.

        Names whose field is currently left out of the property map (for
        example an ``omit_empty`` field that became empty) are reported as
        invalidated.
        """
        variants = self.get_all(interface)
        changed = {name: variants[name] for name in names if name in variants}
        invalidated = [name for name in names if name not in variants]
        body = (interface, changed, invalidated)
        message = SignalMessage(self._path, PROPERTIES_INTERFACE, PROPERTIES_CHANGED, body)
        with self._lock:
            watchers = list(self._watchers)
        for watcher in watchers:
            watcher.publish(message)

    def watch(self) -> Subscription[SignalMessage]:
        """Subscribe to the ``PropertiesChanged`` signals of this object."""
        subscription: Subscription[SignalMessage] = Subscription(on_cancel=lambda: self._forget(subscription))
        with self._lock:
            self._watchers.append(subscription)
        return subscription

    def handle(self, method: str, *args: Any) -> Sequence[Any]:
        """Answer one call of the properties interface and return its results."""
        if method == "Get" and len(args) == 2:
            return (self.get(*args),)
        if method == "GetAll" and len(args) == 1:
            return (self.get_all(*args),)
        if method == "Set" and len(args) == 3:
            self.set(*args)
            return ()
        raise TransportError(f"No method {method} taking {len(args)} argument(s)", UNKNOWN_METHOD)

    def close(self) -> None:
        """Cancel every open watch."""
        with self._lock:
            watchers, self._watchers = self._watchers, []
        for watcher in watchers:
            watcher.unsubscribe()

    # ################
    # Implementation
    # ################

    def _record(self, interface: str) -> PropertiesRecord:
        with self._lock:
            record = self._records.get(interface)
        if record is None:
            raise TransportError(f"No interface {interface} at {self._path}", UNKNOWN_INTERFACE)
        return record

    def _descriptor(self, record: PropertiesRecord, interface: str, name: str) -> FieldDescriptor:
        descriptor = resolve(type(record)).get(name)
        if descriptor is None or descriptor.skip or descriptor.error is not None:
            raise TransportError(f"No property {name} in {interface}", UNKNOWN_PROPERTY)
        return descriptor

    def _forget(self, subscription: Subscription[SignalMessage]) -> None:
        with self._lock:
            if subscription in self._watchers:
                self._watchers.remove(subscription)
