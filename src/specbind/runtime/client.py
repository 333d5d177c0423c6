# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Base class of every generated interface client."""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from specbind.props.descriptors import FieldDescriptor, resolve
from specbind.props.marshal import TypeMismatch, convert, update_from_map
from specbind.props.record import PropertiesRecord
from specbind.props.variant import ObjectPath, Variant, make_variant
from specbind.runtime.subscription import Subscription
from specbind.runtime.transport import (
    INTERFACES_ADDED,
    INTERFACES_REMOVED,
    OBJECT_MANAGER_INTERFACE,
    PROPERTIES_CHANGED,
    PROPERTIES_INTERFACE,
    SignalMessage,
    Transport,
    TransportError,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class PropertyNotWritable(Exception):
    """Raised when setting a property that is not declared writable."""


class ObjectEventKind(enum.Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class PropertyChanged:
    """One property update reported by the remote object.

    ``value`` is None for a property that was invalidated without a new value.
    """

    interface: str
    name: str
    value: Any


@dataclass(frozen=True)
class ObjectEvent:
    """An object below the watched path gained or lost interfaces."""

    kind: ObjectEventKind
    path: ObjectPath
    interfaces: tuple[str, ...]


class InterfaceClient:
    """Typed access to one interface of one remote object.

    Subclasses set :attr:`interface`, :attr:`service` and
    :attr:`properties_type`.  The client keeps a local copy of the remote
    properties in :attr:`properties`, refreshed by :meth:`get_properties`
    and by the events of :meth:`watch_properties`.

    Args:
        transport: Connection to the service.
        object_path: Path of the remote object.
        load_properties: Fetch all properties once on construction.
    """

    interface: ClassVar[str] = ""
    service: ClassVar[str] = ""
    properties_type: ClassVar[type[PropertiesRecord]] = PropertiesRecord

    def __init__(self, transport: Transport, object_path: str, *, load_properties: bool = True) -> None:
        self._transport = transport
        self._path = ObjectPath(object_path)
        self._subscriptions: list[Subscription[Any]] = []
        self._subscriptions_lock = threading.Lock()
        self.properties = self.properties_type()
        if load_properties and any(not d.skip for d in resolve(self.properties_type).values()):
            self.get_properties()

    @property
    def path(self) -> ObjectPath:
        return self._path

    @property
    def transport(self) -> Transport:
        return self._transport

    def call(self, method: str, *args: Any) -> tuple[Any, ...]:
        """Invoke *method* of this interface and return its ordered results."""
        logger.debug("Calling %s.%s on %s", self.interface, method, self._path)
        return tuple(self._transport.call(self._path, self.interface, method, *args))

    def get_property(self, name: str) -> Any:
        """Read one property from the remote object (not from the local copy).

        Raises:
            TransportError: If the call fails or the peer sends an empty reply.
            TypeMismatch: If the peer reports a value of the wrong kind.
        """
        reply = self._transport.call(self._path, PROPERTIES_INTERFACE, "Get", self.interface, name)
        if not reply:
            raise TransportError(f"empty reply to Get {self.interface}.{name} on {self._path}")
        value = reply[0]
        descriptor = self._descriptor(name)
        if descriptor is None or descriptor.error is not None:
            return value.value if isinstance(value, Variant) else value
        return convert(value, descriptor)

    def set_property(self, name: str, value: Any) -> None:
        """Write one property on the remote object and in the local copy.

        Raises:
            PropertyNotWritable: If the property is not declared writable.
        """
        descriptor = self._descriptor(name)
        if descriptor is None or not descriptor.writable:
            raise PropertyNotWritable(f"{self.interface}.{name} is not writable")
        variant = make_variant(value, descriptor.kind)
        self._transport.call(self._path, PROPERTIES_INTERFACE, "Set", self.interface, name, variant)
        with self.properties.write_locked():
            setattr(self.properties, name, variant.value)

    def get_properties(self) -> PropertiesRecord:
        """Fetch every property of the interface into :attr:`properties`.

        Raises:
            TypeMismatch: If the peer reports a value of the wrong kind.
        """
        reply = self._transport.call(self._path, PROPERTIES_INTERFACE, "GetAll", self.interface)
        mapping = reply[0] if reply else {}
        with self.properties.write_locked():
            update_from_map(self.properties, mapping)
        return self.properties

    def _watch_properties(self) -> Subscription[PropertyChanged]:
        """Subscribe to property changes of this interface.

        The local copy in :attr:`properties` is updated as events are consumed.
        Generated clients expose this as ``watch_properties()``.
        """
        source = self._transport.register(self._path, PROPERTIES_INTERFACE)
        return self._track(source.map(self._property_events))

    def _watch_objects(self) -> Subscription[ObjectEvent]:
        """Subscribe to objects appearing and disappearing below this object's path.

        Generated clients expose this as ``watch_objects()`` when the object
        roots a hierarchy.
        """
        source = self._transport.register("/", OBJECT_MANAGER_INTERFACE)
        return self._track(source.map(self._object_events))

    def close(self) -> None:
        """Cancel every subscription opened by this client, then disconnect the transport."""
        with self._subscriptions_lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.unsubscribe()
        self._transport.disconnect()

    def __enter__(self) -> InterfaceClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r})"

    # ################
    # Implementation
    # ################

    def _descriptor(self, name: str) -> FieldDescriptor | None:
        descriptor = resolve(self.properties_type).get(name)
        if descriptor is None or descriptor.skip:
            return None
        return descriptor

    def _track(self, subscription: Subscription[Any]) -> Subscription[Any]:
        with self._subscriptions_lock:
            self._subscriptions.append(subscription)
        return subscription

    def _property_events(self, message: SignalMessage) -> list[PropertyChanged]:
        if message.member != PROPERTIES_CHANGED or len(message.body) < 2:
            return []
        interface, changed = message.body[0], _unwrap(message.body[1])
        if interface != self.interface or not isinstance(changed, Mapping):
            return []
        invalidated = message.body[2] if len(message.body) > 2 else ()

        with self.properties.write_locked():
            try:
                update_from_map(self.properties, changed)
            except TypeMismatch as exc:
                logger.warning("Ignoring property update of %s on %s: %s", self.interface, self._path, exc)

        events = [PropertyChanged(interface, name, _unwrap(value)) for name, value in changed.items()]
        events.extend(PropertyChanged(interface, str(name), None) for name in invalidated)
        return events

    def _object_events(self, message: SignalMessage) -> list[ObjectEvent]:
        if message.member == INTERFACES_ADDED:
            kind = ObjectEventKind.ADDED
        elif message.member == INTERFACES_REMOVED:
            kind = ObjectEventKind.REMOVED
        else:
            return []
        if len(message.body) < 2:
            return []
        path = str(_unwrap(message.body[0]))
        prefix = self._path.rstrip("/") + "/"
        if not path.startswith(prefix):
            return []
        return [ObjectEvent(kind, ObjectPath(path), _interface_names(message.body[1]))]


# Attribute names that generated members must not shadow.
RESERVED_NAMES = frozenset(name for name in dir(InterfaceClient) if not name.startswith("_")) | {
    "properties",
    "watch_properties",
    "watch_objects",
}


def _unwrap(value: Any) -> Any:
    return value.value if isinstance(value, Variant) else value


def _interface_names(value: Any) -> tuple[str, ...]:
    value = _unwrap(value)
    if isinstance(value, Mapping):
        return tuple(sorted(value))
    if isinstance(value, Iterable) and not isinstance(value, str):
        return tuple(sorted(str(_unwrap(v)) for v in value))
    return ()
