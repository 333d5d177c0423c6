# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""The message-bus transport contract that generated clients are written against.

No implementation ships with this package.  A transport adapts a concrete
bus connection (for example a D-Bus system bus) to :class:`Transport`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from specbind.runtime.subscription import Subscription

# ###############
# Public Interface
# ###############

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
OBJECT_MANAGER_INTERFACE = "org.freedesktop.DBus.ObjectManager"

PROPERTIES_CHANGED = "PropertiesChanged"
INTERFACES_ADDED = "InterfacesAdded"
INTERFACES_REMOVED = "InterfacesRemoved"


class TransportError(Exception):
    """Raised by transports when a call fails or the peer replies with an error.

    Attributes:
        name: Remote error identifier, if the peer supplied one.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


@dataclass(frozen=True)
class SignalMessage:
    """A signal received from the bus.

    Attributes:
        path: Object path of the emitter.
        interface: Interface the signal belongs to.
        member: Signal name.
        body: Positional signal arguments.
    """

    path: str
    interface: str
    member: str
    body: tuple[Any, ...] = field(default_factory=tuple)


@runtime_checkable
class Transport(Protocol):
    """Connection to a remote service, as seen by :class:`~specbind.runtime.client.InterfaceClient`."""

    def call(self, path: str, interface: str, method: str, *args: Any) -> Sequence[Any]:
        """Invoke *method* on the object at *path* and return its ordered results.

        Raises:
            TransportError: If the call fails.
        """
        ...

    def register(self, path: str, interface: str) -> Subscription[SignalMessage]:
        """Subscribe to signals of *interface* emitted by the object at *path*.

        Unsubscribing the returned subscription removes the registration.
        """
        ...

    def disconnect(self) -> None:
        """Release the connection.  Further calls may fail."""
        ...
