# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runtime support for generated interface clients."""

from specbind.runtime.client import (
    RESERVED_NAMES,
    InterfaceClient,
    ObjectEvent,
    ObjectEventKind,
    PropertyChanged,
    PropertyNotWritable,
)
from specbind.runtime.service import PropertiesService
from specbind.runtime.subscription import Subscription, SubscriptionClosed
from specbind.runtime.transport import (
    OBJECT_MANAGER_INTERFACE,
    PROPERTIES_INTERFACE,
    SignalMessage,
    Transport,
    TransportError,
)

__all__ = [
    "InterfaceClient",
    "PropertyChanged",
    "PropertyNotWritable",
    "ObjectEvent",
    "ObjectEventKind",
    "RESERVED_NAMES",
    "PropertiesService",
    "Subscription",
    "SubscriptionClosed",
    "Transport",
    "TransportError",
    "SignalMessage",
    "PROPERTIES_INTERFACE",
    "OBJECT_MANAGER_INTERFACE",
]
