# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: an in-memory transport and the sample documentation corpus."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from specbind.props.variant import Variant
from specbind.runtime.subscription import Subscription
from specbind.runtime.transport import PROPERTIES_INTERFACE, SignalMessage, TransportError

DOCS_DIR = Path(__file__).parent / "data" / "docs"


class FakeTransport:
    """Transport double that keeps remote properties in dictionaries.

    ``objects[(path, interface)]`` holds the remote property values; method
    replies are configured per method name in ``replies``.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.replies: dict[str, Sequence[Any]] = {}
        self.calls: list[tuple[str, str, str, tuple[Any, ...]]] = []
        self.registrations: list[tuple[tuple[str, str], Subscription[SignalMessage]]] = []
        self.disconnected = False

    def call(self, path: str, interface: str, method: str, *args: Any) -> Sequence[Any]:
        self.calls.append((str(path), interface, method, args))
        if interface == PROPERTIES_INTERFACE:
            props = self.objects.setdefault((str(path), args[0]), {})
            if method == "GetAll":
                return (dict(props),)
            if method == "Get":
                if args[1] not in props:
                    raise TransportError(f"No such property {args[1]}", "org.freedesktop.DBus.Error.InvalidArgs")
                return (props[args[1]],)
            if method == "Set":
                value = args[2]
                props[args[1]] = value.value if isinstance(value, Variant) else value
                return ()
        return self.replies.get(method, ())

    def register(self, path: str, interface: str) -> Subscription[SignalMessage]:
        key = (str(path), interface)
        subscription: Subscription[SignalMessage] = Subscription(
            on_cancel=lambda: self.registrations.remove((key, subscription))
        )
        self.registrations.append((key, subscription))
        return subscription

    def disconnect(self) -> None:
        self.disconnected = True

    def emit(self, path: str, interface: str, member: str, *body: Any) -> None:
        """Deliver a signal to every registration matching *path* and *interface*."""
        for key, subscription in list(self.registrations):
            if key == (path, interface):
                subscription.publish(SignalMessage(path, interface, member, body))

    def methods_called(self, interface: str) -> list[str]:
        return [method for _, iface, method, _ in self.calls if iface == interface]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def docs_dir() -> Path:
    return DOCS_DIR
