# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""High-level tests demonstrating how to construct the specbind interface model."""

import pytest
from pydantic import ValidationError

from specbind.model import (
    Api,
    Argument,
    Flag,
    Interface,
    Method,
    Property,
    Signal,
    array_element_type,
    is_array_type,
    is_known_type,
)


def test_property_flags() -> None:
    """A property's access flags decide whether it can be written."""
    prop = Property(type="boolean", name="Powered", flags=[Flag.READ_WRITE, Flag.EXPERIMENTAL])
    assert prop.writable
    assert prop.experimental
    assert not Property(type="string", name="Address", flags=[Flag.READ_ONLY]).writable


def test_property_without_flags_is_read_only() -> None:
    prop = Property(type="string", name="Name")
    assert not prop.writable
    assert prop.docs == ""


@pytest.mark.parametrize("name", ["", "Two Words", "Handle(optional)", "Name\t"])
def test_property_name_must_be_one_word(name: str) -> None:
    """Whitespace and the optional marker never end up in a property name."""
    with pytest.raises(ValidationError):
        Property(type="string", name=name)


def test_property_cannot_be_both_readonly_and_readwrite() -> None:
    with pytest.raises(ValidationError, match="both readonly and readwrite"):
        Property(type="string", name="Name", flags=[Flag.READ_ONLY, Flag.READ_WRITE])


def test_method_keeps_wire_order() -> None:
    """Arguments and returns keep the order they were declared in."""
    method = Method(
        name="Acquire",
        arguments=[Argument(type="string", name="uuid"), Argument(type="dict", name="options")],
        returns=["fd", "uint16", "uint16"],
        errors=["org.bluez.Error.Failed"],
    )
    assert [a.name for a in method.arguments] == ["uuid", "options"]
    assert method.returns == ["fd", "uint16", "uint16"]


def test_signal_has_no_returns() -> None:
    signal = Signal(name="Changed", arguments=[Argument(type="string", name="name")])
    assert signal.kind == "signal"
    assert "returns" not in signal.model_dump()


def test_interface_short_name() -> None:
    assert Interface(name="org.bluez.Adapter1").short_name == "Adapter1"
    assert Interface(name="Standalone").short_name == "Standalone"


def test_api_lookup() -> None:
    """An Api resolves interfaces by their full name."""
    adapter = Interface(name="org.bluez.Adapter1")
    device = Interface(name="org.bluez.Device1")
    api = Api(interfaces=[adapter, device])
    assert api.get("org.bluez.Device1") is device
    assert api.get("org.bluez.Missing1") is None
    assert api.names() == ["org.bluez.Adapter1", "org.bluez.Device1"]


def test_entries_deserialize_by_kind() -> None:
    """The ``kind`` field keeps entries unambiguous after a JSON round trip."""
    iface = Interface(
        name="org.example.Foo1",
        properties={"Name": Property(type="string", name="Name")},
        methods=[Method(name="Start")],
        signals=[Signal(name="Stopped")],
    )
    restored = Interface.model_validate_json(iface.model_dump_json())
    assert restored == iface
    assert isinstance(restored.properties["Name"], Property)


def test_type_vocabulary() -> None:
    assert is_known_type("uint16")
    assert is_known_type("array{dict}")
    assert not is_known_type("float")
    assert is_array_type("array{byte}")
    assert not is_array_type("array{byte")
    assert array_element_type("array{ string }") == "string"
