# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for converting records to and from property maps."""

import logging
from dataclasses import dataclass
from typing import Any

import pytest

from specbind.props.descriptors import prop, resolve
from specbind.props.marshal import (
    DescriptorWarning,
    TypeMismatch,
    convert,
    from_map,
    to_map,
    to_variants,
    update_from_map,
)
from specbind.props.record import PropertiesRecord
from specbind.props.variant import Byte, Int16, ObjectPath, UInt16, Variant, VariantKind

# ###############
# Test Records
# ###############


@dataclass
class Example(PropertiesRecord):
    IgnoreFlag: bool = prop("ignore", default=False)
    ToOmit: dict[str, Any] = prop("omitEmpty,writable", default_factory=dict)
    Ignored: str = prop("ignore", default="")
    IgnoredByProperty: list[str] = prop(skip_if="Enabled", default_factory=list)
    Enabled: bool = False
    Avail: str = ""


@dataclass
class Minimal(PropertiesRecord):
    ToOmit: dict[str, Any] = prop("omitEmpty", default_factory=dict)
    Ignored: str = prop(skip=True, default="")
    Avail: str = ""


@dataclass
class Device(PropertiesRecord):
    Address: str = ""
    Paired: bool = False
    RSSI: Int16 = 0
    Count: int = 0
    Appearance: UInt16 = 0
    Adapter: ObjectPath = ObjectPath("")
    Data: bytes = b""
    UUIDs: list[str] = prop(default_factory=list)
    Chunks: list[Byte] = prop(default_factory=list)
    Extra: Any = None


@dataclass
class Partial(PropertiesRecord):
    Ratio: float = 0.0
    Name: str = "x"


@dataclass
class Required(PropertiesRecord):
    Count: int
    Name: str
    Path: ObjectPath
    Tags: list[str]
    Extra: Any
    Enabled: bool = True


# ###############
# Outbound
# ###############


class TestToMap:
    def test_skipped_and_empty_fields_are_left_out(self) -> None:
        assert to_map(Minimal(ToOmit={}, Ignored="secret", Avail="foo")) == {"Avail": "foo"}

    def test_skip_and_omit_empty(self) -> None:
        record = Example(ToOmit={}, Ignored="secret", Avail="foo")
        assert to_map(record) == {"IgnoredByProperty": [], "Enabled": False, "Avail": "foo"}

    def test_only_emitted_fields_remain(self) -> None:
        record = Example(ToOmit={}, Ignored="secret", Avail="foo", Enabled=True)
        assert to_map(record) == {"Enabled": True, "Avail": "foo"}

    def test_non_empty_omit_empty_field_is_emitted(self) -> None:
        record = Example(ToOmit={"a": 1}, Enabled=True)
        assert to_map(record)["ToOmit"] == {"a": 1}

    def test_conditional_skip_follows_sibling(self) -> None:
        record = Example(IgnoredByProperty=["a"])
        assert to_map(record)["IgnoredByProperty"] == ["a"]
        record.Enabled = True
        assert "IgnoredByProperty" not in to_map(record)

    def test_declaration_order(self) -> None:
        assert list(to_map(Device())) == [
            "Address",
            "Paired",
            "RSSI",
            "Count",
            "Appearance",
            "Adapter",
            "Data",
            "UUIDs",
            "Chunks",
        ]

    def test_none_values_are_left_out(self) -> None:
        assert "Extra" not in to_map(Device())
        assert to_map(Device(Extra=3))["Extra"] == 3

    def test_broken_fields_are_left_out_silently(self, recwarn: pytest.WarningsRecorder) -> None:
        assert to_map(Partial()) == {"Name": "x"}
        assert not [w for w in recwarn if issubclass(w.category, DescriptorWarning)]

    def test_strict_mode_warns_about_broken_fields(self) -> None:
        with pytest.warns(DescriptorWarning, match=r"Partial\.Ratio left out of property map"):
            assert to_map(Partial(), strict=True) == {"Name": "x"}

    def test_variants_carry_declared_kinds(self) -> None:
        variants = to_variants(Device(RSSI=-40, Appearance=3, Extra="x"))
        assert variants["RSSI"] == Variant(VariantKind.INT16, -40)
        assert variants["Appearance"] == Variant(VariantKind.UINT16, 3)
        assert variants["Adapter"].kind is VariantKind.OBJECT_PATH
        assert variants["Extra"] == Variant(VariantKind.STRING, "x")

    def test_variants_skip_values_without_kind(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="specbind.props.marshal"):
            variants = to_variants(Device(Extra=1.5))
        assert "Extra" not in variants
        assert "float value has no variant kind" in caplog.text


# ###############
# Inbound
# ###############


class TestFromMap:
    def test_round_trip(self) -> None:
        record = Device(
            Address="00:11:22:33:44:55",
            Paired=True,
            RSSI=-60,
            Count=2,
            Appearance=960,
            Adapter=ObjectPath("/org/bluez/hci0"),
            Data=b"\x01",
            UUIDs=["0000110a-0000-1000-8000-00805f9b34fb"],
            Chunks=[1, 2],
        )
        assert from_map(Device, to_map(record)) == record

    def test_round_trip_through_variants(self) -> None:
        record = Device(Address="a", RSSI=-1, Extra={"k": 1})
        assert from_map(Device, to_variants(record)) == record

    def test_missing_keys_keep_defaults(self) -> None:
        record = from_map(Device, {"Address": "a"})
        assert record.Address == "a"
        assert record.UUIDs == []

    def test_unknown_and_skipped_keys_are_ignored(self) -> None:
        record = from_map(Example, {"Nope": 1, "Ignored": "x", "Avail": "y"})
        assert record.Ignored == ""
        assert record.Avail == "y"

    def test_type_mismatch_names_the_field(self) -> None:
        with pytest.raises(TypeMismatch) as exc_info:
            from_map(Device, {"Count": "not-a-number"})
        assert exc_info.value.field == "Count"
        assert exc_info.value.actual == "string"
        assert exc_info.value.expected == "int32"
        assert str(exc_info.value) == "Field 'Count': cannot assign a string value to a int32 field"

    def test_out_of_range_integer(self) -> None:
        with pytest.raises(TypeMismatch, match="Appearance") as exc_info:
            from_map(Device, {"Appearance": 70000})
        assert exc_info.value.expected == "uint16"

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(TypeMismatch):
            from_map(Device, {"Count": True})

    def test_value_outside_vocabulary(self) -> None:
        with pytest.raises(TypeMismatch) as exc_info:
            from_map(Device, {"Extra": 1.5})
        assert exc_info.value.actual == "float"

    def test_conversions(self) -> None:
        record = from_map(
            Device,
            {
                "Adapter": "/org/bluez/hci1",
                "Data": [1, 2, 255],
                "Chunks": b"\x03\x04",
                "UUIDs": ("a", "b"),
                "RSSI": Variant(VariantKind.INT16, -20),
            },
        )
        assert isinstance(record.Adapter, ObjectPath)
        assert record.Data == b"\x01\x02\xff"
        assert record.Chunks == [3, 4]
        assert record.UUIDs == ["a", "b"]
        assert record.RSSI == -20

    def test_array_elements_are_checked(self) -> None:
        with pytest.raises(TypeMismatch, match="UUIDs"):
            from_map(Device, {"UUIDs": ["a", 1]})

    def test_broken_fields_are_ignored(self) -> None:
        assert from_map(Partial, {"Ratio": 1.5, "Name": "y"}) == Partial(Name="y")

    def test_nested_dict_values_are_checked(self) -> None:
        with pytest.raises(TypeMismatch) as exc_info:
            from_map(Example, {"ToOmit": {"Ratio": 1.5}})
        assert exc_info.value.field == "ToOmit.Ratio"
        assert exc_info.value.actual == "float"

    def test_nested_dict_keys_must_be_strings(self) -> None:
        with pytest.raises(TypeMismatch) as exc_info:
            from_map(Example, {"ToOmit": {3: "x"}})
        assert exc_info.value.field == "ToOmit[3]"
        assert exc_info.value.expected == "string key"

    def test_containers_in_untyped_fields_are_checked(self) -> None:
        with pytest.raises(TypeMismatch, match="Extra.inner"):
            from_map(Device, {"Extra": {"inner": [object()]}})

    def test_nested_variants_are_unwrapped(self) -> None:
        record = from_map(Example, {"ToOmit": {"Level": Variant(VariantKind.BYTE, 3), "Names": ["a"]}})
        assert record.ToOmit == {"Level": 3, "Names": ["a"]}

    def test_required_fields_take_entries_or_zero_values(self) -> None:
        record = from_map(Required, {"Count": 5})
        assert record.Count == 5
        assert record.Name == ""
        assert record.Path == ObjectPath("")
        assert record.Tags == []
        assert record.Extra is None
        assert record.Enabled is True

    def test_required_fields_with_mismatched_entry(self) -> None:
        with pytest.raises(TypeMismatch, match="Count"):
            from_map(Required, {"Count": "five"})


class TestUpdateFromMap:
    def test_returns_assigned_names(self) -> None:
        record = Device(Address="a")
        assert update_from_map(record, {"Paired": True, "Unknown": 1}) == ["Paired"]
        assert record.Paired
        assert record.Address == "a"

    def test_nothing_is_assigned_on_error(self) -> None:
        record = Device()
        with pytest.raises(TypeMismatch):
            update_from_map(record, {"Address": "changed", "Count": "bad"})
        assert record.Address == ""

    def test_convert_single_value(self) -> None:
        descriptor = resolve(Device)["RSSI"]
        assert convert(Variant(VariantKind.INT16, -3), descriptor) == -3
