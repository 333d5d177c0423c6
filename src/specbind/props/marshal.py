# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion between records and generic property mappings.

Callers are expected to hold the record's lock: the shared side around
:func:`to_map` / :func:`to_variants`, the exclusive side around
:func:`update_from_map`.  None of these functions block or lock themselves.
"""

from __future__ import annotations

import dataclasses
import logging
import warnings
from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

from specbind.props.descriptors import FieldDescriptor, resolve
from specbind.props.variant import INTEGER_RANGES, ObjectPath, Variant, VariantKind, kind_of

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

R = TypeVar("R")


class MarshalError(Exception):
    """Base class for record/map conversion errors."""


class TypeMismatch(MarshalError):
    """Raised when an inbound value cannot be converted to its field's kind.

    Attributes:
        field: Name of the field the value was meant for.
        actual: Kind (or Python type name) of the offending value.
        expected: Kind declared by the field.
    """

    def __init__(self, field: str, actual: str, expected: str) -> None:
        super().__init__(f"Field '{field}': cannot assign a {actual} value to a {expected} field")
        self.field = field
        self.actual = actual
        self.expected = expected


class DescriptorWarning(UserWarning):
    """Emitted in strict mode when a field is left out of a map because it cannot be marshalled."""


def to_map(record: Any, *, strict: bool = False) -> dict[str, Any]:
    """Convert *record* to a plain ``{property name: value}`` mapping.

    Fields are visited in declaration order.  A field is left out when it is
    skip-tagged, when its ``skip_if`` sibling is true, when it is
    ``omit_empty`` and holds its zero value, when it holds None, or when its
    descriptor carries an error.  The last case is silent unless *strict* is
    set, in which case a :class:`DescriptorWarning` is emitted.
    """
    return {descriptor.name: value for descriptor, value in _outbound(record, strict)}


def to_variants(record: Any, *, strict: bool = False) -> dict[str, Variant]:
    """Like :func:`to_map`, with every value tagged by its field's kind."""
    result: dict[str, Variant] = {}
    for descriptor, value in _outbound(record, strict):
        kind = descriptor.kind or kind_of(value)
        if kind is None:
            _report(record, descriptor.name, f"{type(value).__name__} value has no variant kind", strict)
            continue
        result[descriptor.name] = Variant(kind, value)
    return result


def from_map(record_type: type[R], mapping: Mapping[str, Any]) -> R:
    """Build a fresh record of *record_type* from *mapping*.

    Entries whose key matches no field (or a skip-tagged field) are ignored.
    Fields without an entry keep their default, or the zero value of their
    kind when they declare no default.  Every entry is converted before the
    record is built.

    Raises:
        TypeMismatch: If a value cannot be converted to its field's kind.
    """
    descriptors = resolve(record_type)
    values = _convert_all(record_type, mapping)
    init_values: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):  # type: ignore[arg-type]
        if not f.init:
            continue
        if f.name in values:
            init_values[f.name] = values.pop(f.name)
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            init_values[f.name] = _zero_value(descriptors[f.name])
    record = record_type(**init_values)
    for name, value in values.items():
        setattr(record, name, value)
    return record


def update_from_map(record: R, mapping: Mapping[str, Any]) -> list[str]:
    """Update *record* in place from *mapping* and return the names assigned.

    Either every matching entry is assigned or, on a conversion error, none is.

    Raises:
        TypeMismatch: If a value cannot be converted to its field's kind.
    """
    values = _convert_all(type(record), mapping)
    for name, value in values.items():
        setattr(record, name, value)
    return list(values)


def convert(value: Any, descriptor: FieldDescriptor) -> Any:
    """Convert one inbound value to the kind declared by *descriptor*.

    Raises:
        TypeMismatch: If the value is outside the vocabulary or not convertible.
    """
    return _convert(value, descriptor.kind, descriptor.element_kind, descriptor.name)


# ################
# Implementation
# ################


def _outbound(record: Any, strict: bool) -> Iterator[tuple[FieldDescriptor, Any]]:
    for descriptor in resolve(type(record)).values():
        if descriptor.skip:
            continue
        if descriptor.error is not None:
            _report(record, descriptor.name, descriptor.error, strict)
            continue
        if descriptor.skip_if is not None and getattr(record, descriptor.skip_if):
            continue
        value = getattr(record, descriptor.name)
        if value is None:
            continue
        if descriptor.omit_empty and not value:
            continue
        yield descriptor, value


def _report(record: Any, name: str, reason: str, strict: bool) -> None:
    message = f"{type(record).__qualname__}.{name} left out of property map: {reason}"
    if strict:
        warnings.warn(message, DescriptorWarning, stacklevel=4)
    else:
        logger.debug(message)


def _convert_all(record_type: type, mapping: Mapping[str, Any]) -> dict[str, Any]:
    descriptors = resolve(record_type)
    values: dict[str, Any] = {}
    for key, raw in mapping.items():
        descriptor = descriptors.get(key)
        if descriptor is None or descriptor.skip:
            continue
        if descriptor.error is not None:
            logger.debug("%s.%s ignored: %s", record_type.__qualname__, key, descriptor.error)
            continue
        values[key] = convert(raw, descriptor)
    return values


def _kind_name(kind: VariantKind | None) -> str:
    return "any" if kind is None else kind.name.lower()


def _zero_value(descriptor: FieldDescriptor) -> Any:
    if descriptor.kind is VariantKind.OBJECT_PATH:
        return ObjectPath("")
    if descriptor.kind is VariantKind.DICT:
        return {}
    if descriptor.kind is VariantKind.ARRAY:
        return []
    return _ZERO_VALUES.get(descriptor.kind)


_ZERO_VALUES: dict[VariantKind | None, Any] = {
    VariantKind.BOOLEAN: False,
    VariantKind.STRING: "",
    VariantKind.BYTES: b"",
    **dict.fromkeys(INTEGER_RANGES, 0),
}


def _convert_dict(value: Mapping[Any, Any], field: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise TypeMismatch(f"{field}[{key!r}]", f"{type(key).__name__} key", "string key")
        result[key] = _convert(item, None, None, f"{field}.{key}")
    return result


def _convert(value: Any, kind: VariantKind | None, element_kind: VariantKind | None, field: str) -> Any:
    if isinstance(value, Variant):
        actual = value.kind
        value = value.value
    else:
        actual = kind_of(value)
    if actual is None:
        raise TypeMismatch(field, type(value).__name__, _kind_name(kind))

    if kind is None:
        # Containers are checked all the way down.
        if actual is VariantKind.DICT and isinstance(value, Mapping):
            return _convert_dict(value, field)
        if actual is VariantKind.ARRAY and isinstance(value, (list, tuple)):
            return [_convert(item, None, None, field) for item in value]
        return value

    if kind is VariantKind.BOOLEAN:
        if isinstance(value, bool):
            return value
    elif kind in INTEGER_RANGES:
        if isinstance(value, int) and not isinstance(value, bool):
            low, high = INTEGER_RANGES[kind]
            if low <= value <= high:
                return int(value)
            raise TypeMismatch(field, f"{_kind_name(actual)} ({value})", _kind_name(kind))
    elif kind is VariantKind.STRING:
        if isinstance(value, str):
            return str(value)
    elif kind is VariantKind.OBJECT_PATH:
        if isinstance(value, str):
            return ObjectPath(value)
    elif kind is VariantKind.BYTES:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, (list, tuple)) and all(
            isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 0xFF for v in value
        ):
            return bytes(value)
    elif kind is VariantKind.DICT:
        if isinstance(value, Mapping):
            return _convert_dict(value, field)
    elif kind is VariantKind.ARRAY:
        if element_kind is VariantKind.BYTE and isinstance(value, (bytes, bytearray)):
            return list(value)
        if isinstance(value, (list, tuple)):
            return [_convert(item, element_kind, None, field) for item in value]

    raise TypeMismatch(field, _kind_name(actual), _kind_name(kind))
