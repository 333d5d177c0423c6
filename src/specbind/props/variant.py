# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""The closed value vocabulary exchanged across the property-map boundary."""

from __future__ import annotations

import enum
import types
import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Union

# ###############
# Public Interface
# ###############


class VariantKind(enum.Enum):
    """Value kinds of the vocabulary, valued by their D-Bus signature code."""

    BOOLEAN = "b"
    BYTE = "y"
    INT16 = "n"
    UINT16 = "q"
    INT32 = "i"
    UINT32 = "u"
    INT64 = "x"
    UINT64 = "t"
    STRING = "s"
    OBJECT_PATH = "o"
    BYTES = "ay"
    DICT = "a{sv}"
    ARRAY = "a"


class ObjectPath(str):
    """An opaque, path-like object identifier."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"ObjectPath({str(self)!r})"


# Fixed-width integer field annotations.  A plain ``int`` field is INT32.
Byte = Annotated[int, VariantKind.BYTE]
Int16 = Annotated[int, VariantKind.INT16]
UInt16 = Annotated[int, VariantKind.UINT16]
Int32 = Annotated[int, VariantKind.INT32]
UInt32 = Annotated[int, VariantKind.UINT32]
Int64 = Annotated[int, VariantKind.INT64]
UInt64 = Annotated[int, VariantKind.UINT64]

INTEGER_RANGES: dict[VariantKind, tuple[int, int]] = {
    VariantKind.BYTE: (0, 0xFF),
    VariantKind.INT16: (-(2**15), 2**15 - 1),
    VariantKind.UINT16: (0, 2**16 - 1),
    VariantKind.INT32: (-(2**31), 2**31 - 1),
    VariantKind.UINT32: (0, 2**32 - 1),
    VariantKind.INT64: (-(2**63), 2**63 - 1),
    VariantKind.UINT64: (0, 2**64 - 1),
}


@dataclass(frozen=True)
class Variant:
    """A value tagged with its vocabulary kind."""

    kind: VariantKind
    value: Any


def kind_of(value: Any) -> VariantKind | None:
    """Return the vocabulary kind of a plain value, or None if it has none.

    Integers get the narrowest of INT32, INT64 and UINT64 that holds them.
    """
    if isinstance(value, Variant):
        return value.kind
    if isinstance(value, bool):
        return VariantKind.BOOLEAN
    if isinstance(value, ObjectPath):
        return VariantKind.OBJECT_PATH
    if isinstance(value, str):
        return VariantKind.STRING
    if isinstance(value, (bytes, bytearray)):
        return VariantKind.BYTES
    if isinstance(value, int):
        for kind in (VariantKind.INT32, VariantKind.INT64, VariantKind.UINT64):
            low, high = INTEGER_RANGES[kind]
            if low <= value <= high:
                return kind
        return None
    if isinstance(value, Mapping):
        return VariantKind.DICT
    if isinstance(value, (list, tuple)):
        return VariantKind.ARRAY
    return None


def make_variant(value: Any, kind: VariantKind | None = None) -> Variant:
    """Tag *value* with *kind*, or with its inferred kind.

    Raises:
        TypeError: If *value* has no vocabulary kind.
        ValueError: If an integer does not fit the requested kind.
    """
    if isinstance(value, Variant):
        return value
    if kind is None:
        kind = kind_of(value)
        if kind is None:
            raise TypeError(f"{type(value).__name__} values cannot be sent as variants")
    if kind in INTEGER_RANGES:
        low, high = INTEGER_RANGES[kind]
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            raise ValueError(f"{value!r} does not fit {kind.name}")
    return Variant(kind, value)


def kind_for_annotation(annotation: Any) -> tuple[VariantKind | None, VariantKind | None]:
    """Map a field type hint to ``(kind, element_kind)``.

    ``Any`` maps to ``(None, None)``: the field accepts every vocabulary kind.
    ``X | None`` maps like ``X``.

    Raises:
        TypeError: If the annotation has no vocabulary counterpart.
    """
    origin = typing.get_origin(annotation)
    if origin is Annotated:
        base, *extras = typing.get_args(annotation)
        for extra in extras:
            if isinstance(extra, VariantKind):
                return extra, None
        return kind_for_annotation(base)
    if annotation is Any:
        return None, None
    if origin in (Union, types.UnionType):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return kind_for_annotation(members[0])
        raise TypeError(f"unsupported field type {annotation!r}")
    if annotation in _SCALAR_ANNOTATIONS:
        return _SCALAR_ANNOTATIONS[annotation], None
    if annotation in (dict, Mapping) or origin in (dict, Mapping):
        return VariantKind.DICT, None
    if annotation in (list, tuple, Sequence) or origin in (list, tuple, Sequence):
        args = [arg for arg in typing.get_args(annotation) if arg is not Ellipsis]
        element = kind_for_annotation(args[0])[0] if args else None
        return VariantKind.ARRAY, element
    raise TypeError(f"unsupported field type {annotation!r}")


# ################
# Implementation
# ################

_SCALAR_ANNOTATIONS: dict[Any, VariantKind] = {
    bool: VariantKind.BOOLEAN,
    int: VariantKind.INT32,
    str: VariantKind.STRING,
    ObjectPath: VariantKind.OBJECT_PATH,
    bytes: VariantKind.BYTES,
}
