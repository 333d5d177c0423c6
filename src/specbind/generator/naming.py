# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Identifier, type, and output-path mapping from the interface model to Python."""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from specbind.model.types import array_element_type, is_array_type

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class FieldType:
    """How a documented property type is declared on a properties record.

    Attributes:
        annotation: Field annotation, valid in the generated module's namespace.
        default: Default expression (``default=``), or None when ``factory`` is set.
        factory: Default factory expression (``default_factory=``), if any.
    """

    annotation: str
    default: str | None = None
    factory: str | None = None


def snake_case(name: str) -> str:
    """Convert a CamelCase identifier to snake_case.

    Acronyms stay together, a trailing plural ``s`` stays with its acronym,
    and digits stay with the preceding word::

        MediaTransport1 -> media_transport1
        UUIDs           -> uuids
        TxPower         -> tx_power
    """
    return "_".join(part.lower() for part in _WORD_RE.findall(name))


def safe_identifier(name: str) -> str:
    """Return *name* made usable as a Python identifier (keywords get a ``_`` suffix)."""
    cleaned = re.sub(r"\W", "_", name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    if keyword.iskeyword(cleaned) or keyword.issoftkeyword(cleaned) or cleaned == "self":
        cleaned = f"{cleaned}_"
    return cleaned


def class_name(short_name: str) -> str:
    """Return the client class name for an interface short name."""
    return safe_identifier(short_name)


def unique_name(candidate: str, taken: set[str]) -> str:
    """Return *candidate*, suffixed with ``_`` until it is not in *taken*, and add it to *taken*."""
    name = candidate
    while name in taken:
        name = f"{name}_"
    taken.add(name)
    return name


def module_path(interface_name: str) -> PurePosixPath:
    """Return the output path of the module generated for *interface_name*.

    The path depends only on the interface name::

        org.bluez.MediaTransport1 -> org/bluez/media_transport1.py
    """
    *packages, short = interface_name.split(".")
    parts = [safe_identifier(p.lower()) for p in packages]
    parts.append(f"{safe_identifier(snake_case(short) or short.lower())}.py")
    return PurePosixPath(*parts)


def field_type(type_name: str) -> FieldType:
    """Return the record field declaration for a documented property type.

    Types outside the marshalling vocabulary (``double``, ``fd``,
    ``variant``, ...) are declared as ``Any`` and default to None.
    """
    if is_array_type(type_name):
        element = array_element_type(type_name)
        if element == "byte":
            return FieldType("bytes", default='b""')
        inner = _FIELD_TYPES.get(element)
        inner_annotation = inner.annotation if inner is not None else "Any"
        return FieldType(f"list[{inner_annotation}]", factory="list")
    known = _FIELD_TYPES.get(type_name)
    if known is not None:
        return known
    return FieldType("Any", default="None")


def python_type(type_name: str) -> str:
    """Return the annotation used for a documented type in method signatures."""
    if is_array_type(type_name):
        element = array_element_type(type_name)
        if element == "byte":
            return "bytes"
        return f"list[{python_type(element)}]"
    return _PYTHON_TYPES.get(type_name, "Any")


# ################
# Implementation
# ################

_WORD_RE = re.compile(r"[A-Z]+s(?![a-z])\d*|[A-Z]+(?![a-z])\d*|[A-Z][a-z]*\d*|[a-z]+\d*|\d+")

_FIELD_TYPES: dict[str, FieldType] = {
    "bool": FieldType("bool", default="False"),
    "boolean": FieldType("bool", default="False"),
    "byte": FieldType("Byte", default="0"),
    "int16": FieldType("Int16", default="0"),
    "uint16": FieldType("UInt16", default="0"),
    "uint16_t": FieldType("UInt16", default="0"),
    "int32": FieldType("Int32", default="0"),
    "uint32": FieldType("UInt32", default="0"),
    "int64": FieldType("Int64", default="0"),
    "uint64": FieldType("UInt64", default="0"),
    "string": FieldType("str", default='""'),
    "object": FieldType("ObjectPath", default='ObjectPath("")'),
    "dict": FieldType("dict[str, Any]", factory="dict"),
}

_PYTHON_TYPES: dict[str, str] = {
    "bool": "bool",
    "boolean": "bool",
    "byte": "int",
    "int16": "int",
    "uint16": "int",
    "uint16_t": "int",
    "int32": "int",
    "uint32": "int",
    "int64": "int",
    "uint64": "int",
    "double": "float",
    "string": "str",
    "object": "ObjectPath",
    "dict": "dict[str, Any]",
    "fd": "int",
    "variant": "Any",
}
