# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type vocabulary and flags used by the specbind interface model."""

from __future__ import annotations

from enum import Enum

# ###############
# Public Interface
# ###############


class Flag(Enum):
    """Access and status flags attached to a documented property."""

    READ_ONLY = "readonly"
    READ_WRITE = "readwrite"
    EXPERIMENTAL = "experimental"


# Scalar type keywords accepted in signatures.  ``array{...}`` is the only
# compound form and is recognised structurally by the parser.
BASIC_TYPES: frozenset[str] = frozenset(
    {
        "bool",
        "boolean",
        "byte",
        "string",
        "int16",
        "uint16",
        "uint16_t",
        "int32",
        "uint32",
        "int64",
        "uint64",
        "double",
        "dict",
        "object",
        "fd",
        "variant",
    }
)

# Return-only keyword meaning "no values".
VOID = "void"

ARRAY_PREFIX = "array{"


def is_array_type(type_name: str) -> bool:
    """Return True if *type_name* is an ``array{...}`` compound type."""
    return type_name.startswith(ARRAY_PREFIX) and type_name.endswith("}")


def array_element_type(type_name: str) -> str:
    """Return the element type of an ``array{...}`` type (``"array{byte}"`` → ``"byte"``)."""
    return type_name[len(ARRAY_PREFIX) : -1].strip()


def is_known_type(type_name: str) -> bool:
    """Return True if *type_name* belongs to the type vocabulary."""
    return type_name in BASIC_TYPES or is_array_type(type_name)
