# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface model for specbind (properties, methods, signals, interfaces)."""

from specbind.model.entities import (
    Api,
    Argument,
    Entry,
    Interface,
    Method,
    Property,
    Signal,
)
from specbind.model.types import (
    BASIC_TYPES,
    VOID,
    Flag,
    array_element_type,
    is_array_type,
    is_known_type,
)

__all__ = [
    # Type vocabulary
    "BASIC_TYPES",
    "VOID",
    "Flag",
    "array_element_type",
    "is_array_type",
    "is_known_type",
    # Entities
    "Argument",
    "Property",
    "Method",
    "Signal",
    "Entry",
    "Interface",
    "Api",
]
