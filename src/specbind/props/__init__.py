# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Property records and their conversion to and from generic property maps."""

from specbind.props.descriptors import Directives, FieldDescriptor, parse_tag, prop, register, resolve
from specbind.props.marshal import (
    DescriptorWarning,
    MarshalError,
    TypeMismatch,
    convert,
    from_map,
    to_map,
    to_variants,
    update_from_map,
)
from specbind.props.record import PropertiesRecord, RWLock
from specbind.props.variant import (
    Byte,
    Int16,
    Int32,
    Int64,
    ObjectPath,
    UInt16,
    UInt32,
    UInt64,
    Variant,
    VariantKind,
    kind_for_annotation,
    kind_of,
    make_variant,
)

__all__ = [
    "Directives",
    "FieldDescriptor",
    "parse_tag",
    "prop",
    "register",
    "resolve",
    "MarshalError",
    "TypeMismatch",
    "DescriptorWarning",
    "convert",
    "to_map",
    "to_variants",
    "from_map",
    "update_from_map",
    "PropertiesRecord",
    "RWLock",
    "VariantKind",
    "Variant",
    "ObjectPath",
    "Byte",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
    "kind_of",
    "kind_for_annotation",
    "make_variant",
]
