# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-field marshalling directives and the process-wide descriptor cache.

Records are dataclasses.  Directives are attached to a field with
:func:`prop`, either as keywords or as a compact tag string::

    @dataclass
    class Example(PropertiesRecord):
        IgnoreFlag: bool = prop("ignore", default=False)
        ToOmit: dict[str, Any] = prop("omitEmpty,writable", default_factory=dict)
        IgnoredByProperty: list[str] = prop(skip_if="IgnoreFlag", default_factory=list)
        Avail: str = ""

The descriptor table of a record type is computed once, on first use or on
:func:`register`, and kept for the life of the process.  The cache holds one
entry per record type defined in the program and is never evicted.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import typing
from collections.abc import Mapping
from dataclasses import MISSING, dataclass
from types import MappingProxyType
from typing import Any

from specbind.props.variant import VariantKind, kind_for_annotation

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DIRECTIVES_KEY = "specbind"


@dataclass(frozen=True)
class Directives:
    """Marshalling directives declared on one field.

    Attributes:
        skip: Never emit the field.
        skip_if: Name of a boolean sibling field; the field is not emitted
            while that sibling is true.
        omit_empty: Do not emit the field while it holds its zero value.
        writable: The property may be written by the peer.
        error: Problem found while reading a tag string, if any.
    """

    skip: bool = False
    skip_if: str | None = None
    omit_empty: bool = False
    writable: bool = False
    error: str | None = None


@dataclass(frozen=True)
class FieldDescriptor:
    """Resolved directives and value kind of one record field.

    Attributes:
        name: Field name, which is also the property name.
        kind: Declared vocabulary kind; None accepts any kind.
        element_kind: Element kind for ARRAY fields, if declared.
        skip: See :class:`Directives`.
        skip_if: See :class:`Directives`.
        omit_empty: See :class:`Directives`.
        writable: See :class:`Directives`.
        error: Why the field cannot be marshalled, or None if it can.
    """

    name: str
    kind: VariantKind | None = None
    element_kind: VariantKind | None = None
    skip: bool = False
    skip_if: str | None = None
    omit_empty: bool = False
    writable: bool = False
    error: str | None = None


def parse_tag(tag: str) -> Directives:
    """Parse a directive tag string such as ``"omitEmpty,writable"``.

    Tokens: ``ignore`` (skip), ``ignore=<Field>`` (skip_if), ``omitEmpty``,
    ``writable``.  Unknown tokens are reported through ``Directives.error``.
    """
    skip = omit_empty = writable = False
    skip_if: str | None = None
    unknown: list[str] = []
    for raw in tag.split(","):
        token = raw.strip()
        if not token:
            continue
        if token == "ignore":
            skip = True
        elif token.startswith("ignore="):
            skip_if = token[len("ignore=") :].strip() or None
        elif token == "omitEmpty":
            omit_empty = True
        elif token == "writable":
            writable = True
        else:
            unknown.append(token)
    error = f"unknown directive(s) {', '.join(unknown)} in tag {tag!r}" if unknown else None
    return Directives(skip=skip, skip_if=skip_if, omit_empty=omit_empty, writable=writable, error=error)


def prop(
    tag: str | None = None,
    *,
    skip: bool = False,
    skip_if: str | None = None,
    omit_empty: bool = False,
    writable: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **field_kwargs: Any,
) -> Any:
    """Declare a record field with marshalling directives.

    Keyword directives are combined with those of *tag*.  Remaining keyword
    arguments are passed on to :func:`dataclasses.field`.
    """
    tagged = parse_tag(tag) if tag else Directives()
    directives = Directives(
        skip=skip or tagged.skip,
        skip_if=skip_if or tagged.skip_if,
        omit_empty=omit_empty or tagged.omit_empty,
        writable=writable or tagged.writable,
        error=tagged.error,
    )
    metadata = {**field_kwargs.pop("metadata", {}), DIRECTIVES_KEY: directives}
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata, **field_kwargs)


def resolve(record_type: type) -> Mapping[str, FieldDescriptor]:
    """Return the descriptor table of *record_type*, in field declaration order.

    The first call for a type computes the table; later calls return the
    cached one.  Concurrent first calls may both compute it, only one result
    is kept.

    Raises:
        TypeError: If *record_type* is not a dataclass type.
    """
    descriptors = _cache.get(record_type)
    if descriptors is not None:
        return descriptors
    computed = _compute(record_type)
    with _cache_lock:
        return _cache.setdefault(record_type, computed)


def register(record_type: type) -> type:
    """Resolve *record_type* eagerly and return it (usable as a class decorator)."""
    table = resolve(record_type)
    broken = [d.name for d in table.values() if d.error is not None]
    if broken:
        logger.warning("%s: fields %s cannot be marshalled", record_type.__qualname__, ", ".join(broken))
    return record_type


# ################
# Implementation
# ################

_cache: dict[type, Mapping[str, FieldDescriptor]] = {}
_cache_lock = threading.Lock()

_NO_DIRECTIVES = Directives()


def _compute(record_type: type) -> Mapping[str, FieldDescriptor]:
    if not isinstance(record_type, type) or not dataclasses.is_dataclass(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass type")

    hint_error: str | None = None
    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError) as exc:
        hints = {}
        hint_error = f"cannot resolve annotations: {exc}"

    kinds: dict[str, tuple[VariantKind | None, VariantKind | None]] = {}
    kind_errors: dict[str, str] = {}
    for f in dataclasses.fields(record_type):
        if f.name not in hints:
            kind_errors[f.name] = hint_error or "missing annotation"
            continue
        try:
            kinds[f.name] = kind_for_annotation(hints[f.name])
        except TypeError as exc:
            kind_errors[f.name] = str(exc)

    table: dict[str, FieldDescriptor] = {}
    for f in dataclasses.fields(record_type):
        directives: Directives = f.metadata.get(DIRECTIVES_KEY, _NO_DIRECTIVES)
        kind, element_kind = kinds.get(f.name, (None, None))
        error = directives.error
        if error is None and not directives.skip:
            error = kind_errors.get(f.name)
        if error is None and directives.skip_if is not None:
            sibling = kinds.get(directives.skip_if)
            if sibling is None or sibling[0] is not VariantKind.BOOLEAN:
                error = f"skip_if refers to '{directives.skip_if}', which is not a boolean field"
        table[f.name] = FieldDescriptor(
            name=f.name,
            kind=kind,
            element_kind=element_kind,
            skip=directives.skip,
            skip_if=directives.skip_if,
            omit_empty=directives.omit_empty,
            writable=directives.writable,
            error=error,
        )
    logger.debug("Resolved %d field descriptor(s) for %s", len(table), record_type.__qualname__)
    return MappingProxyType(table)
