# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface assembly for parsed documentation entries.

Groups the properties, methods and signals of each spec unit under its
interface name and builds the corpus-wide :class:`~specbind.model.entities.Api`.
Two units declaring the same interface, or one interface declaring the same
property twice, is a documentation mistake: the assembler reports it and never
picks a winner.
"""

from __future__ import annotations

from collections.abc import Iterable

from specbind.compiler.parser import ParsedUnit
from specbind.model.entities import Api, Entry, Interface, Method, Property, Signal

# ###############
# Public Interface
# ###############


class ConflictError(Exception):
    """Raised when two declarations claim the same name.

    Attributes:
        name: The conflicting interface (or ``interface.property``) name.
        sources: Labels of the declarations involved, in encounter order.
    """

    def __init__(self, message: str, name: str, sources: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.name = name
        self.sources = sources


def assemble_interface(
    name: str,
    entries: Iterable[Entry],
    *,
    service: str | None = None,
    object_path: str | None = None,
    title: str | None = None,
    source: str | None = None,
) -> Interface:
    """Build one Interface from its parsed entries.

    Methods and signals keep their document order; properties are keyed by
    name in declaration order.

    Raises:
        ConflictError: If two properties share a name.
    """
    properties: dict[str, Property] = {}
    methods: list[Method] = []
    signals: list[Signal] = []
    for entry in entries:
        if isinstance(entry, Property):
            if entry.name in properties:
                raise ConflictError(
                    f"Property '{entry.name}' declared twice in interface '{name}'",
                    f"{name}.{entry.name}",
                    (source or "<unknown>",),
                )
            properties[entry.name] = entry
        elif isinstance(entry, Method):
            methods.append(entry)
        else:
            signals.append(entry)

    return Interface(
        name=name,
        service=service,
        object_path=object_path,
        title=title,
        docs=title or "",
        properties=properties,
        methods=methods,
        signals=signals,
        source=source,
    )


def assemble(units: Iterable[ParsedUnit]) -> Api:
    """Assemble parsed units from the whole corpus into one Api.

    Args:
        units: Parsed units from every documentation file of the run.

    Returns:
        An Api whose interfaces are sorted by name.

    Raises:
        ConflictError: If two units declare the same interface name, or a unit
            declares a property twice.
    """
    seen: dict[str, str] = {}
    interfaces: list[Interface] = []
    for unit in units:
        location = _location(unit)
        if unit.interface in seen:
            raise ConflictError(
                f"Interface '{unit.interface}' declared twice: {seen[unit.interface]} and {location}",
                unit.interface,
                (seen[unit.interface], location),
            )
        seen[unit.interface] = location
        interfaces.append(
            assemble_interface(
                unit.interface,
                unit.entries,
                service=unit.service,
                object_path=unit.object_path,
                title=unit.title,
                source=location,
            )
        )
    interfaces.sort(key=lambda iface: iface.name)
    return Api(interfaces=interfaces)


# ################
# Implementation
# ################


def _location(unit: ParsedUnit) -> str:
    return f"{unit.source}:{unit.line}" if unit.line else unit.source
