# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Block scanner for interface documentation files.

Splits a documentation file into spec units and each unit's sections into
blocks.  The expected layout is the plain-text style used by BlueZ::

    Adapter hierarchy
    =================

    Service         org.bluez
    Interface       org.bluez.Adapter1
    Object path     [variable prefix]/{hci0,hci1,...}

    Methods         void StartDiscovery()

                            This method starts the device discovery session.

                            Possible errors: org.bluez.Error.NotReady

    Properties      string Address [readonly]

                            The Bluetooth device address.

A unit begins at every run of ``Service`` / ``Interface`` / ``Object path``
header lines that names an interface.  Inside a ``Methods``, ``Signals`` or
``Properties`` section, a line at the item column starts a new block and
deeper lines belong to that block's docs paragraph.
"""

from __future__ import annotations

import enum
import re
import textwrap
from dataclasses import dataclass, field

# ###############
# Public Interface
# ###############


class SectionKind(enum.Enum):
    """The kind of entries a documentation section holds."""

    METHOD = "Methods"
    SIGNAL = "Signals"
    PROPERTY = "Properties"


@dataclass(frozen=True)
class SpecBlock:
    """The raw text of one property, method, or signal.

    Attributes:
        kind: Section the block was found in.
        text: Signature line followed by the dedented docs paragraph.
        line: 1-based line number of the signature in the source file.
    """

    kind: SectionKind
    text: str
    line: int


@dataclass
class SpecUnit:
    """The documentation of one interface, as found in a source file.

    Attributes:
        interface: Interface name from the ``Interface`` header.
        service: Value of the ``Service`` header, if any.
        object_path: Value of the ``Object path`` header, if any.
        title: Nearest preceding underlined title.
        source: Label of the file the unit came from.
        line: 1-based line number of the header run.
        blocks: Blocks in document order.
    """

    interface: str
    service: str | None = None
    object_path: str | None = None
    title: str | None = None
    source: str = "<string>"
    line: int = 0
    blocks: list[SpecBlock] = field(default_factory=list)


def scan(text: str, source: str = "<string>") -> list[SpecUnit]:
    """Split documentation text into spec units.

    Args:
        text: Full text of one documentation file.
        source: Label used for the units' ``source`` attribute.

    Returns:
        The units in document order.  Header runs without an ``Interface``
        line do not produce a unit.
    """
    return _Scanner(text, source).scan()


# ################
# Implementation
# ################

_HEADER_KEYS: tuple[str, ...] = ("Object path", "Interface", "Service")

_SECTION_KEYWORDS: dict[str, SectionKind] = {kind.value: kind for kind in SectionKind}

_UNDERLINE = re.compile(r"^(=+|\*+)$")

_TAB_SIZE = 8


@dataclass
class _Section:
    kind: SectionKind
    item_column: int | None


class _Scanner:
    """Line-oriented state machine over one documentation file."""

    def __init__(self, text: str, source: str) -> None:
        self._lines = [line.expandtabs(_TAB_SIZE).rstrip() for line in text.splitlines()]
        self._source = source
        self._units: list[SpecUnit] = []
        self._title: str | None = None
        self._unit: SpecUnit | None = None
        self._header: dict[str, str] = {}
        self._header_line = 0
        self._section: _Section | None = None
        self._block: list[str] = []
        self._block_line = 0

    def scan(self) -> list[SpecUnit]:
        """Walk all lines and return the collected units."""
        index = 0
        while index < len(self._lines):
            line = self._lines[index]
            if not line:
                self._flush_header()
                if self._block:
                    self._block.append("")
                index += 1
                continue

            indent = len(line) - len(line.lstrip(" "))
            if indent == 0:
                if self._is_title(index):
                    self._end_section()
                    self._flush_header()
                    self._title = line.strip()
                    index += 2
                    continue
                self._scan_column_zero(line, index + 1)
            else:
                self._flush_header()
                self._scan_indented(line, indent, index + 1)
            index += 1

        self._end_section()
        self._flush_header()
        return self._units

    # ------------------------------------------------------------------
    # Line classification
    # ------------------------------------------------------------------

    def _is_title(self, index: int) -> bool:
        """Return True if line *index* is followed by an underline."""
        return index + 1 < len(self._lines) and bool(_UNDERLINE.match(self._lines[index + 1]))

    def _scan_column_zero(self, line: str, lineno: int) -> None:
        """Handle a header line, a section keyword, or free text at column 0."""
        for key in _HEADER_KEYS:
            if line.startswith(key) and (len(line) == len(key) or line[len(key)].isspace()):
                self._end_section()
                if not self._header:
                    self._header_line = lineno
                self._header.setdefault(key, line[len(key) :].strip())
                return
        self._flush_header()

        keyword = line.split(None, 1)[0]
        kind = _SECTION_KEYWORDS.get(keyword)
        self._end_section()
        if kind is None or self._unit is None:
            return

        rest = line[len(keyword) :]
        stripped = rest.lstrip(" ")
        if not stripped:
            self._section = _Section(kind, None)
            return
        column = len(keyword) + len(rest) - len(stripped)
        self._section = _Section(kind, column)
        self._start_block(stripped, lineno)

    def _scan_indented(self, line: str, indent: int, lineno: int) -> None:
        """Handle an indented line inside (or outside) a section."""
        section = self._section
        if section is None:
            return
        if section.item_column is None:
            section.item_column = indent
            self._start_block(line.strip(), lineno)
        elif indent <= section.item_column:
            self._close_block()
            self._start_block(line.strip(), lineno)
        elif self._block:
            self._block.append(line)

    # ------------------------------------------------------------------
    # Units, sections and blocks
    # ------------------------------------------------------------------

    def _flush_header(self) -> None:
        """Turn a completed header run into a unit if it names an interface."""
        if not self._header:
            return
        header, self._header = self._header, {}
        interface = header.get("Interface")
        if not interface:
            self._unit = None
            return
        self._unit = SpecUnit(
            interface=interface,
            service=header.get("Service") or None,
            object_path=header.get("Object path") or None,
            title=self._title,
            source=self._source,
            line=self._header_line,
        )
        self._units.append(self._unit)

    def _start_block(self, signature: str, lineno: int) -> None:
        self._block = [signature]
        self._block_line = lineno

    def _close_block(self) -> None:
        if not self._block or self._section is None or self._unit is None:
            self._block = []
            return
        lines = self._block
        while lines and not lines[-1]:
            lines.pop()
        docs = textwrap.dedent("\n".join(lines[1:]))
        text = lines[0] if not docs else f"{lines[0]}\n{docs}"
        self._unit.blocks.append(SpecBlock(self._section.kind, text, self._block_line))
        self._block = []

    def _end_section(self) -> None:
        self._close_block()
        self._section = None
