# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Block parsers for property, method, and signal documentation.

Each block is a signature line followed by a docs paragraph.  Signatures are
tokenized by :mod:`specbind.compiler.lexer` and read by a small
recursive-descent parser that tries two grammar alternatives in order:

* properties: ``<type> <Name> [<flags>]`` first, then ``<type> <Name>``
  for blocks that carry no flag annotation;
* methods and signals: ``<ret>, ... <Name>(<args>)`` first, then the bare
  ``<Name>(<args>) -> (<ret>, ...)`` form.

Documentation is not uniformly annotated, so the strict alternative must
always be attempted before the loose one.
"""

from __future__ import annotations

import enum
import logging
import re
import textwrap
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from specbind.compiler.lexer import Token, TokenType, tokenize
from specbind.compiler.scanner import SectionKind, SpecBlock, scan
from specbind.model.entities import Argument, Entry, Method, Property, Signal
from specbind.model.types import BASIC_TYPES, VOID, Flag

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when a block or document cannot be parsed.

    Attributes:
        message: Description of the problem without location prefix.
        line: 1-based line number of the offending block (0 if unknown).
        source: Label of the file the block came from, if known.
    """

    def __init__(self, message: str, line: int = 0, source: str | None = None) -> None:
        location = ""
        if source is not None and line:
            location = f"{source}:{line}: "
        elif line:
            location = f"Line {line}: "
        super().__init__(f"{location}{message}")
        self.message = message
        self.line = line
        self.source = source


class NoMatch(ParseError):
    """Raised when no grammar alternative matches a block."""


class ParsePolicy(enum.Enum):
    """What :func:`parse_document` does with a block that does not parse."""

    SKIP = "skip"
    ABORT = "abort"


@dataclass
class ParsedUnit:
    """The parsed entries of one spec unit, ready for assembly.

    Attributes:
        interface: Interface name declared by the unit.
        service: Service name from the unit header.
        object_path: Documented object path from the unit header.
        title: Title of the documentation section.
        source: Label of the originating file.
        line: 1-based line of the unit header.
        entries: Parsed properties, methods and signals in document order.
    """

    interface: str
    service: str | None = None
    object_path: str | None = None
    title: str | None = None
    source: str = "<string>"
    line: int = 0
    entries: list[Entry] = field(default_factory=list)


def parse_property(text: str) -> Property:
    """Parse one property block.

    Args:
        text: Signature line followed by the docs paragraph.

    Returns:
        The parsed Property.

    Raises:
        NoMatch: If neither the flagged nor the unflagged form matches.
    """
    signature, docs, has_docs = _split_block(text)
    match = None
    if has_docs:
        match = _first_match(signature, (_Signature.property_with_flags, _Signature.property_without_flags))
    if match is None:
        raise NoMatch("No property found")

    type_name, name, rest, flags_text = match
    flags = _parse_flags(flags_text) if flags_text is not None else []

    raw_name = f"{name}{rest}"
    optional = "optional" in raw_name
    if optional:
        rest = rest.replace("(optional)", "")
        rest = " ".join(word for word in rest.split() if word != "optional")
    rest = " ".join(rest.split())
    if rest:
        docs = f"{rest} {docs}".strip()
    if optional:
        docs = f"(optional) {docs}".rstrip()

    prop = Property(type=type_name, name=name, flags=flags, docs=docs)
    logger.debug("\t - property %s %s %s", prop.type, prop.name, [f.value for f in prop.flags])
    return prop


def parse_method(text: str) -> Method:
    """Parse one method block.

    Raises:
        NoMatch: If the signature matches neither method form.
    """
    signature, docs, _ = _split_block(text)
    match = _first_match(signature, (_Signature.prefixed_returns, _Signature.trailing_returns))
    if match is None:
        raise NoMatch("No method found")
    name, arguments, returns = match
    method = Method(name=name, arguments=arguments, returns=returns, docs=docs, errors=_declared_errors(docs))
    logger.debug("\t - method %s(%d) -> %s", method.name, len(method.arguments), method.returns)
    return method


def parse_signal(text: str) -> Signal:
    """Parse one signal block.  Return types, if written, are ignored.

    Raises:
        NoMatch: If the signature matches neither signal form.
    """
    signature, docs, _ = _split_block(text)
    match = _first_match(signature, (_Signature.prefixed_returns, _Signature.trailing_returns))
    if match is None:
        raise NoMatch("No signal found")
    name, arguments, _returns = match
    signal = Signal(name=name, arguments=arguments, docs=docs, errors=_declared_errors(docs))
    logger.debug("\t - signal %s(%d)", signal.name, len(signal.arguments))
    return signal


def parse_block(block: SpecBlock) -> Entry:
    """Parse a scanned block with the parser matching its section."""
    if block.kind is SectionKind.PROPERTY:
        return parse_property(block.text)
    if block.kind is SectionKind.METHOD:
        return parse_method(block.text)
    return parse_signal(block.text)


def parse_document(
    text: str,
    *,
    source: str = "<string>",
    policy: ParsePolicy = ParsePolicy.SKIP,
) -> list[ParsedUnit]:
    """Scan and parse one documentation file.

    Args:
        text: Full documentation text.
        source: Label used in units and error messages (usually the file path).
        policy: ``SKIP`` logs and drops blocks that do not parse; ``ABORT``
            raises on the first one.

    Returns:
        One ParsedUnit per spec unit, in document order.

    Raises:
        NoMatch: With *policy* ``ABORT``, for the first unparsable block.
    """
    units: list[ParsedUnit] = []
    for spec_unit in scan(text, source):
        logger.debug("Parsing %s from %s", spec_unit.interface, source)
        parsed = ParsedUnit(
            interface=spec_unit.interface,
            service=spec_unit.service,
            object_path=spec_unit.object_path,
            title=spec_unit.title,
            source=source,
            line=spec_unit.line,
        )
        for block in spec_unit.blocks:
            try:
                parsed.entries.append(parse_block(block))
            except NoMatch as exc:
                located = NoMatch(f"{exc.message} in {spec_unit.interface}", block.line, source)
                if policy is ParsePolicy.ABORT:
                    raise located from exc
                logger.warning("Skipping block: %s", located)
        units.append(parsed)
    return units


# ################
# Implementation
# ################

_FLAG_TOKENS: dict[str, Flag] = {
    "readonly": Flag.READ_ONLY,
    "read-only": Flag.READ_ONLY,
    "readwrite": Flag.READ_WRITE,
    "read-write": Flag.READ_WRITE,
    "experimental": Flag.EXPERIMENTAL,
}

_ACCESS_FLAGS = frozenset({Flag.READ_ONLY, Flag.READ_WRITE})

_ERRORS_MARKER = re.compile(r"^\s*Possible\s+errors?\s*:(.*)$", re.IGNORECASE)

# Error identifiers are dotted names with at least three segments
# (``org.bluez.Error.Failed``), which keeps prose like "e.g." out.
_ERROR_NAME = re.compile(r"[A-Za-z_][\w-]*(?:\.[A-Za-z_][\w-]*){2,}")

_T = TypeVar("_T")


class _Mismatch(Exception):
    """The grammar alternative being tried does not apply."""


def _split_block(text: str) -> tuple[str, str, bool]:
    """Split a block into signature, trimmed docs, and whether docs were present.

    Signature lines with unbalanced parentheses absorb the following lines
    until the parentheses close.
    """
    lines = text.split("\n")
    signature = lines[0].strip()
    index = 1
    while signature.count("(") > signature.count(")") and index < len(lines) and lines[index].strip():
        signature = f"{signature} {lines[index].strip()}"
        index += 1
    docs = textwrap.dedent("\n".join(lines[index:])).strip()
    return signature, docs, index < len(lines)


def _first_match(signature: str, alternatives: tuple[Callable[[_Signature], _T], ...]) -> _T | None:
    """Return the result of the first alternative that accepts *signature*."""
    for alternative in alternatives:
        try:
            return alternative(_Signature(signature))
        except _Mismatch:
            continue
    return None


def _parse_flags(text: str) -> list[Flag]:
    """Map the comma-separated bracket content to flags, dropping unknown tokens."""
    flags: list[Flag] = []
    for token in text.split(","):
        word = token.split("]", 1)[0].strip().lower()
        flag = _FLAG_TOKENS.get(word)
        if flag is None or flag in flags:
            continue
        if flag in _ACCESS_FLAGS and any(f in _ACCESS_FLAGS for f in flags):
            continue
        flags.append(flag)
    return flags


def _declared_errors(docs: str) -> list[str]:
    """Collect the error identifiers listed after a ``Possible errors:`` line."""
    found: set[str] = set()
    collecting = False
    for line in docs.splitlines():
        if not collecting:
            match = _ERRORS_MARKER.match(line)
            if match:
                collecting = True
                found.update(_ERROR_NAME.findall(match.group(1)))
            continue
        names = _ERROR_NAME.findall(line)
        if not line.strip() or not names:
            collecting = False
            continue
        found.update(names)
    return sorted(found)


class _Signature:
    """Recursive-descent reader over the tokens of one signature line."""

    def __init__(self, line: str) -> None:
        self._line = line
        self._tokens = tokenize(line)
        self._pos = 0

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, *types: TokenType) -> Token:
        if not self._check(*types):
            raise _Mismatch()
        return self._advance()

    # ------------------------------------------------------------------
    # Shared productions
    # ------------------------------------------------------------------

    def _type(self, *, allow_void: bool = False) -> str:
        """type := basic | 'array' '{' ... '}'  (| 'void' where allowed)"""
        word = self._expect(TokenType.IDENTIFIER).value
        if word == "array":
            return f"array{{{self._braced()}}}"
        if word in BASIC_TYPES or (allow_void and word == VOID):
            return word
        raise _Mismatch()

    def _braced(self) -> str:
        """Consume a balanced ``{...}`` group and return its normalised content."""
        self._expect(TokenType.LBRACE)
        depth = 1
        parts: list[str] = []
        while depth:
            tok = self._advance()
            if tok.type is TokenType.EOF:
                raise _Mismatch()
            if tok.type is TokenType.LBRACE:
                depth += 1
            elif tok.type is TokenType.RBRACE:
                depth -= 1
                if not depth:
                    break
            parts.append(", " if tok.type is TokenType.COMMA else tok.value)
        return "".join(parts)

    def _name(self) -> Token:
        """name := IDENTIFIER starting with an upper-case letter"""
        tok = self._expect(TokenType.IDENTIFIER)
        if not tok.value[0].isupper():
            raise _Mismatch()
        return tok

    def _type_list(self, *, allow_void: bool = False) -> list[str]:
        types = [self._type(allow_void=allow_void)]
        while self._check(TokenType.COMMA):
            self._advance()
            types.append(self._type())
        if VOID in types:
            if len(types) > 1:
                raise _Mismatch()
            return []
        return types

    def _arguments(self) -> list[Argument]:
        """arguments := '(' [type [name] (',' type [name])*] ')'"""
        self._expect(TokenType.LPAREN)
        arguments: list[Argument] = []
        if self._check(TokenType.RPAREN):
            self._advance()
            return arguments
        while True:
            arg_type = self._type()
            if self._check(TokenType.IDENTIFIER):
                arg_name = self._advance().value
            else:
                arg_name = f"arg{len(arguments)}"
            arguments.append(Argument(type=arg_type, name=arg_name))
            if self._check(TokenType.COMMA):
                self._advance()
                continue
            self._expect(TokenType.RPAREN)
            return arguments

    # ------------------------------------------------------------------
    # Property alternatives
    # ------------------------------------------------------------------

    def property_with_flags(self) -> tuple[str, str, str, str | None]:
        """<type> <Name> ... '[' flags"""
        type_name = self._type()
        name = self._name()
        while not self._check(TokenType.LBRACKET, TokenType.EOF):
            self._advance()
        bracket = self._expect(TokenType.LBRACKET)
        rest = self._line[name.column - 1 + len(name.value) : bracket.column - 1]
        return type_name, name.value, rest, self._line[bracket.column :]

    def property_without_flags(self) -> tuple[str, str, str, str | None]:
        """<type> <Name> ..."""
        type_name = self._type()
        name = self._name()
        return type_name, name.value, self._line[name.column - 1 + len(name.value) :], None

    # ------------------------------------------------------------------
    # Method / signal alternatives
    # ------------------------------------------------------------------

    def prefixed_returns(self) -> tuple[str, list[Argument], list[str]]:
        """<ret> (',' <ret>)* <Name> arguments"""
        returns = self._type_list(allow_void=True)
        name = self._name()
        arguments = self._arguments()
        return name.value, arguments, returns

    def trailing_returns(self) -> tuple[str, list[Argument], list[str]]:
        """<Name> arguments ['->' ('(' <ret>, ... ')' | <ret>, ...)]"""
        name = self._name()
        arguments = self._arguments()
        returns: list[str] = []
        if self._check(TokenType.ARROW):
            self._advance()
            if self._check(TokenType.LPAREN):
                self._advance()
                if not self._check(TokenType.RPAREN):
                    returns = self._type_list(allow_void=True)
                self._expect(TokenType.RPAREN)
            else:
                returns = self._type_list(allow_void=True)
        return name.value, arguments, returns
