# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for signature lines.

Converts a single property, method, or signal signature line into a sequence
of tokens for the block parsers.  The scanner is deliberately permissive:
characters that carry no structure (``:``, ``'``, ``.`` in trailing
annotations) become ``SYMBOL`` tokens instead of errors, so free-form notes
after a signature never prevent the structural part from being read.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the signature lexer."""

    # Brackets and separators
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    ARROW = "->"

    # Words: type keywords, names, flag tokens
    IDENTIFIER = "IDENTIFIER"

    # Any other single non-space character
    SYMBOL = "SYMBOL"

    # End of line
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its position in the signature line.

    Attributes:
        type: The kind of token.
        value: The raw text of the token.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    column: int


class LexerError(Exception):
    """Raised when the scanner is handed more than one line.

    Attributes:
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, column: int) -> None:
        super().__init__(f"Column {column}: {message}")
        self.column = column


def tokenize(line: str) -> list[Token]:
    """Tokenize one signature line.

    Args:
        line: A single line of text without a newline.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: If *line* contains a newline.
    """
    return _Lexer(line).tokenize()


# ################
# Implementation
# ################

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
}


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._pos + 1))
        return self._tokens

    def _current(self) -> str:
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self) -> str:
        if self._pos + 1 < len(self._source):
            return self._source[self._pos + 1]
        return ""

    def _skip_whitespace(self) -> None:
        while self._pos < len(self._source) and self._current() in " \t\r":
            self._pos += 1

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        col = self._pos + 1

        if ch == "\n":
            raise LexerError("Signature must be a single line", col)
        if ch in _SINGLE_CHAR_TOKENS:
            self._pos += 1
            self._tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, col))
        elif ch == "-" and self._peek() == ">":
            self._pos += 2
            self._tokens.append(Token(TokenType.ARROW, "->", col))
        elif ch == "→":
            self._pos += 1
            self._tokens.append(Token(TokenType.ARROW, "->", col))
        elif ch.isalnum() or ch == "_":
            self._scan_identifier(col)
        else:
            self._pos += 1
            self._tokens.append(Token(TokenType.SYMBOL, ch, col))

    def _scan_identifier(self, col: int) -> None:
        """Scan a word; inner hyphens are kept so ``read-write`` stays one token."""
        start = self._pos
        while self._pos < len(self._source):
            ch = self._current()
            if ch.isalnum() or ch == "_":
                self._pos += 1
            elif ch == "-" and self._peek() != ">" and (self._peek().isalnum() or self._peek() == "_"):
                self._pos += 1
            else:
                break
        self._tokens.append(Token(TokenType.IDENTIFIER, self._source[start : self._pos], col))
