# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler workflow: documentation files in, assembled API model out.

Files are discovered with include/exclude glob patterns, read, scanned and
parsed one by one, and the resulting units are assembled together so that
interface name conflicts are detected across the whole corpus, not just
within one file.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Sequence
from pathlib import Path

from specbind.compiler.assembler import ConflictError, assemble
from specbind.compiler.parser import ParsedUnit, ParseError, ParsePolicy, parse_document
from specbind.model.entities import Api

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when the compiler encounters any unrecoverable error.

    Covers unreadable sources, parse errors in abort mode, and interface
    conflicts.  The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


def collect_sources(
    source_dir: Path,
    include: Sequence[str] = ("*.txt",),
    exclude: Sequence[str] = (),
) -> list[Path]:
    """Return the documentation files under *source_dir*, sorted by path.

    Args:
        source_dir: Directory searched recursively.
        include: Glob patterns matched against file names; a file must match one.
        exclude: Glob patterns matched against file names; a match drops the file.

    Raises:
        CompilerError: If *source_dir* is not a directory.
    """
    if not source_dir.is_dir():
        raise CompilerError(f"Source directory '{source_dir}' does not exist")
    files = [
        path
        for path in source_dir.rglob("*")
        if path.is_file()
        and any(fnmatch.fnmatch(path.name, pattern) for pattern in include)
        and not any(fnmatch.fnmatch(path.name, pattern) for pattern in exclude)
    ]
    return sorted(files)


def compile_files(
    files: Sequence[Path],
    *,
    policy: ParsePolicy = ParsePolicy.SKIP,
    root: Path | None = None,
) -> Api:
    """Compile documentation files into one API model.

    Args:
        files: Documentation files to read.
        policy: Handling of blocks that match no grammar alternative.
        root: When given, source labels are paths relative to *root*, which
            keeps them independent of the checkout location.

    Returns:
        The assembled :class:`Api`.

    Raises:
        CompilerError: On unreadable files, parse errors (``ABORT`` policy),
            or conflicting interface declarations.
    """
    units: list[ParsedUnit] = []
    for path in files:
        label = _label(path, root)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CompilerError(f"Cannot read source file '{path}': {exc}") from exc

        try:
            parsed = parse_document(text, source=label, policy=policy)
        except ParseError as exc:
            raise CompilerError(f"Parse error in '{label}': {exc}") from exc

        if not parsed:
            logger.info("No interfaces found in %s", label)
        units.extend(parsed)

    try:
        api = assemble(units)
    except ConflictError as exc:
        raise CompilerError(f"Conflicting declarations: {exc}") from exc

    logger.info("Compiled %d interface(s) from %d file(s)", len(api.interfaces), len(files))
    return api


def compile_directory(
    source_dir: Path,
    *,
    include: Sequence[str] = ("*.txt",),
    exclude: Sequence[str] = (),
    policy: ParsePolicy = ParsePolicy.SKIP,
) -> Api:
    """Collect and compile every matching file under *source_dir*."""
    files = collect_sources(source_dir, include, exclude)
    return compile_files(files, policy=policy, root=source_dir)


# ################
# Implementation
# ################


def _label(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return str(path)
