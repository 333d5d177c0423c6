# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for interface documentation: scanning, parsing, and assembly."""

from specbind.compiler.artifact import ARTIFACT_SUFFIX, deserialize, read_artifact, serialize, write_artifact
from specbind.compiler.assembler import ConflictError, assemble, assemble_interface
from specbind.compiler.build import CompilerError, collect_sources, compile_directory, compile_files
from specbind.compiler.parser import (
    NoMatch,
    ParsedUnit,
    ParseError,
    ParsePolicy,
    parse_document,
    parse_method,
    parse_property,
    parse_signal,
)
from specbind.compiler.scanner import SectionKind, SpecBlock, SpecUnit, scan

__all__ = [
    "scan",
    "SectionKind",
    "SpecBlock",
    "SpecUnit",
    "parse_property",
    "parse_method",
    "parse_signal",
    "parse_document",
    "ParsedUnit",
    "ParsePolicy",
    "ParseError",
    "NoMatch",
    "assemble",
    "assemble_interface",
    "ConflictError",
    "serialize",
    "deserialize",
    "write_artifact",
    "read_artifact",
    "ARTIFACT_SUFFIX",
    "collect_sources",
    "compile_files",
    "compile_directory",
    "CompilerError",
]
