# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Batch generation of client modules for an assembled API model.

Each interface becomes one module whose path depends only on the interface
name.  Files whose content would not change are left untouched, so running
the generator twice on the same model writes nothing the second time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from jinja2 import TemplateError

from specbind.compiler.artifact import serialize
from specbind.generator.naming import module_path
from specbind.generator.render import RenderOptions, ShortIdConvention, render_interface
from specbind.model.entities import Api

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class GenerationError(Exception):
    """Raised when client generation fails.

    Files written before the failure are kept.
    """


@dataclass(frozen=True)
class GeneratorOptions:
    """Options for :func:`generate`.

    Attributes:
        short_id: Short-identifier path convention, or None to disable it.
        hierarchy_roots: Path suffixes of objects that root an object hierarchy.
        artifact: When set, the model is also written as a JSON artifact at
            this path, relative to the destination directory unless absolute.
    """

    short_id: ShortIdConvention | None = field(default_factory=ShortIdConvention)
    hierarchy_roots: tuple[str, ...] = ("dev_XX_XX_XX_XX_XX_XX",)
    artifact: Path | None = None


@dataclass
class GenerationResult:
    """Files touched by one :func:`generate` run.

    Attributes:
        written: Files created or rewritten.
        unchanged: Files whose content was already up to date.
    """

    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)


def output_paths(api: Api) -> dict[str, PurePosixPath]:
    """Map each interface name to its module path relative to the destination.

    Raises:
        GenerationError: If two interfaces map to the same module path.
    """
    paths: dict[str, PurePosixPath] = {}
    owners: dict[PurePosixPath, str] = {}
    for interface in api.interfaces:
        path = module_path(interface.name)
        if path in owners:
            raise GenerationError(
                f"Interfaces '{owners[path]}' and '{interface.name}' both map to '{path}'"
            )
        owners[path] = interface.name
        paths[interface.name] = path
    return paths


def generate(api: Api, destination: Path, options: GeneratorOptions | None = None) -> GenerationResult:
    """Write one client module per interface of *api* below *destination*.

    Args:
        api: The assembled model.
        destination: Root directory of the generated package tree.
        options: Generation options; defaults apply when omitted.

    Returns:
        The files written and the files left unchanged.

    Raises:
        GenerationError: On an output-path collision (before anything is
            written), on a rendering failure, or when a file cannot be written.
    """
    options = options or GeneratorOptions()
    render_options = RenderOptions(short_id=options.short_id, hierarchy_roots=options.hierarchy_roots)
    paths = output_paths(api)
    result = GenerationResult()

    for interface in api.interfaces:
        relative = paths[interface.name]
        try:
            text = render_interface(interface, render_options)
        except TemplateError as exc:
            raise GenerationError(f"Cannot render {interface.name}: {exc}") from exc

        target = destination.joinpath(*relative.parts)
        _ensure_packages(destination, target.parent, result)
        _write_if_changed(target, text, result)
        logger.debug("Generated %s -> %s", interface.name, relative)

    if options.artifact is not None:
        artifact = options.artifact if options.artifact.is_absolute() else destination / options.artifact
        artifact.parent.mkdir(parents=True, exist_ok=True)
        _write_if_changed(artifact, serialize(api), result)

    logger.info(
        "Generation finished: %d file(s) written, %d unchanged",
        len(result.written),
        len(result.unchanged),
    )
    return result


# ################
# Implementation
# ################


def _ensure_packages(destination: Path, directory: Path, result: GenerationResult) -> None:
    """Create *directory* and an empty ``__init__.py`` in it and every parent below *destination*."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GenerationError(f"Cannot create directory '{directory}': {exc}") from exc
    current = directory
    while current != destination and destination in current.parents:
        init = current / "__init__.py"
        if not init.exists():
            _write_if_changed(init, "", result)
        current = current.parent


def _write_if_changed(path: Path, text: str, result: GenerationResult) -> None:
    try:
        if path.exists() and path.read_text(encoding="utf-8") == text:
            result.unchanged.append(path)
            return
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise GenerationError(f"Cannot write '{path}': {exc}") from exc
    result.written.append(path)
