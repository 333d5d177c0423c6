# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Client code generation from the interface model."""

from specbind.generator.generate import (
    GenerationError,
    GenerationResult,
    GeneratorOptions,
    generate,
    output_paths,
)
from specbind.generator.naming import module_path, snake_case
from specbind.generator.render import RenderOptions, ShortIdConvention, render_interface

__all__ = [
    "generate",
    "output_paths",
    "GeneratorOptions",
    "GenerationResult",
    "GenerationError",
    "RenderOptions",
    "ShortIdConvention",
    "render_interface",
    "module_path",
    "snake_case",
]
