# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the specbind command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from specbind.cli.logging import parse_log_level, setup_logging
from specbind.compiler.build import CompilerError, collect_sources, compile_files
from specbind.compiler.parser import ParsePolicy
from specbind.generator.generate import GenerationError, GeneratorOptions, generate
from specbind.generator.render import ShortIdConvention
from specbind.model.entities import Api
from specbind.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the specbind CLI."""
    parser = argparse.ArgumentParser(
        prog="specbind",
        description="specbind: typed client generator for interface documentation",
    )
    parser.add_argument(
        "--log-level",
        type=_log_level,
        default=None,
        metavar="LEVEL",
        help="Diagnostic log level (default: $SPECBIND_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a new specbind workspace",
        description=f"Write a starter {CONFIG_FILE_NAME} into a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize the workspace in (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check that every documentation block parses",
        description="Parse all documentation files and fail on the first block that matches no grammar.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the specbind workspace (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate client modules",
        description="Compile the documentation files and write one client module per interface.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the specbind workspace (default: current directory)",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_STARTER_CONFIG = (
    "# specbind workspace configuration\n"
    "source-directory: doc\n"
    "output-directory: generated\n"
    "include:\n"
    '  - "*.txt"\n'
    "exclude: []\n"
    "strict: false\n"
)


def _log_level(value: str) -> int:
    level = parse_log_level(value)
    if level is None:
        raise argparse.ArgumentTypeError(f"invalid log level: {value!r}")
    return level


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        print(f"Error: workspace already exists at '{config_file}'.", file=sys.stderr)
        return 1

    config_file.write_text(_STARTER_CONFIG, encoding="utf-8")
    print(f"Initialized specbind workspace at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    loaded = _load_workspace(Path(args.directory))
    if loaded is None:
        return 1
    directory, config = loaded

    source_dir = directory / config.source_directory
    try:
        files = collect_sources(source_dir, config.include, config.exclude)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if not files:
        print("No documentation files found in the workspace.")
        return 0

    print(f"Checking {len(files)} documentation file(s)...")
    try:
        api = compile_files(files, policy=ParsePolicy.ABORT, root=source_dir)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(_summary(api))
    print("No issues found.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    loaded = _load_workspace(Path(args.directory))
    if loaded is None:
        return 1
    directory, config = loaded

    source_dir = directory / config.source_directory
    policy = ParsePolicy.ABORT if config.strict else ParsePolicy.SKIP
    try:
        files = collect_sources(source_dir, config.include, config.exclude)
        api = compile_files(files, policy=policy, root=source_dir)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output_dir = directory / config.output_directory
    try:
        result = generate(api, output_dir, _generator_options(config))
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(_summary(api))
    print(
        f"Generated clients in '{output_dir}': "
        f"{len(result.written)} file(s) written, {len(result.unchanged)} unchanged."
    )
    return 0


def _load_workspace(directory: Path) -> tuple[Path, WorkspaceConfig] | None:
    """Resolve *directory* and load its configuration, printing an error on failure."""
    directory = directory.resolve()
    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    config_file = directory / CONFIG_FILE_NAME
    if not config_file.exists():
        print(
            f"Error: no specbind workspace found at '{directory}'. "
            "Run 'specbind init' to initialize a workspace.",
            file=sys.stderr,
        )
        return None

    try:
        config = load_workspace_config(config_file)
    except WorkspaceConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None
    logger.debug("Loaded workspace config from %s", config_file)
    return directory, config


def _generator_options(config: WorkspaceConfig) -> GeneratorOptions:
    short_id = None
    if config.short_id is not None:
        short_id = ShortIdConvention(
            pattern=config.short_id.pattern,
            path=config.short_id.path,
            argument=config.short_id.argument,
            default=config.short_id.default,
        )
    return GeneratorOptions(
        short_id=short_id,
        hierarchy_roots=tuple(config.hierarchy_roots),
        artifact=Path(config.api_artifact) if config.api_artifact else None,
    )


def _summary(api: Api) -> str:
    properties = sum(len(i.properties) for i in api.interfaces)
    methods = sum(len(i.methods) for i in api.interfaces)
    signals = sum(len(i.signals) for i in api.interfaces)
    return (
        f"Found {len(api.interfaces)} interface(s): "
        f"{properties} propert{'y' if properties == 1 else 'ies'}, "
        f"{methods} method(s), {signals} signal(s)."
    )
