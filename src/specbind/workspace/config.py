# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the specbind workspace configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = "specbind.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


@dataclass
class ShortIdConfig:
    """Short-identifier object path convention.

    Attributes:
        pattern: Documented object path that selects the convention.
        path: Concrete path template; ``{id}`` stands for the identifier.
        argument: Name of the identifier argument of the generated constructor.
        default: Default identifier.
    """

    pattern: str = "[variable prefix]/{hci0,hci1,...}"
    path: str = "/org/bluez/{id}"
    argument: str = "adapter_id"
    default: str = "hci0"


@dataclass
class WorkspaceConfig:
    """The parsed configuration for a specbind workspace.

    Attributes:
        source_directory: Directory of documentation files, relative to the workspace root.
        output_directory: Directory that receives generated clients, relative to the workspace root.
        include: File name globs selecting documentation files.
        exclude: File name globs dropping documentation files.
        strict: Abort on blocks that match no grammar alternative.
        api_artifact: Optional JSON model artifact path, relative to the output directory.
        short_id: Short-identifier path convention, or None when disabled.
        hierarchy_roots: Object path suffixes of objects that root a hierarchy.
    """

    source_directory: str
    output_directory: str
    include: list[str] = field(default_factory=lambda: ["*.txt"])
    exclude: list[str] = field(default_factory=list)
    strict: bool = False
    api_artifact: str | None = None
    short_id: ShortIdConfig | None = field(default_factory=ShortIdConfig)
    hierarchy_roots: list[str] = field(default_factory=lambda: ["dev_XX_XX_XX_XX_XX_XX"])


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse a specbind workspace configuration file.

    Args:
        path: Path to the ``specbind.yaml`` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    return parse_workspace_config(text, source_label=str(path))


def parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse workspace config YAML text into a WorkspaceConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        WorkspaceConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: workspace config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s) {', '.join(repr(k) for k in unknown)}")

    config = WorkspaceConfig(
        source_directory=_require_string(data, "source-directory", source_label),
        output_directory=_require_string(data, "output-directory", source_label),
    )
    if "include" in data:
        config.include = _string_list(data, "include", source_label)
        if not config.include:
            raise WorkspaceConfigError(f"{source_label}: 'include' must not be empty")
    if "exclude" in data:
        config.exclude = _string_list(data, "exclude", source_label)
    if "strict" in data:
        if not isinstance(data["strict"], bool):
            raise WorkspaceConfigError(f"{source_label}: 'strict' must be true or false")
        config.strict = data["strict"]
    if data.get("api-artifact") is not None:
        config.api_artifact = _require_string(data, "api-artifact", source_label)
    if "short-id" in data:
        config.short_id = _parse_short_id(data["short-id"], f"{source_label}: short-id")
    if "hierarchy-roots" in data:
        config.hierarchy_roots = _string_list(data, "hierarchy-roots", source_label)
    return config


# ################
# Implementation
# ################

_KNOWN_KEYS = frozenset(
    {
        "source-directory",
        "output-directory",
        "include",
        "exclude",
        "strict",
        "api-artifact",
        "short-id",
        "hierarchy-roots",
    }
)


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising WorkspaceConfigError if missing."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _string_list(mapping: dict[str, object], key: str, source_label: str) -> list[str]:
    value = mapping[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a list of strings")
    return list(value)


def _parse_short_id(entry: object, location: str) -> ShortIdConfig | None:
    """Parse the ``short-id`` mapping; ``null`` or ``false`` disables the convention."""
    if entry is None or entry is False:
        return None
    if not isinstance(entry, dict):
        raise WorkspaceConfigError(f"{location} must be a YAML mapping")

    defaults = ShortIdConfig()
    config = ShortIdConfig(
        pattern=_require_string(entry, "pattern", location) if "pattern" in entry else defaults.pattern,
        path=_require_string(entry, "path", location) if "path" in entry else defaults.path,
        argument=_require_string(entry, "argument", location) if "argument" in entry else defaults.argument,
        default=_require_string(entry, "default", location) if "default" in entry else defaults.default,
    )
    if "{id}" not in config.path:
        raise WorkspaceConfigError(f"{location}: 'path' must contain the '{{id}}' placeholder")
    if not config.argument.isidentifier():
        raise WorkspaceConfigError(f"{location}: 'argument' must be a valid identifier")
    return config
