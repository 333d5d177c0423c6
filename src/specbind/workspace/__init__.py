# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for specbind."""

from specbind.workspace.config import (
    CONFIG_FILE_NAME,
    ShortIdConfig,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
    parse_workspace_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ShortIdConfig",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "load_workspace_config",
    "parse_workspace_config",
]
