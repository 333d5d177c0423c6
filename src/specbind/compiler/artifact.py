# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of the assembled API model.

The model is stored as indented JSON with sorted keys so that a snapshot kept
in version control only changes when the documentation does.  The format is
versioned so future schema changes can be detected.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from specbind.model.entities import Api

# ###############
# Public Interface
# ###############

ARTIFACT_FORMAT_VERSION = "1"

ARTIFACT_SUFFIX = ".api.json"


def serialize(api: Api) -> str:
    """Serialize an Api to a stable JSON string (trailing newline included)."""
    payload = {"v": ARTIFACT_FORMAT_VERSION, **api.model_dump(mode="json")}
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def deserialize(data: str) -> Api:
    """Deserialize an Api from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize`.

    Returns:
        The reconstructed :class:`Api` model.

    Raises:
        ValueError: If the artifact format version is not recognised or the
            payload does not describe a valid model.
    """
    obj = json.loads(data)
    version = obj.pop("v", None)
    if version != ARTIFACT_FORMAT_VERSION:
        raise ValueError(f"Unsupported artifact format version: {version!r}")
    try:
        return Api.model_validate(obj)
    except ValidationError as exc:
        raise ValueError(f"Invalid API artifact: {exc}") from exc


def write_artifact(api: Api, path: Path) -> None:
    """Write the model to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(api), encoding="utf-8")


def read_artifact(path: Path) -> Api:
    """Read and deserialize a model artifact from *path*."""
    return deserialize(path.read_text(encoding="utf-8"))
