# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of one interface model into client module source."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from specbind.generator.naming import (
    class_name,
    field_type,
    python_type,
    safe_identifier,
    snake_case,
    unique_name,
)
from specbind.model.entities import Interface, Method
from specbind.props.record import PropertiesRecord
from specbind.runtime.client import RESERVED_NAMES

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class ShortIdConvention:
    """Documented object path that identifies an object by a short id.

    An interface documented at *pattern* gets a ``from_<argument>``
    constructor building the path from *path*, where ``{id}`` stands for
    the argument.
    """

    pattern: str = "[variable prefix]/{hci0,hci1,...}"
    path: str = "/org/bluez/{id}"
    argument: str = "adapter_id"
    default: str = "hci0"


@dataclass(frozen=True)
class RenderOptions:
    """Options that shape generated client code.

    Attributes:
        short_id: Short-identifier path convention, or None to disable it.
        hierarchy_roots: Path suffixes of objects that root an object hierarchy.
    """

    short_id: ShortIdConvention | None = field(default_factory=ShortIdConvention)
    hierarchy_roots: tuple[str, ...] = ("dev_XX_XX_XX_XX_XX_XX",)


def render_interface(interface: Interface, options: RenderOptions | None = None) -> str:
    """Render the client module for *interface*.

    Raises:
        jinja2.TemplateError: If the template fails to render.
    """
    options = options or RenderOptions()
    template = _environment().get_template("client.py.j2")
    text = template.render(client=_client_view(interface, options))
    return _normalize(text)


# ################
# Implementation
# ################

_env: Environment | None = None

_FIXED_PATH_RE = re.compile(r"^/[A-Za-z0-9_/]*$")

# Names a record field cannot take without shadowing the record base.
_RECORD_NAMES = frozenset(name for name in dir(PropertiesRecord) if not name.startswith("__"))


@dataclass
class _FieldView:
    name: str
    annotation: str
    args: str
    docs: str


@dataclass
class _AccessorView:
    getter: str
    setter: str | None
    prop: str
    annotation: str


@dataclass
class _ArgView:
    name: str
    annotation: str


@dataclass
class _MethodView:
    name: str
    remote: str
    args: list[_ArgView]
    returns: list[str]
    result_names: list[str]
    return_annotation: str
    docs: str


@dataclass
class _ShortIdView:
    method: str
    argument: str
    default: str
    path: str


@dataclass
class _ClientView:
    interface: str
    service: str | None
    source: str | None
    title: str | None
    docs: str
    object_path: str | None
    class_name: str
    properties_class: str
    default_path: str | None
    short_id: _ShortIdView | None
    hierarchy_root: bool
    fields: list[_FieldView]
    accessors: list[_AccessorView]
    methods: list[_MethodView]
    signals: list[str]


def _environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        _env.filters["docstring"] = _docstring
    return _env


def _docstring(text: str) -> str:
    """Escape *text* for use inside a triple-quoted docstring."""
    escaped = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if escaped.endswith('"'):
        escaped = escaped[:-1] + '\\"'
    return escaped


def _normalize(text: str) -> str:
    lines = [line.rstrip() for line in text.splitlines()]
    collapsed = re.sub(r"\n{4,}", "\n\n\n", "\n".join(lines))
    return collapsed.strip("\n") + "\n"


def _client_view(interface: Interface, options: RenderOptions) -> _ClientView:
    cls = class_name(interface.short_name)
    object_path = (interface.object_path or "").strip() or None

    default_path = object_path if object_path and _FIXED_PATH_RE.match(object_path) else None
    short_id = None
    if options.short_id is not None and object_path == options.short_id.pattern:
        argument = safe_identifier(options.short_id.argument)
        short_id = _ShortIdView(
            method=f"from_{argument}",
            argument=argument,
            default=options.short_id.default,
            path=options.short_id.path.replace("{id}", "{" + argument + "}"),
        )
    hierarchy_root = default_path is not None or short_id is not None
    if object_path and any(object_path.endswith(suffix) for suffix in options.hierarchy_roots):
        hierarchy_root = True

    taken = set(RESERVED_NAMES)
    if short_id is not None:
        taken.add(short_id.method)

    fields: list[_FieldView] = []
    accessors: list[_AccessorView] = []
    for prop in interface.properties.values():
        if not prop.name.isidentifier() or prop.name in _RECORD_NAMES:
            logger.warning("%s: property '%s' has no usable field name, skipped", interface.name, prop.name)
            continue
        declared = field_type(prop.type)
        args = ["writable=True"] if prop.writable else []
        if declared.factory is not None:
            args.append(f"default_factory={declared.factory}")
        else:
            args.append(f"default={declared.default}")
        fields.append(_FieldView(prop.name, declared.annotation, ", ".join(args), prop.docs))

        stem = snake_case(prop.name) or prop.name.lower()
        accessors.append(
            _AccessorView(
                getter=unique_name(safe_identifier(f"get_{stem}"), taken),
                setter=unique_name(safe_identifier(f"set_{stem}"), taken) if prop.writable else None,
                prop=prop.name,
                annotation=python_type(prop.type),
            )
        )

    methods = [_method_view(method, taken) for method in interface.methods]
    return _ClientView(
        interface=interface.name,
        service=interface.service,
        source=interface.source,
        title=interface.title,
        docs=interface.docs,
        object_path=object_path,
        class_name=cls,
        properties_class=f"{cls}Properties",
        default_path=default_path,
        short_id=short_id,
        hierarchy_root=hierarchy_root,
        fields=fields,
        accessors=accessors,
        methods=methods,
        signals=[signal.name for signal in interface.signals],
    )


def _method_view(method: Method, taken: set[str]) -> _MethodView:
    arg_names: set[str] = set()
    args = [
        _ArgView(unique_name(safe_identifier(snake_case(arg.name) or arg.name), arg_names), python_type(arg.type))
        for arg in method.arguments
    ]
    returns = [python_type(ret) for ret in method.returns]
    if not returns:
        return_annotation = "None"
    elif len(returns) == 1:
        return_annotation = returns[0]
    else:
        return_annotation = f"tuple[{', '.join(returns)}]"
    return _MethodView(
        name=unique_name(safe_identifier(snake_case(method.name) or method.name.lower()), taken),
        remote=method.name,
        args=args,
        returns=returns,
        result_names=[f"ret{i}" for i in range(len(returns))],
        return_annotation=return_annotation,
        docs=method.docs,
    )
