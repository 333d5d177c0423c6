# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface model entities: properties, methods, signals, interfaces."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, field_validator, model_validator
from pydantic import Field as _Field

from specbind.model.types import Flag

# ###############
# Public Interface
# ###############


class Argument(BaseModel):
    """One positional argument of a method or signal."""

    type: str
    name: str


class Property(BaseModel):
    """A documented remote property."""

    kind: Literal["property"] = "property"
    type: str
    name: str
    flags: list[Flag] = _Field(default_factory=list)
    docs: str = ""

    @field_validator("name")
    @classmethod
    def _name_has_no_whitespace(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value):
            raise ValueError(f"property name must be a single word, got {value!r}")
        if "(optional)" in value:
            raise ValueError(f"property name must not carry the optional marker, got {value!r}")
        return value

    @model_validator(mode="after")
    def _single_access_flag(self) -> Property:
        if Flag.READ_ONLY in self.flags and Flag.READ_WRITE in self.flags:
            raise ValueError(f"property {self.name!r} cannot be both readonly and readwrite")
        return self

    @property
    def writable(self) -> bool:
        """True if the property may be set remotely."""
        return Flag.READ_WRITE in self.flags

    @property
    def experimental(self) -> bool:
        return Flag.EXPERIMENTAL in self.flags


class Method(BaseModel):
    """A documented remote method.

    Argument and return order is the wire order and must not be changed.
    """

    kind: Literal["method"] = "method"
    name: str
    arguments: list[Argument] = _Field(default_factory=list)
    returns: list[str] = _Field(default_factory=list)
    docs: str = ""
    errors: list[str] = _Field(default_factory=list)


class Signal(BaseModel):
    """A documented signal emitted by the remote object."""

    kind: Literal["signal"] = "signal"
    name: str
    arguments: list[Argument] = _Field(default_factory=list)
    docs: str = ""
    errors: list[str] = _Field(default_factory=list)


# A parsed block entry; the ``kind`` discriminator keeps deserialization unambiguous.
Entry = Annotated[Property | Method | Signal, _Field(discriminator="kind")]


class Interface(BaseModel):
    """The assembled model of one protocol interface."""

    name: str
    service: str | None = None
    object_path: str | None = None
    title: str | None = None
    docs: str = ""
    properties: dict[str, Property] = _Field(default_factory=dict)
    methods: list[Method] = _Field(default_factory=list)
    signals: list[Signal] = _Field(default_factory=list)
    source: str | None = None

    @property
    def short_name(self) -> str:
        """Last dotted segment of the interface name (``org.bluez.Adapter1`` → ``Adapter1``)."""
        return self.name.rsplit(".", 1)[-1]


class Api(BaseModel):
    """All interfaces assembled from one documentation corpus, sorted by name."""

    interfaces: list[Interface] = _Field(default_factory=list)

    def get(self, name: str) -> Interface | None:
        """Return the interface called *name*, or None."""
        for iface in self.interfaces:
            if iface.name == name:
                return iface
        return None

    def names(self) -> list[str]:
        return [iface.name for iface in self.interfaces]
