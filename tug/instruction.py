"""Tugfile instructions and their tagged JSON representation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any, Union

MAX_PORT = 65535


@dataclass(frozen=True)
class From:
    """Base image to build on."""

    image: str


@dataclass(frozen=True)
class Run:
    """Shell command executed during the build."""

    command: str


@dataclass(frozen=True)
class Copy:
    """Copy a file from the build context into the image."""

    src: str
    dest: str


@dataclass(frozen=True)
class Cmd:
    """Default command of the image."""

    command: str


@dataclass(frozen=True)
class Workdir:
    """Working directory for the following instructions."""

    path: str


@dataclass(frozen=True)
class Expose:
    """Port the container listens on."""

    port: int


@dataclass(frozen=True)
class Env:
    """Environment variable."""

    key: str
    value: str


@dataclass(frozen=True)
class EntryPoint:
    """Entry point of the image."""

    command: str


@dataclass(frozen=True)
class Add:
    """Add a file to the image."""

    src: str
    dest: str


Instruction = Union[From, Run, Copy, Cmd, Workdir, Expose, Env, EntryPoint, Add]

_VARIANTS: dict[str, type] = {
    cls.__name__: cls
    for cls in (From, Run, Copy, Cmd, Workdir, Expose, Env, EntryPoint, Add)
}


def _field_names(cls: type) -> list[str]:
    return [field.name for field in fields(cls)]


def _check_value(cls: type, name: str, value: Any) -> Any:
    if cls is Expose:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{cls.__name__}.{name} must be an integer")
        if not 0 <= value <= MAX_PORT:
            raise ValueError(f"port {value} is out of range 0..{MAX_PORT}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"{cls.__name__}.{name} must be a string")
    return value


def to_serde(instruction: Instruction) -> dict[str, Any]:
    """Return the externally tagged form, e.g. ``{"From": "alpine"}``."""
    cls = type(instruction)
    if _VARIANTS.get(cls.__name__) is not cls:
        raise TypeError(f"not an instruction: {instruction!r}")
    names = _field_names(cls)
    if len(names) == 1:
        return {cls.__name__: getattr(instruction, names[0])}
    return {cls.__name__: {name: getattr(instruction, name) for name in names}}


def from_serde(data: Any) -> Instruction:
    """Build an instruction from its externally tagged form."""
    if not isinstance(data, Mapping) or len(data) != 1:
        raise ValueError("expected a mapping with exactly one variant tag")
    ((tag, payload),) = data.items()
    cls = _VARIANTS.get(tag)
    if cls is None:
        raise ValueError(f"unknown instruction variant {tag!r}")
    names = _field_names(cls)
    if len(names) == 1:
        return cls(_check_value(cls, names[0], payload))
    if isinstance(payload, Mapping):
        missing = [name for name in names if name not in payload]
        if missing:
            raise ValueError(f"{tag} is missing field {missing[0]!r}")
        values = [payload[name] for name in names]
    elif isinstance(payload, Sequence) and not isinstance(payload, str):
        if len(payload) != len(names):
            raise ValueError(f"{tag} expects {len(names)} elements")
        values = list(payload)
    else:
        raise ValueError(f"{tag} expects a mapping of fields")
    return cls(*(_check_value(cls, name, value) for name, value in zip(names, values)))