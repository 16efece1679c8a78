"""Parser for Tugfile text."""

from __future__ import annotations

import re
from typing import Callable, Optional

from tug.instruction import (
    Add,
    Cmd,
    Copy,
    EntryPoint,
    Env,
    Expose,
    From,
    Instruction,
    Run,
    Workdir,
)

_PORT = re.compile(r"\+?[0-9]+")
_MAX_PORT = 65535


def _pair(rest: str, cls: type) -> Optional[Instruction]:
    parts = rest.split()
    if len(parts) != 2:
        return None
    return cls(parts[0], parts[1])


def _expose(rest: str) -> Optional[Instruction]:
    if not _PORT.fullmatch(rest):
        return None
    port = int(rest)
    return Expose(port) if port <= _MAX_PORT else None


def _env(rest: str) -> Optional[Instruction]:
    key, sep, value = rest.partition("=")
    if not sep:
        return None
    return Env(key.strip(), value.strip())


_HANDLERS: dict[str, Callable[[str], Optional[Instruction]]] = {
    "FROM ": From,
    "RUN ": Run,
    "COPY ": lambda rest: _pair(rest, Copy),
    "CMD ": Cmd,
    "WORKDIR ": Workdir,
    "EXPOSE ": _expose,
    "ENV ": _env,
    "ENTRYPOINT ": EntryPoint,
    "ADD ": lambda rest: _pair(rest, Add),
}


def parse_line(line: str) -> Optional[Instruction]:
    """Parse one Tugfile line; return None when it holds no valid instruction."""
    trimmed = line.strip()
    for keyword, handler in _HANDLERS.items():
        if trimmed.startswith(keyword):
            return handler(trimmed[len(keyword):])
    return None


def parse_file(text: str) -> list[Instruction]:
    """Parse every line of a Tugfile, skipping lines that are not instructions."""
    parsed = (parse_line(line) for line in text.split("\n"))
    return [instruction for instruction in parsed if instruction is not None]