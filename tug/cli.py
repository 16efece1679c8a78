"""The tug command line client."""

from __future__ import annotations

import argparse
import json
import os
import socket
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from tug.instruction import Instruction, from_serde, to_serde
from tug.parser import parse_file

DEFAULT_SOCKET = "/run/tugd.sock"
TUGFILE = "Tugfile"


@dataclass
class TugRequest:
    """A request sent from the client to the daemon."""

    command: str
    instructions: Optional[list[Instruction]] = None
    image: Optional[str] = None

    def to_json(self) -> str:
        """Serialize to compact JSON."""
        payload: dict[str, Any] = {
            "command": self.command,
            "instructions": None
            if self.instructions is None
            else [to_serde(instruction) for instruction in self.instructions],
            "image": self.image,
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "TugRequest":
        """Deserialize from JSON; raise ValueError on a malformed request."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("request must be a JSON object")
        command = data.get("command")
        if not isinstance(command, str):
            raise ValueError("request has no command string")
        raw_instructions = data.get("instructions")
        if raw_instructions is None:
            instructions = None
        elif isinstance(raw_instructions, list):
            instructions = [from_serde(item) for item in raw_instructions]
        else:
            raise ValueError("instructions must be a list")
        image = data.get("image")
        if image is not None and not isinstance(image, str):
            raise ValueError("image must be a string")
        return cls(command=command, instructions=instructions, image=image)


def send_request(request: TugRequest, socket_path: Union[str, "os.PathLike[str]"] = DEFAULT_SOCKET) -> None:
    """Send a request to the daemon over its Unix socket."""
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as connection:
        connection.connect(os.fspath(socket_path))
        connection.sendall(request.to_json().encode("utf-8"))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tug", description="Container builder")
    parser.add_argument(
        "--socket", default=DEFAULT_SOCKET, help="path of the daemon socket"
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("build", help="build an image from the Tugfile in the current directory")
    return parser


def _build(socket_path: str) -> None:
    try:
        contents = Path(TUGFILE).read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Failed to read Tugfile: {exc}") from exc
    instructions = parse_file(contents)
    print(f"instructions {instructions}")
    request = TugRequest(command="build", instructions=instructions, image=None)
    try:
        send_request(request, socket_path)
    except OSError as exc:
        raise SystemExit(f"connection fail: {exc}") from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tug client."""
    args = _build_parser().parse_args(argv)
    print(f"cli command {args.command.capitalize()}")
    if args.command == "build":
        _build(args.socket)
    return 0