"""The tugd daemon: accepts requests over a Unix socket and runs builds."""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
import socket
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional, Union

from tug.build import build_from_instructions
from tug.cli import DEFAULT_SOCKET, TugRequest
from tug.instruction import Instruction
from tug.registry import pull_and_extract_ubuntu_image

_BUFFER_SIZE = 8192
_TRAILER = b"OK from tugd"

Builder = Callable[[list[Instruction]], object]


def handle_request(data: bytes, build: Builder = build_from_instructions) -> bytes:
    """Answer one raw request with the bytes the daemon writes back."""
    text = data.decode("utf-8", errors="replace")
    print(f"Received: {text}")
    try:
        request = TugRequest.from_json(text)
    except ValueError as exc:
        print(f"invalid request: {exc}", file=sys.stderr)
        return b"invalid request" + _TRAILER
    reply = b""
    if request.command == "build":
        if request.instructions is not None:
            build(request.instructions)
            reply = b"Build complete"
    else:
        reply = b"Unknown command"
    return reply + _TRAILER


def create_container(image: str, command: str) -> str:
    """Create a container root filesystem and pull the ubuntu image into it."""
    print(f"creating container from image {image} and command {command}")
    container_id = str(uuid.uuid4())
    rootfs = Path(os.environ["HOME"]) / "tug" / "containers" / container_id / "rootfs"
    rootfs.mkdir(parents=True, exist_ok=True)
    pull_and_extract_ubuntu_image(container_id)
    return "container created"


def serve(socket_path: Union[str, "os.PathLike[str]"] = DEFAULT_SOCKET) -> None:
    """Listen on the Unix socket and answer requests until interrupted."""
    path = Path(socket_path)
    with contextlib.suppress(FileNotFoundError):
        path.unlink()
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as listener:
        listener.bind(os.fspath(path))
        listener.listen()
        print(f"tugd running at {path}")
        while True:
            try:
                connection, _ = listener.accept()
            except OSError as exc:
                print(f"Socket error: {exc}", file=sys.stderr)
                continue
            with connection:
                data = connection.recv(_BUFFER_SIZE)
                reply = handle_request(data)
                try:
                    connection.sendall(reply)
                except OSError as exc:
                    print(f"Socket error: {exc}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tugd daemon."""
    parser = argparse.ArgumentParser(prog="tugd", description="Container build daemon")
    parser.add_argument("--socket", default=DEFAULT_SOCKET, help="path of the socket to listen on")
    args = parser.parse_args(argv)
    try:
        serve(args.socket)
    except KeyboardInterrupt:
        pass
    return 0