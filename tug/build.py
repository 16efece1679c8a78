"""Building an image root filesystem from parsed Tugfile instructions."""

from __future__ import annotations

import os
import shutil
import subprocess
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

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
from tug.registry import pull_and_extract_image

DEFAULT_BASE_DIR = Path("/var/lib/tug")

PathLike = Union[str, "os.PathLike[str]"]
Puller = Callable[[str, Path], None]


@dataclass
class BuildContext:
    """Root filesystem of the image being built and the current working directory."""

    rootfs: Path
    workdir: Path


def _start_context(image: str, base_dir: Path, pull: Puller) -> BuildContext:
    print(f"Pulling base image: {image}")
    if base_dir.exists():
        shutil.rmtree(base_dir)
    ctx_path = base_dir / str(uuid.uuid4())
    ctx_path.mkdir(parents=True)
    pull(image, ctx_path)
    context = BuildContext(rootfs=ctx_path, workdir=ctx_path)
    print(f"Final context path {context.rootfs}")
    return context


def _copy_into(context: BuildContext, src: str, dest: str) -> None:
    src_path = Path(src)
    dest_path = context.workdir / dest
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(src_path, dest_path)
    print(f"Copied {src_path} → {dest_path}")


def build_from_instructions(
    instructions: Iterable[Instruction],
    base_dir: PathLike = DEFAULT_BASE_DIR,
    pull: Puller = pull_and_extract_image,
) -> Optional[BuildContext]:
    """Carry out the instructions in order and return the final build context.

    Every FROM wipes ``base_dir`` and starts a fresh context below it; the
    instructions that need a context are skipped until one exists.
    """
    base = Path(base_dir)
    context: Optional[BuildContext] = None
    for instruction in instructions:
        match instruction:
            case From(image=image):
                context = _start_context(image, base, pull)
            case Run(command=command):
                print(f"run {command}")
                if context is not None:
                    subprocess.run(
                        ["sh", "-c", command],
                        cwd=context.workdir,
                        capture_output=True,
                        check=False,
                    )
            case Copy(src=src, dest=dest):
                print(f"Copying from {src} to {dest}")
                if context is not None:
                    _copy_into(context, src, dest)
            case Cmd(command=command):
                print(f"cmd {command}")
                if context is not None:
                    cmd_path = context.rootfs / "cmd.txt"
                    cmd_path.write_text(f"CMD: {command}")
                    print(f"Saved CMD to: {cmd_path}")
                else:
                    print("CMD used before FROM — no context initialized")
            case Workdir(path=path):
                print(f"Setting workdir: {path}")
                if context is not None:
                    new_path = context.workdir / path
                    new_path.mkdir(parents=True, exist_ok=True)
                    context.workdir = new_path
                    print(f"Set WORKDIR to: {context.workdir}")
                else:
                    print("WORKDIR used before FROM — no context initialized")
            case Expose(port=port):
                print(f"expose {port}")
            case Env(key=key, value=value):
                print(f"env key {key} value {value}")
            case EntryPoint(command=command):
                print(f"entry point, {command}")
            case Add(src=src, dest=dest):
                print(f"src {src}, dest {dest}")
            case _:
                raise TypeError(f"not an instruction: {instruction!r}")
    return context