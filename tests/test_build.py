from pathlib import Path

import pytest

from tug.build import BuildContext, build_from_instructions
from tug.instruction import Add, Cmd, Copy, EntryPoint, Env, Expose, From, Run, Workdir


def _recording_pull(calls):
    def pull(image, dest):
        calls.append((image, Path(dest)))
        (Path(dest) / "etc").mkdir()
        (Path(dest) / "etc" / "release").write_text(image)

    return pull


def test_from_creates_context_below_base_dir(tmp_path):
    base = tmp_path / "tug"
    calls = []
    context = build_from_instructions([From("alpine")], base, _recording_pull(calls))
    assert isinstance(context, BuildContext)
    assert context.rootfs == context.workdir
    assert context.rootfs.parent == base
    assert calls == [("alpine", context.rootfs)]
    assert (context.rootfs / "etc" / "release").read_text() == "alpine"


def test_from_wipes_previous_contents(tmp_path):
    base = tmp_path / "tug"
    base.mkdir()
    stale = base / "stale.txt"
    stale.write_text("old")
    calls = []
    first = build_from_instructions([From("alpine")], base, _recording_pull(calls))
    second = build_from_instructions([From("ubuntu")], base, _recording_pull(calls))
    assert not stale.exists()
    assert not first.rootfs.exists()
    assert list(base.iterdir()) == [second.rootfs]


def test_second_from_replaces_context(tmp_path):
    base = tmp_path / "tug"
    calls = []
    context = build_from_instructions(
        [From("alpine"), From("ubuntu:22.04")], base, _recording_pull(calls)
    )
    assert [image for image, _ in calls] == ["alpine", "ubuntu:22.04"]
    assert context.rootfs == calls[1][1]


def test_workdir_creates_directory_and_moves_context(tmp_path):
    calls = []
    context = build_from_instructions(
        [From("alpine"), Workdir("app"), Workdir("src")], tmp_path / "tug", _recording_pull(calls)
    )
    assert context.workdir == context.rootfs / "app" / "src"
    assert context.workdir.is_dir()


def test_copy_puts_file_into_workdir(tmp_path):
    source = tmp_path / "config.txt"
    source.write_text("key=value")
    calls = []
    context = build_from_instructions(
        [From("alpine"), Workdir("app"), Copy(str(source), "conf/config.txt")],
        tmp_path / "tug",
        _recording_pull(calls),
    )
    copied = context.rootfs / "app" / "conf" / "config.txt"
    assert copied.read_text() == "key=value"


def test_copy_missing_source_raises(tmp_path):
    calls = []
    with pytest.raises(FileNotFoundError):
        build_from_instructions(
            [From("alpine"), Copy(str(tmp_path / "missing"), "x")],
            tmp_path / "tug",
            _recording_pull(calls),
        )


def test_cmd_is_saved_in_rootfs(tmp_path):
    calls = []
    context = build_from_instructions(
        [From("alpine"), Workdir("app"), Cmd('["./start.sh"]')], tmp_path / "tug", _recording_pull(calls)
    )
    assert (context.rootfs / "cmd.txt").read_text() == 'CMD: ["./start.sh"]'
    assert not (context.workdir / "cmd.txt").exists()


def test_run_executes_in_workdir(tmp_path):
    calls = []
    context = build_from_instructions(
        [From("alpine"), Workdir("app"), Run("echo built > out.txt")],
        tmp_path / "tug",
        _recording_pull(calls),
    )
    assert (context.workdir / "out.txt").read_text().strip() == "built"


def test_failing_run_does_not_stop_build(tmp_path):
    calls = []
    context = build_from_instructions(
        [From("alpine"), Run("exit 3"), Cmd("sh")], tmp_path / "tug", _recording_pull(calls)
    )
    assert (context.rootfs / "cmd.txt").read_text() == "CMD: sh"


def test_instructions_before_from_are_skipped(tmp_path):
    base = tmp_path / "tug"
    calls = []
    context = build_from_instructions(
        [Workdir("app"), Cmd("sh"), Run("touch x"), Copy("a", "b")], base, _recording_pull(calls)
    )
    assert context is None
    assert calls == []
    assert not base.exists()


def test_informational_instructions_leave_context_alone(tmp_path):
    calls = []
    context = build_from_instructions(
        [From("alpine"), Expose(8080), Env("A", "1"), EntryPoint("sh"), Add("a", "b")],
        tmp_path / "tug",
        _recording_pull(calls),
    )
    assert context.workdir == context.rootfs
    assert sorted(p.name for p in context.rootfs.iterdir()) == ["etc"]


def test_non_instruction_raises(tmp_path):
    with pytest.raises(TypeError):
        build_from_instructions(["FROM alpine"], tmp_path / "tug", _recording_pull([]))