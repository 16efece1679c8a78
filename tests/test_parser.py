import pytest

from tug.instruction import (
    Add,
    Cmd,
    Copy,
    EntryPoint,
    Env,
    Expose,
    From,
    Run,
    Workdir,
)
from tug.parser import parse_file, parse_line

FULL_TUGFILE = """
    FROM alpine
    WORKDIR /app
    COPY . /app
    RUN apk add --no-cache curl
    EXPOSE 8080
    CMD ["./start.sh"]
"""


def test_parse_full_tugfile():
    result = parse_file(FULL_TUGFILE)
    assert len(result) == 6


def test_parse_full_tugfile_contents():
    assert parse_file(FULL_TUGFILE) == [
        From("alpine"),
        Workdir("/app"),
        Copy(".", "/app"),
        Run("apk add --no-cache curl"),
        Expose(8080),
        Cmd('["./start.sh"]'),
    ]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("FROM ubuntu:22.04", From("ubuntu:22.04")),
        ("  RUN echo hi  ", Run("echo hi")),
        ("COPY a b", Copy("a", "b")),
        ("CMD run.sh", Cmd("run.sh")),
        ("WORKDIR /srv", Workdir("/srv")),
        ("EXPOSE 80", Expose(80)),
        ("EXPOSE 65535", Expose(65535)),
        ("ENV KEY = some=value ", Env("KEY", "some=value")),
        ("ENTRYPOINT /bin/sh", EntryPoint("/bin/sh")),
        ("ADD x.tar /opt", Add("x.tar", "/opt")),
    ],
)
def test_parse_line(line, expected):
    assert parse_line(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "# comment",
        "FROM",
        "from alpine",
        "COPY onlyone",
        "COPY a b c",
        "ADD a",
        "EXPOSE 65536",
        "EXPOSE http",
        "EXPOSE -1",
        "ENV NOEQUALS",
        "MAINTAINER someone",
    ],
)
def test_parse_line_rejects(line):
    assert parse_line(line) is None


def test_parse_file_skips_invalid_lines():
    text = "FROM a\nbogus\r\nRUN b\r\n\n"
    assert parse_file(text) == [From("a"), Run("b")]