# tug

`tug` builds container root filesystems from a simple build file called a
`Tugfile`. It comes as two commands:

- `tugd` — the build daemon. It listens on a Unix socket (by default
  `/run/tugd.sock`), receives build requests and carries them out.
- `tug` — the client. `tug build` reads the `Tugfile` in the current
  directory, parses it and sends the instructions to the daemon.

## Installing

```
pip install .
```

## The Tugfile

Each line holds one instruction. Leading and trailing whitespace is ignored,
and lines that are not understood are skipped.

```
FROM ubuntu:22.04
WORKDIR app
COPY start.sh start.sh
RUN echo hello > greeting.txt
ENV MODE=production
EXPOSE 8080
CMD ["./start.sh"]
```

Supported instructions:

| Instruction  | Form                  | Effect during a build                                       |
|--------------|-----------------------|-------------------------------------------------------------|
| `FROM`       | `FROM image[:tag]`    | Pulls `library/image` from Docker Hub and unpacks its layers |
| `WORKDIR`    | `WORKDIR dir`         | Creates `dir` below the working directory and moves into it |
| `COPY`       | `COPY src dest`       | Copies file `src` to `dest` in the working directory        |
| `RUN`        | `RUN command`         | Runs `sh -c command` in the working directory               |
| `CMD`        | `CMD command`         | Writes `CMD: command` to `cmd.txt` at the build root        |
| `EXPOSE`     | `EXPOSE port`         | Printed only                                                |
| `ENV`        | `ENV key=value`       | Printed only                                                |
| `ENTRYPOINT` | `ENTRYPOINT command`  | Printed only                                                |
| `ADD`        | `ADD src dest`        | Printed only                                                |

`COPY` and `ADD` need exactly two words, `ENV` needs an `=`, and `EXPOSE`
needs a port from 0 to 65535; otherwise the line is skipped. The image tag
defaults to `latest`.

`RUN`, `COPY`, `CMD` and `WORKDIR` do nothing until a `FROM` has been seen.
Each `FROM` deletes the whole build directory (`/var/lib/tug/` by default)
and starts a fresh build root in a new sub-directory named by a random UUID.

## Running

Start the daemon. It needs permission to create its socket and to write to
`/var/lib/tug/`:

```
tugd
tugd --socket /tmp/tugd.sock
```

Then, in a directory containing a `Tugfile`:

```
tug build
tug --socket /tmp/tugd.sock build
```

The daemon answers `build` requests with `Build complete`, any other command
with `Unknown command`, and malformed JSON with `invalid request`, each
followed by `OK from tugd`. The client sends its request and does not wait
for the answer.

## Using the library

```python
from tug.parser import parse_file, parse_line
from tug.instruction import From, Expose, to_serde, from_serde

with open("Tugfile") as f:
    instructions = parse_file(f.read())

assert parse_line("FROM alpine") == From("alpine")
assert parse_line("EXPOSE 8080") == Expose(8080)
assert to_serde(From("alpine")) == {"From": "alpine"}
assert from_serde({"Expose": 8080}) == Expose(8080)
```

- `tug.instruction` — the instruction classes (`From`, `Run`, `Copy`, `Cmd`,
  `Workdir`, `Expose`, `Env`, `EntryPoint`, `Add`) and their tagged JSON form.
- `tug.parser` — `parse_line` and `parse_file`.
- `tug.registry` — Docker Hub access: `parse_image`, `fetch_docker_token`,
  `select_platform_manifest`, `save_and_extract_layer`,
  `pull_and_extract_image`, `pull_and_extract_ubuntu_image`; failures raise
  `RegistryError`.
- `tug.build` — `build_from_instructions(instructions, base_dir, pull)` runs
  the instructions and returns the final `BuildContext` (or `None` if there
  was no `FROM`).
- `tug.cli` — `TugRequest`, the JSON message the client and daemon exchange,
  and `send_request`.
- `tug.daemon` — `handle_request`, `serve` and `create_container`.

## What it does not do

- It does not run containers. `RUN` commands execute on the host with
  `sh -c`, inside the build directory, not in an isolated environment; their
  output is captured and discarded, and a failing command does not stop the
  build.
- Only the `library/` namespace on Docker Hub is supported, with anonymous
  tokens.
- There is no layer cache and no image store: every `FROM` pulls again and
  replaces the previous build.
- The daemon handles only `build`. `create_container` exists as a function
  but the daemon offers no request that calls it.

## Tests

```
pip install .[test]
pytest
```