from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from .config import Debug
from .errors import ProcessSpawnError, ProcessWaitError

# Children get no environment unless the caller passes one; None inherits ours.
EMPTY_ENV: Mapping[str, str] = MappingProxyType({})


def build_argv(program: str, args: Sequence[str]) -> list[str]:
    return [str(program), *(str(a) for a in args)]


def _executable(program: str) -> str:
    # Use the path as given, like execve: a bare name is never looked up on PATH.
    if os.path.dirname(program):
        return program
    return os.path.join(os.curdir, program)


def run_program(
    program: str,
    args: Sequence[str],
    *,
    env: Mapping[str, str] | None = EMPTY_ENV,
    debug: Debug | None = None,
) -> int:
    """Run ``program`` once with every item of ``args`` and wait for it.

    Returns the child's exit status, or ``128 + N`` if it was killed by
    signal N. Raises ProcessSpawnError if the program cannot be started and
    ProcessWaitError if waiting on it fails.
    """
    debug = debug or Debug()
    argv = build_argv(program, args)
    debug.log("exec", f"spawning {argv[0]} with {len(argv) - 1} argument(s)")

    try:
        proc = subprocess.Popen(
            argv,
            executable=_executable(program),
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        raise ProcessSpawnError(f"execution of '{program}' failed", e) from e

    try:
        returncode = proc.wait()
    except OSError as e:
        raise ProcessWaitError("error while waiting for child process", e) from e

    status = 128 - returncode if returncode < 0 else returncode
    debug.log("exec", f"pid {proc.pid} exited with {status}")
    return status
