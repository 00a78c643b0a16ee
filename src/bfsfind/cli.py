from __future__ import annotations

import contextlib
import os
import sys
from collections.abc import Sequence

from .config import parse_args
from .core import search
from .dispatch import run_program
from .errors import ArgumentError, ProcessSpawnError, ProcessWaitError, report_error

VERSION = "bfsfind 0.1.0"

HELP_TEXT = """\
Usage: bfsfind PATH [-flag value]...

Walk PATH breadth-first and print every non-directory entry that passes all
of the given filters, one per line.

Filters:
      -inum N        inode number is exactly N
      -nlinks N      link count is exactly N
      -name NAME     base name is exactly NAME
      -path NAME     same as -name; the last of the two wins
      -size [+-=]N   size in bytes is greater than, less than or equal to N

Actions:
      -exec PROGRAM  run PROGRAM once with every match as an argument, in an
                     empty environment, and report its exit code

Other options:
      -D CATS        debug output on stderr for CATS (search, exec, all)
      --help         display this help and exit
      --version      output version information and exit
"""


def _print_matches(paths: Sequence[str]) -> None:
    # Paths go out as raw filesystem bytes; names need not be valid UTF-8.
    try:
        sys.stdout.flush()
        out = sys.stdout.buffer
        for path in paths:
            out.write(os.fsencode(path) + b"\n")
        out.flush()
    except BrokenPipeError:
        with contextlib.suppress(Exception):
            sys.stdout.close()


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if list(argv) == ["--help"]:
        print(HELP_TEXT, end="")
        return 0
    if list(argv) == ["--version"]:
        print(VERSION)
        return 0

    try:
        config = parse_args(argv)
    except ArgumentError as e:
        report_error(e)
        return 1

    try:
        paths = search(config)
        if config.exec_path is None:
            _print_matches(paths)
            return 0

        try:
            status = run_program(config.exec_path, paths, debug=config.debug)
        except ProcessSpawnError as e:
            report_error(e)
            return 1
        except ProcessWaitError as e:
            report_error(e)
            return 0
        print(f"Process finished with exit code {status}")
        return 0
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
