from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import ArgumentError, warn

SizeOp = tuple[str, int]  # (op: 'lt'|'eq'|'gt', bytes)

_SIZE_SIGNS = {"-": "lt", "=": "eq", "+": "gt"}

DEBUG_CATEGORIES = frozenset({"search", "exec", "all"})


@dataclass(frozen=True)
class Debug:
    enabled: bool = False
    cats: frozenset[str] = field(default_factory=frozenset)

    def on(self, cat: str) -> bool:
        return self.enabled and ("all" in self.cats or cat in self.cats)

    def log(self, cat: str, msg: str) -> None:
        if self.on(cat):
            print(f"[DEBUG:{cat}] {msg}", file=sys.stderr)


@dataclass(frozen=True)
class SearchConfig:
    root: str
    inum: int | None = None
    nlinks: int | None = None
    name: str | None = None  # set by both -name and -path
    size: SizeOp | None = None
    exec_path: str | None = None
    debug: Debug = field(default_factory=Debug)

    @property
    def has_filters(self) -> bool:
        return any(v is not None for v in (self.inum, self.nlinks, self.name, self.size))


_INTEGER = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")


def parse_number(flag: str, text: str, *, signed: bool = True) -> int:
    pattern = _INTEGER if signed else _UNSIGNED
    if not pattern.fullmatch(text):
        raise ArgumentError(f"invalid number for {flag}: '{text}'")
    return int(text)


def parse_size(expr: str) -> SizeOp:
    """Parse a ``-size`` value: a mandatory ``+``, ``-`` or ``=`` followed by bytes."""
    if not expr or expr[0] not in _SIZE_SIGNS:
        raise ArgumentError(f"invalid value for -size: '{expr}' (expected +N, -N or =N)")
    return _SIZE_SIGNS[expr[0]], parse_number("-size", expr[1:], signed=False)


def parse_debug(value: str) -> Debug:
    cats = frozenset(v.strip() for v in value.split(",") if v.strip())
    unknown = cats - DEBUG_CATEGORIES
    if not cats or unknown:
        valid = ", ".join(sorted(DEBUG_CATEGORIES))
        raise ArgumentError(f"invalid argument to -D: '{value}' (valid: {valid})")
    return Debug(enabled=True, cats=cats)


def parse_args(argv: Sequence[str]) -> SearchConfig:
    """Build a SearchConfig from ``root [-flag value]...``.

    Pairs may appear in any order. ``-name`` and ``-path`` share one field, so
    whichever comes last wins. Unknown flags are skipped together with their
    value after a warning.
    """
    if not argv:
        raise ArgumentError("missing search root")
    if (len(argv) - 1) % 2 == 1:
        raise ArgumentError("invalid number of arguments: every option needs a value")

    values: dict[str, object] = {}
    for i in range(1, len(argv), 2):
        flag, value = argv[i], argv[i + 1]
        if flag in ("-inum", "-nlinks"):
            values[flag[1:]] = parse_number(flag, value)
        elif flag in ("-name", "-path"):
            values["name"] = value
        elif flag == "-size":
            values["size"] = parse_size(value)
        elif flag == "-exec":
            values["exec_path"] = value
        elif flag == "-D":
            values["debug"] = parse_debug(value)
        else:
            warn(f"ignoring unknown option '{flag}'")

    return SearchConfig(root=argv[0], **values)  # type: ignore[arg-type]
