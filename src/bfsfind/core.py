from __future__ import annotations

import os
import stat
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

from .config import SearchConfig, SizeOp
from .errors import EntryAccessError, FindError, RootAccessError, report_error

# Upper bound on directory handles held open by queued frontier entries.
MAX_OPEN_DIRS = 256

ErrorHandler = Callable[[FindError], None]


class StatLike(Protocol):
    @property
    def st_ino(self) -> int: ...

    @property
    def st_nlink(self) -> int: ...

    @property
    def st_size(self) -> int: ...


def _match_size(size: int, op_and_bytes: SizeOp | None) -> bool:
    if op_and_bytes is None:
        return True
    op, ref = op_and_bytes
    if op == "eq":
        return size == ref
    if op == "lt":
        return size < ref
    if op == "gt":
        return size > ref
    return False


def matches(config: SearchConfig, st: StatLike, name: str) -> bool:
    """Return True if the entry passes every active filter of ``config``."""
    if config.inum is not None and st.st_ino != config.inum:
        return False
    if config.nlinks is not None and st.st_nlink != config.nlinks:
        return False
    if config.name is not None and name != config.name:
        return False
    return _match_size(st.st_size, config.size)


@dataclass
class _Frontier:
    path: str
    handle: Iterator[os.DirEntry] | None = None  # None: not opened yet

    def open(self) -> Iterator[os.DirEntry]:
        if self.handle is None:
            self.handle = os.scandir(self.path)
        return self.handle

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()  # type: ignore[attr-defined]


def search(
    config: SearchConfig,
    *,
    on_error: ErrorHandler = report_error,
    max_open_dirs: int = MAX_OPEN_DIRS,
) -> list[str]:
    """Walk ``config.root`` breadth-first and return matching non-directories.

    Paths are returned in discovery order: level by level, and within a
    directory in listing order. Subdirectories are opened as soon as they are
    discovered and queued only if that succeeds. Once ``max_open_dirs``
    handles are held by the queue, further subdirectories are queued by path
    and opened when their turn comes.

    Access errors are passed to ``on_error``. An unreadable root yields an
    empty list; an unreadable entry is skipped.
    """
    root = _Frontier(config.root)
    try:
        root.open()
    except OSError as e:
        on_error(RootAccessError("cannot access root directory", config.root, e))
        return []

    if not config.has_filters:
        config.debug.log("search", "no filters active, matching every non-directory")

    results: list[str] = []
    queue: deque[_Frontier] = deque([root])
    try:
        _walk(config, queue, results, on_error, max_open_dirs)
    finally:
        for pending in queue:
            pending.close()
    return results


def _walk(
    config: SearchConfig,
    queue: deque[_Frontier],
    results: list[str],
    on_error: ErrorHandler,
    max_open_dirs: int,
) -> None:
    debug = config.debug
    open_handles = len(queue)

    while queue:
        current = queue.popleft()
        if current.handle is None:
            try:
                current.open()
            except OSError as e:
                on_error(EntryAccessError("cannot open directory", current.path, e))
                continue
        else:
            open_handles -= 1

        debug.log("search", f"reading {current.path}")
        with current.handle as it:  # type: ignore[attr-defined]
            try:
                for entry in it:
                    path = os.path.join(current.path, entry.name)
                    try:
                        st = os.lstat(path)
                    except OSError as e:
                        on_error(EntryAccessError("unable to access file", path, e))
                        continue

                    if not stat.S_ISDIR(st.st_mode):
                        if matches(config, st, entry.name):
                            debug.log("search", f"match {path}")
                            results.append(path)
                        continue

                    child = _Frontier(path)
                    if open_handles < max_open_dirs:
                        try:
                            child.open()
                        except OSError as e:
                            on_error(EntryAccessError("cannot open directory", path, e))
                            continue
                        open_handles += 1
                    else:
                        debug.log("search", f"deferring open of {path}")
                    queue.append(child)
            except OSError as e:
                on_error(EntryAccessError("error reading directory", current.path, e))
