from __future__ import annotations

import sys

PROG = "bfsfind"


class FindError(Exception):
    """Base error. Carries the OS error that caused it, if any."""

    def __init__(self, message: str, cause: OSError | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        detail = self.cause.strerror or str(self.cause)
        return f"{self.message}: {detail}"


class ArgumentError(FindError):
    pass


class FilesystemAccessError(FindError):
    def __init__(self, message: str, path: str, cause: OSError | None = None) -> None:
        super().__init__(message, cause)
        self.path = path

    def __str__(self) -> str:
        located = f"{self.message} '{self.path}'"
        if self.cause is None:
            return located
        return f"{located}: {self.cause.strerror or self.cause}"


class RootAccessError(FilesystemAccessError):
    pass


class EntryAccessError(FilesystemAccessError):
    pass


class ProcessSpawnError(FindError):
    pass


class ProcessWaitError(FindError):
    pass


def report_error(err: FindError) -> None:
    print(f"{PROG}: {err}", file=sys.stderr)


def warn(msg: str) -> None:
    print(f"{PROG}: warning: {msg}", file=sys.stderr)
