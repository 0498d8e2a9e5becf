from __future__ import annotations

import os


class MarkdownEditError(Exception):
    pass


class WorkspaceNotADirectoryError(MarkdownEditError, NotADirectoryError):
    def __init__(self, root: str) -> None:
        super().__init__(f"root is not a directory: {root}")
        self.root = root


class FileOperationError(MarkdownEditError, OSError):
    """An explicit file read or write failed.

    ``step`` names what was being done when the failure happened and the
    underlying error (an ``OSError``, or a ``UnicodeDecodeError`` for text
    that is not UTF-8) is chained as ``__cause__``.
    """

    step = ""
    _prefixes = {
        "read": "read failed",
        "create_dir": "create_dir_all failed",
        "write": "write failed",
        "copy": "copy failed",
    }

    def __init__(self, path: str | os.PathLike[str], cause: OSError | ValueError, step: str | None = None) -> None:
        if step is not None:
            self.step = step
        prefix = self._prefixes.get(self.step, f"{self.step} failed")
        super().__init__(f"{prefix}: {cause}")
        self.path = os.fspath(path)
        self.cause = cause


class FileReadError(FileOperationError):
    step = "read"


class FileWriteError(FileOperationError):
    step = "write"
