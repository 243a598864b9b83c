"""Reading files that live beneath a base directory."""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass

from gleserve.httputils import is_path_safe


class UnsafePathError(OSError):
    """Raised when a requested file lies outside the base directory."""


@dataclass(frozen=True)
class FileReader:
    """Reads ``file_name``, a path relative to ``base_dir``.

    For example base_dir "./htmldir" and file_name "test/foo.html" read
    "./htmldir/test/foo.html".
    """

    base_dir: str
    file_name: str

    @property
    def full_path(self) -> str:
        return f"{self.base_dir}/{self.file_name}"

    def read(self) -> bytes:
        """Return the whole file as bytes.

        Raises FileNotFoundError if the file does not exist, UnsafePathError
        if it lies outside the base directory, and OSError if it cannot be read.
        """
        path = self.full_path
        if not os.path.exists(path):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if not is_path_safe(self.base_dir, path):
            raise UnsafePathError(f"{path!r} is outside {self.base_dir!r}")
        with open(path, "rb") as handle:
            return handle.read()