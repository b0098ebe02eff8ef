"""
Append-only file result sink.

Every record is written with a single ``write(2)`` on a descriptor opened
with ``O_APPEND``, so lines from several worker processes sharing the same
file never interleave. Lines already written survive restarts; nothing in
this module truncates or rewrites the file.
"""

import asyncio
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

from msgrelay.exceptions import ResultSinkError

logger = logging.getLogger(__name__)

_FILE_MODE = 0o644
_DIR_MODE = 0o755


class ResultSink(Protocol):
    """Contract consumed by the worker."""

    async def append(self, line: str) -> None:
        """
        Durably append one line.

        Raises:
            ResultSinkError: If the line could not be written.
        """
        ...


class FileResultSink:
    """ResultSink writing one line per record to a plain-text file."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def prepare(self) -> None:
        """
        Create the parent directory.

        Raises:
            ResultSinkError: If the directory cannot be created.
        """
        try:
            self.path.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise ResultSinkError(f"cannot create {self.path.parent}: {e}") from e

    async def append(self, line: str) -> None:
        await asyncio.to_thread(self.append_sync, line)

    def append_sync(self, line: str) -> None:
        """Blocking variant of :meth:`append`."""
        data = f"{line}\n".encode("utf-8")
        self.prepare()
        with self._lock:
            try:
                fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, _FILE_MODE)
            except OSError as e:
                raise ResultSinkError(f"cannot open {self.path}: {e}") from e
            try:
                written = os.write(fd, data)
                if written != len(data):
                    raise ResultSinkError(
                        f"short write to {self.path}: {written}/{len(data)} bytes"
                    )
            except OSError as e:
                raise ResultSinkError(f"write to {self.path} failed: {e}") from e
            finally:
                os.close(fd)


def read_records(path: str | os.PathLike[str]) -> list[str]:
    """
    Read back every record line in the sink.

    Returns an empty list when nothing has been written yet.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f if line.strip()]
    except FileNotFoundError:
        return []
