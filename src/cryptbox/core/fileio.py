"""File helpers shared by the cipher and hashing code.

- ``open_input`` opens a path for binary reading and maps OS errors to
  IOFailureError carrying the path.
- ``read_block`` and ``read_chunks`` do the same for reads, naming the
  source rather than any output being written.
- ``atomic_output`` yields a temporary file next to the destination and
  renames it into place only when the block exits cleanly. On any failure
  the temporary file is removed and the destination is left untouched.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator
import logging
import os
import tempfile

from .exceptions import IOFailureError


logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536  # 64KB


def open_input(path: str | Path) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as exc:
        raise IOFailureError(path, f"cannot read {path}: {exc.strerror or exc}") from exc


def read_block(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes; OS errors name the stream's source path."""
    try:
        return stream.read(size)
    except OSError as exc:
        source = getattr(stream, "name", "<stream>")
        raise IOFailureError(source, f"cannot read {source}: {exc.strerror or exc}") from exc


def read_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        data = read_block(stream, chunk_size)
        if not data:
            break
        yield data


@contextmanager
def atomic_output(path: str | Path) -> Iterator[BinaryIO]:
    destination = Path(path).expanduser()
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
        )
    except OSError as exc:
        raise IOFailureError(path, f"cannot write {path}: {exc.strerror or exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as outf:
            yield outf
            outf.flush()
            os.fsync(outf.fileno())
        os.replace(tmp_path, destination)
        logger.debug("wrote %s", destination)
    except OSError as exc:
        _discard(tmp_path)
        raise IOFailureError(path, f"cannot write {path}: {exc.strerror or exc}") from exc
    except BaseException:
        _discard(tmp_path)
        raise


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
