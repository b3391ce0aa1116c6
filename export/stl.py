"""
STL output sessions.

A sink owns its output file from construction until `finalize()` or `abort()`.
Used as a context manager it finalizes on a clean exit and aborts, removing the
partial file, when the block raises.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
from tqdm import tqdm

from data_types import StlWriteError, Triangle

logger = logging.getLogger(__name__)

STL_HEADER_SIZE = 80
STL_COUNT_OFFSET = STL_HEADER_SIZE
# Record layout of numpy-stl's `stl.mesh.Mesh.dtype`: normal, three vertices, attribute count
STL_RECORD_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vectors", "<f4", (3, 3)),
    ("attribute", "<u2"),
])
MAX_BINARY_TRIANGLES = 2 ** 32 - 1


@contextmanager
def _io_errors(action: str, path: Path):
    try:
        yield
    except OSError as e:
        raise StlWriteError(f"Failed to {action} {path}: {e}") from e


class StlSink(ABC):
    def __init__(self, path):
        self.path = Path(path)
        self._count = 0
        self._finished = False
        with _io_errors("open", self.path):
            self._file = self._open()

    @property
    def triangle_count(self) -> int:
        return self._count

    @property
    def finished(self) -> bool:
        return self._finished

    def emit_triangle(self, triangle: Triangle):
        if self._finished:
            raise StlWriteError(f"Cannot add triangles to {self.path}, the STL session is already finished")
        with _io_errors("write", self.path):
            self._write_triangle(triangle)
        self._count += 1

    def emit_triangles(self, triangles: Iterable[Triangle], total: Optional[int] = None, progress: bool = False):
        for triangle in tqdm(triangles, total=total, desc="Writing STL", unit="tri",
                             disable=None if progress else True):
            self.emit_triangle(triangle)

    def finalize(self):
        """Write any trailer, patch headers and close the file."""
        if self._finished:
            raise StlWriteError(f"The STL session for {self.path} is already finished")
        self._finished = True
        try:
            with _io_errors("finish", self.path):
                try:
                    self._finish()
                finally:
                    self._file.close()
        except StlWriteError:
            # A binary file with an unpatched count would read as a valid empty STL
            self.path.unlink(missing_ok=True)
            logger.warning("Removed incomplete STL output %s", self.path)
            raise
        logger.info("Wrote %d triangles to %s", self._count, self.path)

    def abort(self):
        """Close the file and remove what was written so far."""
        if self._finished:
            return
        self._finished = True
        self._file.close()
        self.path.unlink(missing_ok=True)
        logger.warning("Discarded partial STL output %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.abort()
        elif not self._finished:
            self.finalize()
        return False

    @abstractmethod
    def _open(self):
        ...

    @abstractmethod
    def _write_triangle(self, triangle: Triangle):
        ...

    @abstractmethod
    def _finish(self):
        ...


class BinaryStlSink(StlSink):
    """
    80-byte header of spaces, little-endian uint32 triangle count, then one
    50-byte record per triangle. The count is written as zero up front and
    patched on finalize.
    """

    def __init__(self, path, chunk_size: int = 8192):
        self.chunk_size = chunk_size
        self._pending = []
        super().__init__(path)

    def _open(self):
        f = open(self.path, "wb")
        try:
            f.write(b" " * STL_HEADER_SIZE)
            f.write(np.array([0], dtype="<u4").tobytes())
        except OSError:
            f.close()
            raise
        return f

    def _write_triangle(self, triangle: Triangle):
        if self._count >= MAX_BINARY_TRIANGLES:
            raise StlWriteError(f"Binary STL cannot hold more than {MAX_BINARY_TRIANGLES} triangles")
        self._pending.append([v.as_tuple() for v in triangle.vertices])
        if len(self._pending) >= self.chunk_size:
            self._flush()

    def _flush(self):
        if not self._pending:
            return
        records = np.zeros(len(self._pending), dtype=STL_RECORD_DTYPE)
        records["vectors"] = np.array(self._pending, dtype=np.float32)
        self._file.write(records.tobytes())
        self._pending = []

    def _finish(self):
        self._flush()
        self._file.seek(STL_COUNT_OFFSET)
        self._file.write(np.array([self._count], dtype="<u4").tobytes())


class TextStlSink(StlSink):
    """ASCII STL with `repr` formatted coordinates, which round-trip exactly."""

    def __init__(self, path, name: str = "lithophane"):
        # The solid name must be a single ASCII token
        self.name = "_".join(name.encode("ascii", "replace").decode("ascii").split()) or "lithophane"
        super().__init__(path)

    def _open(self):
        f = open(self.path, "w", encoding="ascii", newline="\n")
        try:
            f.write(f"solid {self.name}\n")
        except OSError:
            f.close()
            raise
        return f

    def _write_triangle(self, triangle: Triangle):
        lines = ["facet normal 0 0 0", "  outer loop"]
        for v in triangle.vertices:
            lines.append(f"    vertex {float(v.x)!r} {float(v.y)!r} {float(v.z)!r}")
        lines += ["  endloop", "endfacet", ""]
        self._file.write("\n".join(lines))

    def _finish(self):
        self._file.write(f"endsolid {self.name}\n")


def open_stl_sink(path, binary: bool = True, name: str = "lithophane") -> StlSink:
    if binary:
        return BinaryStlSink(path)
    return TextStlSink(path, name=name)
