"""Random-access little-endian reader for serialized engine exports."""

import struct
from typing import Callable, Optional, TypeVar

import numpy as np
from numpy.typing import NDArray

from morphforge.core.versions import VersionContext

T = TypeVar("T")

_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")
_VEC3 = struct.Struct("<3f")


class ArchiveError(ValueError):
    """Malformed primitive or invalid cursor movement."""


class ArchiveEOFError(ArchiveError):
    """A read ran past the end of the buffer."""


class BinaryArchive:
    """Single mutable cursor over an in-memory byte buffer.

    The archive also carries the resolved :class:`VersionContext` of the
    stream and the base-object ``property_reader`` hook, both attached at
    construction time.
    """

    def __init__(
        self,
        data: bytes,
        versions: VersionContext,
        property_reader: Optional[Callable[["BinaryArchive"], dict]] = None,
        name: str = "",
    ):
        self._view = memoryview(data)
        self._pos = 0
        self.versions = versions
        self.property_reader = property_reader
        self.name = name

    @property
    def size(self) -> int:
        return len(self._view)

    @property
    def position(self) -> int:
        return self._pos

    @position.setter
    def position(self, value: int) -> None:
        self.seek(value)

    def seek(self, pos: int) -> None:
        if pos < 0 or pos > len(self._view):
            raise ArchiveError(f"Seek to {pos} outside buffer of {len(self._view)} bytes")
        self._pos = pos

    def skip(self, count: int) -> None:
        self.seek(self._pos + count)

    def _take(self, count: int) -> int:
        """Advance the cursor by ``count`` bytes and return the old offset."""
        start = self._pos
        end = start + count
        if end > len(self._view):
            raise ArchiveEOFError(
                f"Unexpected end of data at {start}, need {count} bytes "
                f"({len(self._view) - start} left)")
        self._pos = end
        return start

    def read_bytes(self, count: int) -> bytes:
        start = self._take(count)
        return self._view[start:start + count].tobytes()

    def read_uint8(self) -> int:
        return self._view[self._take(1)]

    def read_int32(self) -> int:
        return _I32.unpack_from(self._view, self._take(4))[0]

    def read_uint32(self) -> int:
        return _U32.unpack_from(self._view, self._take(4))[0]

    def read_float32(self) -> float:
        return _F32.unpack_from(self._view, self._take(4))[0]

    def read_vector3(self) -> tuple[float, float, float]:
        return _VEC3.unpack_from(self._view, self._take(12))

    def read_bool(self) -> bool:
        offset = self._pos
        value = self.read_int32()
        if value == 0:
            return False
        if value == 1:
            return True
        raise ArchiveError(f"Invalid boolean value {value} at {offset}")

    def _read_length(self) -> int:
        offset = self._pos
        length = self.read_int32()
        if length < 0:
            raise ArchiveError(f"Negative array length {length} at {offset}")
        return length

    def read_array(self, read_element: Callable[[], T]) -> list[T]:
        """Read an int32 length prefix followed by that many elements."""
        length = self._read_length()
        return [read_element() for _ in range(length)]

    def read_int32_array(self) -> NDArray[np.int32]:
        length = self._read_length()
        if length == 0:
            return np.empty(0, dtype=np.int32)
        start = self._take(length * 4)
        return np.frombuffer(self._view, dtype="<i4", count=length, offset=start).astype(np.int32)

    def read_fstring(self) -> str:
        """Read a length-prefixed string.

        Positive length: latin-1 bytes including a trailing NUL.
        Negative length: UTF-16LE code units including a trailing NUL.
        """
        offset = self._pos
        length = self.read_int32()
        if length == 0:
            return ""
        if length > 0:
            raw = self.read_bytes(length)
            encoding = "latin-1"
            terminator = b"\x00"
        else:
            raw = self.read_bytes(-length * 2)
            encoding = "utf-16-le"
            terminator = b"\x00\x00"
        if not raw.endswith(terminator):
            raise ArchiveError(f"String at {offset} is not NUL-terminated")
        try:
            return raw[:-len(terminator)].decode(encoding)
        except UnicodeDecodeError as exc:
            raise ArchiveError(f"Undecodable string at {offset}: {exc}") from exc
