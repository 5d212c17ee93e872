"""
Interfaces and classes to read structured data from an in-memory buffer.
"""
from __future__ import annotations

import codecs
import io
import struct

from typing import TYPE_CHECKING, Generic, Iterator, TypeVar, Union, cast, overload

if TYPE_CHECKING:
    from il2cppmeta.lib.types import buf

    T = TypeVar('T', bound=Union[bytearray, bytes, memoryview])
    R = TypeVar('R', bound=io.IOBase)
else:
    T = TypeVar('T')
    R = TypeVar('R')


def buffer_offset(haystack: buf, needle: buf, start: int = 0) -> int:
    """
    Performs a substring search of `needle` in `haystack`. A `memoryview` that spans the whole of
    a bytes or bytearray object is searched through that object; any other view is copied from
    `start` onwards and searched as a bytes object.
    """
    if isinstance(haystack, memoryview):
        obj = haystack.obj
        if isinstance(obj, (bytes, bytearray)) and haystack.nbytes == len(obj):
            return obj.find(needle, start)
        p = bytes(haystack[start:]).find(needle)
        return p if p < 0 else p + start
    return haystack.find(needle, start)


class EOF(EOFError):
    """
    While reading from a `il2cppmeta.lib.structures.MemoryFile`, less bytes were available than
    requested. The exception contains the data from the incomplete read.
    """
    def __init__(self, size: int, rest: buf = B''):
        super().__init__(F'Unexpected end of buffer; attempted to read {size} bytes, but got only {len(rest)}.')
        self.rest = rest
        self.size = size

    def __bytes__(self):
        return bytes(self.rest)


class StreamDetour(Generic[R]):
    """
    A stream detour is used as a context manager to temporarily read from a different location
    in the stream and then return to the original offset when the context ends.
    """
    def __init__(self, stream: R, offset: int | None = None, whence: int = io.SEEK_SET):
        self.stream = stream
        self.offset = offset
        self.whence = whence

    def __enter__(self):
        self.cursor = self.stream.tell()
        if self.offset is not None:
            self.stream.seek(self.offset, self.whence)
        return self

    def __exit__(self, *args):
        self.stream.seek(self.cursor, io.SEEK_SET)


class MemoryFile(Generic[T]):
    """
    A thin, read-only wrapper around a byte sequence which gives it the features of a file-like
    object. Seeking beyond either end of the buffer clamps the cursor.
    """
    _data: T
    _cursor: int

    def __init__(self, data: T | MemoryFile[T]):
        if isinstance(data, MemoryFile):
            self._data = data._data
            self._cursor = data._cursor
        elif isinstance(data, (bytearray, bytes, memoryview)):
            self._data = cast('T', data)
            self._cursor = 0
        else:
            raise TypeError(F'Invalid input: {data!r}.')

    def __bytes__(self):
        return bytes(self._data)

    def __len__(self):
        return len(self._data)

    def __enter__(self):
        return self

    def __exit__(self, ex_type, ex_value, trace) -> bool:
        return False

    @property
    def eof(self) -> bool:
        return self._cursor >= len(self._data)

    @property
    def remaining_bytes(self) -> int:
        return len(self._data) - self.tell()

    def detour(self, offset: int | None = None, whence: int = io.SEEK_SET):
        return StreamDetour(cast(io.IOBase, self), offset, whence=whence)

    def read(self, size: int | None = None, peek: bool = False) -> T:
        beginning = self._cursor
        if size is None or size < 0:
            end = len(self._data)
        else:
            end = min(self._cursor + size, len(self._data))
        result = self._data[beginning:end]
        if not peek:
            self._cursor = end
        return cast('T', result)

    def tell(self) -> int:
        return self._cursor

    def skip(self, n: int):
        self._cursor += n

    def seekset(self, offset: int) -> int:
        if offset < 0:
            return self.seek(offset, io.SEEK_END)
        else:
            return self.seek(offset, io.SEEK_SET)

    def getvalue(self) -> T:
        return self._data

    def seek(self, offset: int, whence=io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            if offset < 0:
                raise ValueError('no negative offsets allowed for SEEK_SET.')
            self._cursor = offset
        elif whence == io.SEEK_CUR:
            self._cursor += offset
        elif whence == io.SEEK_END:
            self._cursor = len(self._data) + offset
        self._cursor = max(self._cursor, 0)
        self._cursor = min(self._cursor, len(self._data))
        return self._cursor


class StructReader(MemoryFile[T]):
    """
    An extension of a `il2cppmeta.lib.structures.MemoryFile` which provides methods to read
    little endian structured data.
    """

    def read_exactly(self, size: int | None = None, peek: bool = False) -> T:
        """
        Read bytes from the underlying stream. Raises an exception of type
        `il2cppmeta.lib.structures.EOF` when fewer data is available in the stream than
        requested via the `size` parameter. The remaining data can be extracted from the exception.
        """
        data = self.read(size, peek)
        if size and len(data) < size:
            raise EOF(size, data)
        return data

    def read_integer(
        self,
        size: int,
        peek: bool = False,
        signed: bool = False
    ) -> int:
        """
        Read an integer of the given size (in bits) from the stream.
        """
        nbytes, rest = divmod(size, 8)
        if rest > 0:
            raise ValueError(
                F'A {self.__class__.__name__} cannot read {size} bit{"s" * (size > 1)}, only multiples of 8 are possible.')
        data = self.read(nbytes, peek)
        if len(data) < nbytes:
            raise EOF(nbytes, data)
        return int.from_bytes(data, 'little', signed=signed)

    def read_bytes(self, size: int, peek: bool = False) -> bytes:
        data = self.read_exactly(size, peek)
        if not isinstance(data, bytes):
            data = bytes(data)
        return data

    def read_byte(self, peek: bool = False) -> int:
        try:
            b = self._data[self._cursor]
        except IndexError:
            raise EOF(1)
        if not peek:
            self._cursor += 1
        return b

    u8 = read_byte

    def u16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek, signed=False)

    def u32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek, signed=False)

    def u64(self, peek: bool = False) -> int:
        return self.read_integer(64, peek, signed=False)

    def i16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek, signed=True)

    def i32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek, signed=True)

    def read_records(self, layout: struct.Struct, count: int) -> Iterator[tuple]:
        """
        Read `count` consecutive records that are all described by the given `struct.Struct`. The
        whole span is consumed up front, so a short buffer raises before any record is produced.
        """
        if count <= 0:
            return iter(())
        data = self.read_exactly(layout.size * count)
        return layout.iter_unpack(data)

    def read_terminated_array(self, terminator: bytes) -> T:
        buf = self.getvalue()
        pos = self.tell()
        end = buffer_offset(buf, terminator, pos)
        if end >= pos:
            result = self.read_exactly(end - pos)
            self.skip(len(terminator))
            return result
        raise EOF(len(buf) - pos + len(terminator))

    @overload
    def read_c_string(self) -> T:
        ...

    @overload
    def read_c_string(self, encoding: str, errors: str = 'strict') -> str:
        ...

    def read_c_string(self, encoding=None, errors='strict') -> str | T:
        data = self.read_terminated_array(B'\0')
        if encoding is not None:
            data = codecs.decode(data, encoding, errors)
        return data
