"""
Loading of the metadata tables. A table is a run of fixed-width records at some offset of the
buffer. The header stores either the byte length of a table or nothing at all; in the latter case,
the number of populated records is implied by the largest `start + count` range that any record of
the owning table declares. The functions `il2cppmeta.lib.metadata.tables.implied_count` and
`il2cppmeta.lib.metadata.tables.bounded_count` compute that bound.
"""
from __future__ import annotations

import struct

from typing import Iterable, TypeVar

from il2cppmeta.lib.metadata.errors import TruncatedData
from il2cppmeta.lib.metadata.layout import Record, codec, size_of
from il2cppmeta.lib.metadata.version import Version
from il2cppmeta.lib.structures import EOF, StructReader
from il2cppmeta.lib.types import buf

_R = TypeVar('_R', bound=Record)

_INT32 = struct.Struct('<i')
_UINT32 = struct.Struct('<I')


def implied_count(owners: Iterable[Record], start: str, count: str) -> int:
    """
    The largest end of a range `(start, count)` declared by any of the given owner records, or
    zero if there are no owners.
    """
    return max((getattr(o, start) + getattr(o, count) for o in owners), default=0)


def bounded_count(owners: Iterable[Record], start: str, count: str, capacity: int) -> int:
    """
    The number of populated records of a table owned by the given records: the implied count, but
    never more than the capacity that the byte length of the table allows.
    """
    return max(0, min(implied_count(owners, start, count), capacity))


class TableLoader:
    """
    Reads tables of records from a buffer under one fixed version.
    """
    def __init__(self, data: buf, version: Version):
        self.reader = StructReader(memoryview(data))
        self.version = version

    def size_of(self, record: type[Record]) -> int:
        return size_of(record, self.version)

    def capacity(self, record: type[Record] | int, size: int) -> int:
        """
        The number of records of the given type, or of the given width, that fit into `size` bytes.
        """
        width = record if isinstance(record, int) else self.size_of(record)
        if width <= 0 or size <= 0:
            return 0
        return size // width

    def _read(self, layout: struct.Struct, offset: int, count: int, what: str):
        reader = self.reader
        total = layout.size * count
        if count <= 0:
            return ()
        if offset < 0 or offset + total > len(reader):
            raise TruncatedData(offset, total, len(reader) - max(offset, 0), what)
        reader.seekset(offset)
        try:
            return tuple(reader.read_records(layout, count))
        except EOF as E:
            raise TruncatedData(offset, total, len(E.rest), what) from E

    def load(self, record: type[_R], offset: int, count: int) -> tuple[_R, ...]:
        """
        Read `count` consecutive records of the given type starting at `offset`.
        """
        decoder = codec(record, self.version)
        if decoder.size == 0:
            return ()
        return tuple(decoder.unpack(raw) for raw in self._read(decoder.struct, offset, count, record.__name__))

    def load_sized(self, record: type[_R], offset: int, size: int) -> tuple[_R, ...]:
        """
        Read as many records of the given type as fit into the `size` bytes at `offset`.
        """
        return self.load(record, offset, self.capacity(record, size))

    def load_integers(self, offset: int, count: int, signed: bool = True) -> tuple[int, ...]:
        """
        Read `count` consecutive 32-bit integers starting at `offset`.
        """
        layout = _INT32 if signed else _UINT32
        return tuple(v for v, in self._read(layout, offset, count, 'index array'))
