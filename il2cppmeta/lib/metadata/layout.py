"""
Declarative record layouts. Every record of the metadata format is a subclass of
`il2cppmeta.lib.metadata.layout.Record` whose class body lists its fields, in order, as
`il2cppmeta.lib.metadata.layout.Member` instances:

    class FieldRef(Record):
        typeIndex = Int32()
        fieldIndex = Int32()
        token = UInt32(since=19)

The list of members is collected once, when the class is created, into the tuple `__layout__`.
The byte width of a record under a given version is a fold over this tuple which skips every
member whose version interval excludes that version; see `il2cppmeta.lib.metadata.layout.size_of`.
Members that are absent in the version a record was read with are `None` on the instance.
"""
from __future__ import annotations

import enum
import functools
import struct

from typing import Any, ClassVar, Iterator, Optional

from il2cppmeta.lib.metadata.version import Version


class Member:
    """
    A field of a record. The optional bounds `since` and `until` are inclusive.
    """
    code: ClassVar[str] = ''
    width: ClassVar[int] = 0

    name: str

    def __init__(self, since: Optional[float] = None, until: Optional[float] = None):
        self.since = None if since is None else Version.cast(since)
        self.until = None if until is None else Version.cast(until)

    def __set_name__(self, owner, name: str):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return None

    def __repr__(self):
        return F'{self.__class__.__name__}({self.name})'

    def applies(self, version: Version) -> bool:
        if self.since is not None and version < self.since:
            return False
        if self.until is not None and version > self.until:
            return False
        return True

    def size(self, version: Version) -> int:
        return self.width

    def format(self, version: Version) -> str:
        return self.code

    def take(self, values: Iterator[Any], version: Version) -> Any:
        return next(values)

    def flatten(self, value: Any, version: Version, out: list):
        out.append(0 if value is None else int(value))


class Int32(Member):
    code = 'i'
    width = 4


class UInt32(Member):
    code = 'I'
    width = 4


class Int16(Member):
    code = 'h'
    width = 2


class UInt16(Member):
    code = 'H'
    width = 2


class UInt8(Member):
    code = 'B'
    width = 1


class EnumMember(Member):
    """
    A field holding an enumeration value; it is as wide as the underlying integer type. Values that
    are not members of the enumeration are kept as plain integers.
    """
    def __init__(
        self,
        type: type[enum.IntEnum],
        base: type[Member] = Int32,
        since: Optional[float] = None,
        until: Optional[float] = None,
    ):
        super().__init__(since, until)
        self.type = type
        self.base = base

    def size(self, version):
        return self.base.width

    def format(self, version):
        return self.base.code

    def take(self, values, version):
        value = next(values)
        try:
            return self.type(value)
        except ValueError:
            return value


class InlineArray(Member):
    """
    A fixed number of primitive elements stored inline. Byte arrays are read as `bytes`, all other
    arrays as a tuple of integers.
    """
    def __init__(
        self,
        element: type[Member],
        length: int,
        since: Optional[float] = None,
        until: Optional[float] = None,
    ):
        super().__init__(since, until)
        self.element = element
        self.length = length

    def size(self, version):
        return self.element.width * self.length

    def format(self, version):
        if self.element is UInt8:
            return F'{self.length}s'
        return F'{self.length}{self.element.code}'

    def take(self, values, version):
        if self.element is UInt8:
            return next(values)
        return tuple(next(values) for _ in range(self.length))

    def flatten(self, value, version, out):
        if self.element is UInt8:
            out.append(bytes(value or B''))
        else:
            out.extend(value or (0,) * self.length)


class Nested(Member):
    """
    A record embedded inline into another record; its width depends on the version as well.
    """
    def __init__(
        self,
        record: type[Record],
        since: Optional[float] = None,
        until: Optional[float] = None,
    ):
        super().__init__(since, until)
        self.record = record

    def size(self, version):
        return size_of(self.record, version)

    def format(self, version):
        return codec(self.record, version).format

    def take(self, values, version):
        return codec(self.record, version).build(values)

    def flatten(self, value, version, out):
        codec(self.record, version).flatten(value or self.record(), out)


class Record:
    """
    Base class for all records. Instances are immutable; they are created by a
    `il2cppmeta.lib.metadata.layout.RecordCodec` or directly from keyword arguments.
    """
    __layout__: ClassVar[tuple[Member, ...]] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        members = tuple(m for m in vars(cls).values() if isinstance(m, Member))
        cls.__layout__ = cls.__layout__ + members

    def __init__(self, **values):
        names = {m.name for m in self.__layout__}
        for key in values:
            if key not in names:
                raise TypeError(F'{self.__class__.__name__} has no member named {key}.')
        self.__dict__.update(values)

    def __setattr__(self, name, value):
        raise AttributeError(F'{self.__class__.__name__} records are read-only.')

    def __delattr__(self, name):
        raise AttributeError(F'{self.__class__.__name__} records are read-only.')

    def __eq__(self, other):
        if not isinstance(other, Record) or other.__class__ is not self.__class__:
            return NotImplemented
        return self._asdict() == other._asdict()

    __hash__ = None

    def __repr__(self):
        members = ', '.join(F'{k}={v!r}' for k, v in self._asdict().items() if v is not None)
        return F'{self.__class__.__name__}({members})'

    def _asdict(self) -> dict[str, Any]:
        return {m.name: getattr(self, m.name) for m in self.__layout__}


class RecordCodec:
    """
    Reads and writes one record type under one version. The members that apply to the version are
    compiled into a single little endian `struct.Struct`.
    """
    def __init__(self, record: type[Record], version: Version):
        self.record = record
        self.version = version
        self.members = tuple(m for m in record.__layout__ if m.applies(version))
        self.format = ''.join(m.format(version) for m in self.members)
        self.struct = struct.Struct(F'<{self.format}')
        self.size = self.struct.size
        if self.size != size_of(record, version):
            raise RuntimeError(
                F'The packed layout of {record.__name__} under {version!r} has {self.size} bytes, '
                F'but the computed size is {size_of(record, version)}.')

    def build(self, values: Iterator[Any]) -> Record:
        version = self.version
        return self.record(**{m.name: m.take(values, version) for m in self.members})

    def unpack(self, raw: tuple) -> Record:
        return self.build(iter(raw))

    def flatten(self, record: Record, out: list):
        for member in self.members:
            member.flatten(getattr(record, member.name), self.version, out)

    def pack(self, record: Record) -> bytes:
        out = []
        self.flatten(record, out)
        return self.struct.pack(*out)


@functools.lru_cache(maxsize=None)
def size_of(record: type[Record], version: Version) -> int:
    """
    Compute the byte width of the given record type under the given version.
    """
    return sum(m.size(version) for m in record.__layout__ if m.applies(version))


@functools.lru_cache(maxsize=None)
def codec(record: type[Record], version: Version) -> RecordCodec:
    return RecordCodec(record, version)
