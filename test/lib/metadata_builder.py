"""
Synthesizes global metadata buffers for the tests. Records are serialized with the same codecs
that the decoder uses to read them, so a buffer can be built for every version the decoder knows.
"""
from __future__ import annotations

import struct

from il2cppmeta.lib.metadata.layout import Record, codec
from il2cppmeta.lib.metadata.records import GlobalMetadataHeader, StringLiteral
from il2cppmeta.lib.metadata.version import MAGIC, Version


class MetadataBuilder:
    """
    Collects tables and serializes them behind a header. Every table is registered under the
    prefix of its header fields, i.e. `images` for `imagesOffset` and `imagesSize`. The string
    literal table always directly follows the header.
    """

    def __init__(self, version, raw_version: int | None = None):
        self.version = Version.cast(version)
        self.raw_version = self.version.major if raw_version is None else raw_version
        self.tables: dict[str, bytes] = {}
        self.strings = bytearray()
        self.literals: list[StringLiteral] = []
        self.literal_data = bytearray()

    def add_records(self, name: str, records, layout=None) -> MetadataBuilder:
        version = self.version if layout is None else Version.cast(layout)
        self.tables[name] = B''.join(codec(type(r), version).pack(r) for r in records)
        return self

    def add_integers(self, name: str, values, signed: bool = True) -> MetadataBuilder:
        fmt = 'i' if signed else 'I'
        self.tables[name] = struct.pack(F'<{len(values)}{fmt}', *values)
        return self

    def add_raw(self, name: str, data: bytes) -> MetadataBuilder:
        self.tables[name] = bytes(data)
        return self

    def add_string(self, value: str) -> int:
        index = len(self.strings)
        self.strings.extend(value.encode('utf8'))
        self.strings.append(0)
        return index

    def add_literal(self, value: str) -> int:
        data = value.encode('utf8')
        self.literals.append(StringLiteral(length=len(data), dataIndex=len(self.literal_data)))
        self.literal_data.extend(data)
        return len(self.literals) - 1

    def header_size(self) -> int:
        return codec(GlobalMetadataHeader, self.version).size

    def build(self, **overrides) -> bytes:
        header_codec = codec(GlobalMetadataHeader, self.version)
        names = {m.name for m in header_codec.members}
        tables = {'stringLiteral': B''.join(codec(StringLiteral, self.version).pack(s) for s in self.literals)}
        tables.update(self.tables)
        tables['string'] = bytes(self.strings)
        tables['stringLiteralData'] = bytes(self.literal_data)
        values = dict(sanity=MAGIC, version=self.raw_version)
        body = bytearray()
        cursor = header_codec.size
        for name, data in tables.items():
            values[F'{name}Offset'] = cursor
            for suffix in ('Size', 'Count'):
                if F'{name}{suffix}' in names:
                    values[F'{name}{suffix}'] = len(data)
                    break
            else:
                raise KeyError(F'The header of version {self.version} has no field for the {name} table.')
            body.extend(data)
            cursor += len(data)
        values.update(overrides)
        header = header_codec.pack(GlobalMetadataHeader(**values))
        return header + bytes(body)


def metadata_header(version, **values) -> bytes:
    """
    Serialize only a header with the given field values.
    """
    version = Version.cast(version)
    values.setdefault('sanity', MAGIC)
    values.setdefault('version', version.major)
    return codec(GlobalMetadataHeader, version).pack(GlobalMetadataHeader(**values))


def pack(record: Record, version) -> bytes:
    return codec(type(record), Version.cast(version)).pack(record)
