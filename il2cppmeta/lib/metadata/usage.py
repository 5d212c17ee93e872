"""
Decoding of metadata usages. Before schema version 27, every place in compiled code that needs a
runtime handle to a type, method, field or string literal refers to a usage slot, the destination
index. The metadata stores lists of pairs that map each destination index to an encoded source
index. The top three bits of the encoded value select the kind of the usage, the remaining bits
hold the index into the table of that kind.
"""
from __future__ import annotations

import enum

from typing import Iterable, Optional, Sequence

from il2cppmeta.lib.metadata.records import MetadataUsageList, MetadataUsagePair
from il2cppmeta.lib.metadata.version import Version


class MetadataUsage(enum.IntEnum):
    TypeInfo      = 1  # noqa
    Il2CppType    = 2  # noqa
    MethodDef     = 3  # noqa
    FieldInfo     = 4  # noqa
    StringLiteral = 5  # noqa
    MethodRef     = 6  # noqa


def usage_kind(encoded: int) -> int:
    return (encoded >> 29) & 0b111


def decoded_index(encoded: int, version: Version) -> int:
    """
    From version 27 onwards, the lowest bit of the encoded value is reserved and the index is
    stored shifted by one.
    """
    if version >= Version(27):
        return (encoded & 0x1FFFFFFE) >> 1
    return encoded & 0x1FFFFFFF


class MetadataUsages:
    """
    For each usage kind, a mapping from destination index to decoded source index, ordered by the
    destination index. The attribute `count` is the number of addressable usage slots.
    """
    kinds: dict[int, dict[int, int]]
    count: int

    def __init__(
        self,
        lists: Iterable[MetadataUsageList],
        pairs: Sequence[MetadataUsagePair],
        version: Version,
    ):
        kinds: dict[int, dict[int, int]] = {kind: {} for kind in MetadataUsage}
        limit = len(pairs)
        for usage_list in lists:
            start = usage_list.start
            end = min(start + usage_list.count, limit)
            for offset in range(max(start, 0), end):
                pair = pairs[offset]
                encoded = pair.encodedSourceIndex
                kind = usage_kind(encoded)
                kinds.setdefault(kind, {})[pair.destinationIndex] = decoded_index(encoded, version)
        self.kinds = {kind: dict(sorted(mapping.items())) for kind, mapping in kinds.items()}
        self.count = max((max(m) + 1 for m in self.kinds.values() if m), default=0)

    def __getitem__(self, kind: int) -> dict[int, int]:
        return self.kinds.get(kind, {})

    def __len__(self):
        return self.count

    def lookup(self, kind: int, destination: int) -> Optional[int]:
        """
        Return the decoded source index for the given usage slot, or `None` when this kind of usage
        has no entry for the slot.
        """
        return self[kind].get(destination)
