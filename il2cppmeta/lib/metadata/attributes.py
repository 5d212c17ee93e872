"""
Lookup of custom attribute records by metadata token. Up to version 24, every definition stores the
index of its custom attribute record directly. Later versions instead give every image a range of
the attribute table, and the record belonging to a definition is found through its token. Before
version 29, that table holds `il2cppmeta.lib.metadata.records.CustomAttributeTypeRange` records;
from version 29 onwards, it holds `il2cppmeta.lib.metadata.records.CustomAttributeDataRange`
records.
"""
from __future__ import annotations

from typing import Sequence, Union

from il2cppmeta.lib.metadata.errors import InvalidFormat
from il2cppmeta.lib.metadata.records import (
    CustomAttributeDataRange,
    CustomAttributeTypeRange,
    ImageDefinition,
)
from il2cppmeta.lib.metadata.version import Version

NOT_FOUND = -1

AttributeRange = Union[CustomAttributeTypeRange, CustomAttributeDataRange]


class CustomAttributeIndex:
    """
    Maps, for every image, a token to the position of its attribute range record. Images are
    identified by their position in the image table.
    """
    def __init__(
        self,
        version: Version,
        images: Sequence[ImageDefinition],
        ranges: Sequence[AttributeRange],
    ):
        self.version = version
        self.tokens: list[dict[int, int]] = []
        if not self.by_token:
            return
        for position, image in enumerate(images):
            start = image.customAttributeStart
            end = start + image.customAttributeCount
            if start < 0 or end > len(ranges):
                raise InvalidFormat(
                    F'Image {position} declares custom attribute records {start} to {end}, but only '
                    F'{len(ranges)} are available.')
            mapping: dict[int, int] = {}
            for index in range(start, end):
                token = ranges[index].token
                if token in mapping:
                    raise InvalidFormat(
                        F'Image {position} declares the custom attribute token {token:#010x} twice.')
                mapping[token] = index
            self.tokens.append(mapping)

    @property
    def by_token(self) -> bool:
        return self.version > Version(24)

    def lookup(self, image: int, fallback: int, token: int) -> int:
        """
        Return the position of the attribute record for the given token in the given image. For
        versions up to 24, the fallback index is returned unchanged. The value
        `il2cppmeta.lib.metadata.attributes.NOT_FOUND` indicates that the token carries no
        attributes.
        """
        if not self.by_token:
            return fallback
        return self.tokens[image].get(token, NOT_FOUND)
