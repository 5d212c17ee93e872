"""
Schema versions of the global metadata format. Besides the integral versions 16 to 31, the format
has sub-variants of version 24 that are not stored in the file and have to be inferred; they are
represented by a nonzero minor number.
"""
from __future__ import annotations

from typing import NamedTuple, Union

MAGIC = 0xFAB11BAF
"""
The first four bytes of every global metadata buffer, read as a little endian integer.
"""

SANE_VERSIONS = range(16, 1001)
"""
Raw version integers outside this range mean that the buffer is not metadata at all.
"""

SUPPORTED_VERSIONS = range(16, 32)
"""
Raw version integers that can be decoded.
"""


class Version(NamedTuple):
    major: int
    minor: int = 0

    @classmethod
    def cast(cls, value: Union[Version, int, float, str]) -> Version:
        """
        Convert a number like `24.1` or a string like `'24.1'` into a version.
        """
        if isinstance(value, Version):
            return value
        if isinstance(value, int):
            return cls(value)
        major, _, minor = str(value).partition('.')
        return cls(int(major), int(minor or 0))

    def __str__(self):
        if not self.minor:
            return str(self.major)
        return F'{self.major}.{self.minor}'

    def __repr__(self):
        return F'v{self!s}'
