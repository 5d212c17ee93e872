"""
Exceptions raised while decoding a global metadata buffer. All of them are fatal for the decode
attempt that raised them; no partially decoded model is ever returned.
"""
from __future__ import annotations


class MetadataError(ValueError):
    def __init__(self, msg=None):
        ValueError.__init__(self, msg or 'Metadata parsing failed.')


class InvalidFormat(MetadataError):
    """
    The buffer is not global metadata: the magic does not match, the version is not sane, or the
    tables contradict each other.
    """
    def __init__(self, msg=None):
        super().__init__(msg or 'Metadata parsing failed: Invalid format.')


class UnsupportedVersion(MetadataError):
    """
    The buffer is well-formed metadata, but of a schema version that cannot be decoded.
    """
    def __init__(self, version, msg=None):
        super().__init__(msg or F'Metadata parsing failed: Unsupported version {version}.')
        self.version = version


class TruncatedData(MetadataError, EOFError):
    """
    A record or table extends beyond the end of the buffer.
    """
    def __init__(self, offset: int, size: int, available: int, what: str = 'data'):
        super().__init__(
            F'Metadata parsing failed: Reading {size} bytes of {what} at offset {offset:#010x} '
            F'exceeds the buffer, only {max(available, 0)} bytes are available.')
        self.offset = offset
        self.size = size
        self.available = available
