"""
The global metadata decoder. Decoding proceeds in one pass over the buffer:

1. `il2cppmeta.lib.metadata.resolver` determines the schema version, including the variants of
   version 24 that share one version number.
2. `il2cppmeta.lib.metadata.layout` computes the width of every record in
   `il2cppmeta.lib.metadata.records` for that version.
3. `il2cppmeta.lib.metadata.tables` loads the tables, bounding every table whose length is implied
   by the ranges of its owners.
4. `il2cppmeta.lib.metadata.usage` and `il2cppmeta.lib.metadata.attributes` build the indices for
   metadata usages and custom attributes.

The result is a `il2cppmeta.lib.metadata.model.GlobalMetadata`.
"""
from il2cppmeta.lib.metadata.errors import (
    InvalidFormat,
    MetadataError,
    TruncatedData,
    UnsupportedVersion,
)
from il2cppmeta.lib.metadata.model import GlobalMetadata
from il2cppmeta.lib.metadata.usage import MetadataUsage
from il2cppmeta.lib.metadata.version import Version

__all__ = [
    'GlobalMetadata',
    'InvalidFormat',
    'MetadataError',
    'MetadataUsage',
    'TruncatedData',
    'UnsupportedVersion',
    'Version',
]
