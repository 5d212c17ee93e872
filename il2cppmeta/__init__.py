R"""
A decoder for the global metadata produced by the ahead-of-time compiler of a managed runtime:
the serialized tables of every image, assembly, type, method, field, property, event, generic
container and string literal of the compiled program. The decoder takes a byte buffer and either
produces a fully resolved, read-only `il2cppmeta.lib.metadata.model.GlobalMetadata` or fails with
one of the exceptions from `il2cppmeta.lib.metadata.errors`:

    from il2cppmeta import GlobalMetadata

    with open('global-metadata.dat', 'rb') as stream:
        metadata = GlobalMetadata(stream.read())

    for image in metadata.images:
        print(metadata.get_string(image.nameIndex))

The library modules are:

1. `il2cppmeta.lib.structures`: a positioned reader over in-memory buffers
2. `il2cppmeta.lib.environment`: logging and configuration via environment variables
3. `il2cppmeta.lib.metadata`: version resolution, record layouts and table loading
"""
from __future__ import annotations

__version__ = '0.1.0'
__distribution__ = 'il2cpp-metadata'

from il2cppmeta.lib.metadata import (
    GlobalMetadata,
    InvalidFormat,
    MetadataError,
    TruncatedData,
    UnsupportedVersion,
    Version,
)

__all__ = [
    'GlobalMetadata',
    'InvalidFormat',
    'MetadataError',
    'TruncatedData',
    'UnsupportedVersion',
    'Version',
]
