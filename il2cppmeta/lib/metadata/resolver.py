"""
Resolution of the schema version of a global metadata buffer. The raw version number in the
header does not identify the layout in all cases: there are several variants of version 24 that
share the number. They are told apart by testing hypotheses against the data, where the correct
hypothesis is the one whose implied layout is consistent with a value that is already trusted.

All functions in this module are pure functions of the buffer. The decoder calls
`il2cppmeta.lib.metadata.resolver.resolve` once and uses the frozen result for all reads.
"""
from __future__ import annotations

from typing import NamedTuple

from il2cppmeta.lib.environment import logger
from il2cppmeta.lib.metadata.errors import InvalidFormat, TruncatedData, UnsupportedVersion
from il2cppmeta.lib.metadata.layout import codec
from il2cppmeta.lib.metadata.records import AssemblyDefinition, GlobalMetadataHeader, ImageDefinition
from il2cppmeta.lib.metadata.tables import TableLoader
from il2cppmeta.lib.metadata.version import MAGIC, SANE_VERSIONS, SUPPORTED_VERSIONS, Version
from il2cppmeta.lib.structures import EOF, StructReader
from il2cppmeta.lib.types import buf

log = logger(__name__)

V24_2_STRING_LITERAL_OFFSET = 264
"""
In version 24.2, the RGCTX table was removed from the header. The string literal table directly
follows the header, so its offset equals the size of the shortened header.
"""

V24_0_IMAGE_TOKEN = 1
"""
In version 24.0, the token of every image is the same constant.
"""


class Resolution(NamedTuple):
    """
    The resolved schema version, and the version whose layout applies to the assembly table. The
    two only differ for a variant of version 24.1 that already uses the assembly layout of 24.4.
    """
    version: Version
    assembly_layout: Version


def read_version(data: buf) -> int:
    """
    Check the magic and return the raw version number.
    """
    reader = StructReader(memoryview(data))
    try:
        magic = reader.u32()
        if magic != MAGIC:
            raise InvalidFormat(F'Metadata parsing failed: Invalid magic {magic:#010x}.')
        version = reader.i32()
    except EOF as E:
        raise TruncatedData(reader.tell() - len(E.rest), E.size, len(E.rest), 'header') from E
    if version not in SANE_VERSIONS:
        raise InvalidFormat(F'Metadata parsing failed: Invalid version {version}.')
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersion(version)
    return version


def read_header(data: buf, version: Version) -> GlobalMetadataHeader:
    """
    Read the header under the given version hypothesis.
    """
    decoder = codec(GlobalMetadataHeader, version)
    view = memoryview(data)
    if len(view) < decoder.size:
        raise TruncatedData(0, decoder.size, len(view), F'header of version {version}')
    return decoder.unpack(decoder.struct.unpack_from(view, 0))


def read_images(data: buf, version: Version, header: GlobalMetadataHeader) -> tuple[ImageDefinition, ...]:
    return TableLoader(data, version).load_sized(ImageDefinition, header.imagesOffset, header.imagesSize)


def _resolve_v24(data: buf) -> Version:
    version = Version(24)
    header = read_header(data, version)
    if header.stringLiteralOffset == V24_2_STRING_LITERAL_OFFSET:
        return Version(24, 2)
    images = read_images(data, version, header)
    if any(image.token != V24_0_IMAGE_TOKEN for image in images):
        return Version(24, 1)
    return version


def _assembly_layout_v24_1(version: Version, size: int, count: int) -> Version:
    candidates = [Version(24, 4), version]
    widths = [codec(AssemblyDefinition, v).size for v in candidates]
    for candidate, width in zip(candidates, widths):
        if size == width * count:
            return candidate
    for candidate, width in zip(candidates, widths):
        if size // width == count:
            return candidate
    raise UnsupportedVersion(version,
        F'Metadata parsing failed: The assembly table of {size} bytes matches no known layout of '
        F'version {version} for {count} images.')


def resolve(data: buf) -> Resolution:
    """
    Determine the schema version of the given buffer.
    """
    raw = read_version(data)
    version = Version(raw)
    if raw == 24:
        version = _resolve_v24(data)
    header = read_header(data, version)
    assembly_layout = version
    if version.major == 24:
        images = read_images(data, version, header)
        size = header.assembliesSize
        if version == Version(24, 2) and size // codec(AssemblyDefinition, version).size < len(images):
            version = assembly_layout = Version(24, 4)
        elif version == Version(24, 1):
            assembly_layout = _assembly_layout_v24_1(version, size, len(images))
    log.info(F'resolved metadata version {version}')
    if assembly_layout != version:
        log.debug(F'reading assemblies with the layout of version {assembly_layout}')
    return Resolution(version, assembly_layout)
