import struct

from il2cppmeta.lib.metadata.errors import InvalidFormat, MetadataError, TruncatedData, UnsupportedVersion
from il2cppmeta.lib.metadata.records import AssemblyDefinition, AssemblyNameDefinition, ImageDefinition
from il2cppmeta.lib.metadata.resolver import Resolution, read_version, resolve
from il2cppmeta.lib.metadata.version import MAGIC, Version

from .. import TestBase
from .metadata_builder import MetadataBuilder


def _image(token: int, **kwargs):
    return ImageDefinition(token=token, **kwargs)


def _assembly(index: int):
    return AssemblyDefinition(imageIndex=index, token=0x20000001, aname=AssemblyNameDefinition())


class TestVersion(TestBase):

    def test_ordering(self):
        ordered = [Version(16), Version(24), Version(24, 1), Version(24, 2), Version(24, 4), Version(27), Version(31)]
        self.assertEqual(sorted(reversed(ordered)), ordered)

    def test_cast(self):
        self.assertEqual(Version.cast(24.1), Version(24, 1))
        self.assertEqual(Version.cast('24.4'), Version(24, 4))
        self.assertEqual(Version.cast(29), Version(29))
        self.assertEqual(Version.cast(Version(24, 2)), Version(24, 2))

    def test_rendering(self):
        self.assertEqual(str(Version(24)), '24')
        self.assertEqual(str(Version(24, 1)), '24.1')
        self.assertEqual(repr(Version(27)), 'v27')


class TestVersionErrors(TestBase):

    def _prefix(self, version: int, magic: int = MAGIC):
        return struct.pack('<Ii', magic, version) + bytes(0x200)

    def test_wrong_magic(self):
        with self.assertRaises(InvalidFormat):
            read_version(self._prefix(24, magic=0xDEADBEEF))

    def test_insane_versions(self):
        for version in (-1, 0, 5, 15, 1001, 9999):
            with self.assertRaises(InvalidFormat, msg=F'version {version}'):
                read_version(self._prefix(version))

    def test_unsupported_versions(self):
        for version in (32, 50, 1000):
            with self.assertRaises(UnsupportedVersion) as context:
                read_version(self._prefix(version))
            self.assertEqual(context.exception.version, version)

    def test_supported_versions(self):
        for version in range(16, 32):
            self.assertEqual(read_version(self._prefix(version)), version)

    def test_error_hierarchy(self):
        self.assertTrue(issubclass(InvalidFormat, MetadataError))
        self.assertTrue(issubclass(UnsupportedVersion, ValueError))
        self.assertTrue(issubclass(TruncatedData, EOFError))

    def test_truncated_prefix(self):
        with self.assertRaises(TruncatedData) as context:
            read_version(struct.pack('<I', MAGIC) + B'\x18\x00')
        self.assertEqual(context.exception.offset, 4)
        self.assertEqual(context.exception.available, 2)

    def test_empty_buffer(self):
        self.assertRaises(TruncatedData, read_version, B'')

    def test_truncated_header(self):
        data = MetadataBuilder(27).build()[:0x80]
        self.assertRaises(TruncatedData, resolve, data)


class TestVersionResolution(TestBase):

    def test_plain_versions_resolve_to_themselves(self):
        for version in (16, 19, 21, 23, 27, 29, 31):
            data = MetadataBuilder(version).build()
            self.assertEqual(resolve(data), Resolution(Version(version), Version(version)))

    def test_v24_0(self):
        builder = MetadataBuilder(24)
        builder.add_records('images', [_image(1), _image(1)])
        self.assertEqual(resolve(builder.build()).version, Version(24))

    def test_v24_0_without_images(self):
        self.assertEqual(resolve(MetadataBuilder(24).build()).version, Version(24))

    def test_v24_1(self):
        builder = MetadataBuilder(24.1, raw_version=24)
        builder.add_records('images', [_image(0x10), _image(0x20)])
        builder.add_records('assemblies', [_assembly(0), _assembly(1)])
        self.assertEqual(resolve(builder.build()), Resolution(Version(24, 1), Version(24, 1)))

    def test_v24_1_with_short_assemblies(self):
        builder = MetadataBuilder(24.1, raw_version=24)
        builder.add_records('images', [_image(0x10), _image(0x20)])
        builder.add_records('assemblies', [_assembly(0), _assembly(1)], layout=24.4)
        self.assertEqual(resolve(builder.build()), Resolution(Version(24, 1), Version(24, 4)))

    def test_v24_1_with_unknown_assembly_layout(self):
        builder = MetadataBuilder(24.1, raw_version=24)
        builder.add_records('images', [_image(0x10), _image(0x20)])
        builder.add_raw('assemblies', bytes(100))
        self.assertRaises(UnsupportedVersion, resolve, builder.build())

    def test_v24_2(self):
        builder = MetadataBuilder(24.2, raw_version=24)
        builder.add_records('images', [_image(0x10)])
        builder.add_records('assemblies', [_assembly(0)])
        self.assertEqual(builder.build()[8:12], struct.pack('<I', 264))
        self.assertEqual(resolve(builder.build()), Resolution(Version(24, 2), Version(24, 2)))

    def test_v24_4(self):
        builder = MetadataBuilder(24.4, raw_version=24)
        builder.add_records('images', [_image(0x10), _image(0x20), _image(0x30)])
        builder.add_records('assemblies', [_assembly(0), _assembly(1), _assembly(2)])
        self.assertEqual(resolve(builder.build()), Resolution(Version(24, 4), Version(24, 4)))

    def test_resolution_is_deterministic(self):
        builder = MetadataBuilder(24.4, raw_version=24)
        builder.add_records('images', [_image(0x10), _image(0x20), _image(0x30)])
        builder.add_records('assemblies', [_assembly(0), _assembly(1), _assembly(2)])
        data = builder.build()
        self.assertEqual(resolve(data), resolve(bytearray(data)))
