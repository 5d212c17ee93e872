from il2cppmeta.lib.metadata.attributes import NOT_FOUND, CustomAttributeIndex
from il2cppmeta.lib.metadata.errors import InvalidFormat
from il2cppmeta.lib.metadata.records import CustomAttributeDataRange, CustomAttributeTypeRange, ImageDefinition
from il2cppmeta.lib.metadata.version import Version

from .. import TestBase


class TestCustomAttributeIndex(TestBase):

    def _data_ranges(self, *tokens):
        return [CustomAttributeDataRange(token=t, startOffset=4 * k) for k, t in enumerate(tokens)]

    def test_data_ranges(self):
        ranges = self._data_ranges(0xA, 0xB, 0xC, 0xD, 0xE, 0x06000001, 0x06000002, 0x06000003)
        images = [
            ImageDefinition(customAttributeStart=0, customAttributeCount=5),
            ImageDefinition(customAttributeStart=5, customAttributeCount=3),
        ]
        index = CustomAttributeIndex(Version(30), images, ranges)
        self.assertEqual(index.lookup(1, 99, 0x06000002), 6)
        self.assertEqual(index.lookup(1, 99, 0x06000004), NOT_FOUND)
        self.assertEqual(index.lookup(1, 99, 0xA), NOT_FOUND)
        self.assertEqual(index.lookup(0, 99, 0xA), 0)

    def test_type_ranges(self):
        ranges = [CustomAttributeTypeRange(token=0x02000000 + k, start=k, count=1) for k in range(4)]
        images = [ImageDefinition(customAttributeStart=1, customAttributeCount=3)]
        index = CustomAttributeIndex(Version(27), images, ranges)
        self.assertEqual(index.tokens, [{0x02000001: 1, 0x02000002: 2, 0x02000003: 3}])
        self.assertEqual(index.lookup(0, -1, 0x02000000), NOT_FOUND)

    def test_positional_before_v25(self):
        index = CustomAttributeIndex(Version(24, 4), [ImageDefinition(customAttributeStart=0, customAttributeCount=9)], [])
        self.assertFalse(index.by_token)
        self.assertEqual(index.lookup(0, 42, 0x06000001), 42)
        self.assertEqual(index.tokens, [])

    def test_image_range_exceeds_table(self):
        images = [ImageDefinition(customAttributeStart=2, customAttributeCount=3)]
        with self.assertRaises(InvalidFormat):
            CustomAttributeIndex(Version(29), images, self._data_ranges(1, 2, 3, 4))

    def test_duplicate_token(self):
        images = [ImageDefinition(customAttributeStart=0, customAttributeCount=2)]
        with self.assertRaises(InvalidFormat):
            CustomAttributeIndex(Version(29), images, self._data_ranges(7, 7))

    def test_same_token_in_different_images(self):
        images = [
            ImageDefinition(customAttributeStart=0, customAttributeCount=1),
            ImageDefinition(customAttributeStart=1, customAttributeCount=1),
        ]
        index = CustomAttributeIndex(Version(29), images, self._data_ranges(7, 7))
        self.assertEqual(index.lookup(0, 0, 7), 0)
        self.assertEqual(index.lookup(1, 0, 7), 1)
