"""
The decoded global metadata. Constructing a `il2cppmeta.lib.metadata.model.GlobalMetadata` from a
buffer resolves the schema version, then loads every table in dependency order: images before
types, types before the methods, fields, properties, events, nested types, interfaces and vtable
slots they own, and methods before parameters. The model is not modified after construction,
except for the caches of resolved strings.
"""
from __future__ import annotations

import codecs

from typing import Optional, Sequence, TypeVar

from il2cppmeta.lib.environment import logger
from il2cppmeta.lib.metadata.attributes import CustomAttributeIndex
from il2cppmeta.lib.metadata.errors import InvalidFormat, TruncatedData
from il2cppmeta.lib.metadata.layout import Record
from il2cppmeta.lib.metadata.records import (
    AssemblyDefinition,
    CustomAttributeDataRange,
    CustomAttributeTypeRange,
    EventDefinition,
    FieldDefaultValue,
    FieldDefinition,
    FieldRef,
    GenericContainer,
    GenericParameter,
    ImageDefinition,
    InterfaceOffsetPair,
    MetadataUsageList,
    MetadataUsagePair,
    MethodDefinition,
    ParameterDefaultValue,
    ParameterDefinition,
    PropertyDefinition,
    RGCTXDefinition,
    StringLiteral,
    TypeDefinition,
)
from il2cppmeta.lib.metadata.resolver import read_header, resolve
from il2cppmeta.lib.metadata.tables import TableLoader, bounded_count, implied_count
from il2cppmeta.lib.metadata.usage import MetadataUsages
from il2cppmeta.lib.metadata.version import Version
from il2cppmeta.lib.structures import EOF, StructReader
from il2cppmeta.lib.types import buf

_R = TypeVar('_R', bound=Record)

log = logger(__name__)


class GlobalMetadata:
    """
    Decodes a global metadata buffer. The constructor either produces a complete model or raises
    one of the exceptions from `il2cppmeta.lib.metadata.errors`. An instance is not safe for use
    from several threads at once, because string lookups share a cursor and a cache.
    """
    version: Version

    images: tuple[ImageDefinition, ...]
    assemblies: tuple[AssemblyDefinition, ...]
    type_definitions: tuple[TypeDefinition, ...]
    methods: tuple[MethodDefinition, ...]
    parameters: tuple[ParameterDefinition, ...]
    fields: tuple[FieldDefinition, ...]
    properties: tuple[PropertyDefinition, ...]
    events: tuple[EventDefinition, ...]
    nested_type_indices: tuple[int, ...]
    interface_indices: tuple[int, ...]
    interface_offsets: tuple[InterfaceOffsetPair, ...]
    vtable_methods: tuple[int, ...]
    generic_containers: tuple[GenericContainer, ...]
    generic_parameters: tuple[GenericParameter, ...]
    constraint_indices: tuple[int, ...]
    string_literals: tuple[StringLiteral, ...]
    field_refs: tuple[FieldRef, ...]
    referenced_assemblies: tuple[int, ...]
    exported_type_definitions: tuple[int, ...]
    attribute_type_ranges: tuple[CustomAttributeTypeRange, ...]
    attribute_types: tuple[int, ...]
    attribute_data_ranges: tuple[CustomAttributeDataRange, ...]
    rgctx_entries: tuple[RGCTXDefinition, ...]
    usages: Optional[MetadataUsages]

    def __init__(self, data: buf):
        view = memoryview(data)
        resolution = resolve(view)
        self.version = version = resolution.version
        self.header = header = read_header(view, version)
        self._reader = StructReader(view)
        self._strings: dict[int, str] = {}
        self._string_literals: dict[int, str] = {}

        tables = TableLoader(view, version)

        self.images = tables.load_sized(ImageDefinition, header.imagesOffset, header.imagesSize)
        self.assemblies = TableLoader(view, resolution.assembly_layout).load_sized(
            AssemblyDefinition, header.assembliesOffset, header.assembliesSize)

        self.type_definitions = self._load_owned(
            tables, TypeDefinition, header.typeDefinitionsOffset, header.typeDefinitionsSize,
            self.images, 'typeStart', 'typeCount')
        types = self.type_definitions

        self.methods = self._load_owned(
            tables, MethodDefinition, header.methodsOffset, header.methodsSize,
            types, 'methodStart', 'method_count')
        self.parameters = self._load_owned(
            tables, ParameterDefinition, header.parametersOffset, header.parametersSize,
            self.methods, 'parameterStart', 'parameterCount')
        self.fields = self._load_owned(
            tables, FieldDefinition, header.fieldsOffset, header.fieldsSize,
            types, 'fieldStart', 'field_count')

        self._field_default_values = self._index_by(tables.load_sized(
            FieldDefaultValue, header.fieldDefaultValuesOffset, header.fieldDefaultValuesSize), 'fieldIndex')
        self._parameter_default_values = self._index_by(tables.load_sized(
            ParameterDefaultValue, header.parameterDefaultValuesOffset, header.parameterDefaultValuesSize),
            'parameterIndex')

        self.properties = self._load_owned(
            tables, PropertyDefinition, header.propertiesOffset, header.propertiesSize,
            types, 'propertyStart', 'property_count')
        self.events = self._load_owned(
            tables, EventDefinition, header.eventsOffset, header.eventsSize,
            types, 'eventStart', 'event_count')

        self.nested_type_indices = self._load_owned_integers(
            tables, header.nestedTypesOffset, header.nestedTypesSize,
            types, 'nestedTypesStart', 'nested_type_count')
        self.interface_indices = self._load_owned_integers(
            tables, header.interfacesOffset, header.interfacesSize,
            types, 'interfacesStart', 'interfaces_count')
        self.interface_offsets = self._load_owned(
            tables, InterfaceOffsetPair, header.interfaceOffsetsOffset, header.interfaceOffsetsSize,
            types, 'interfaceOffsetsStart', 'interface_offsets_count')

        self.generic_containers = tables.load_sized(
            GenericContainer, header.genericContainersOffset, header.genericContainersSize)
        self.generic_parameters = tables.load_sized(
            GenericParameter, header.genericParametersOffset, header.genericParametersSize)
        self.constraint_indices = tables.load_integers(
            header.genericParameterConstraintsOffset,
            tables.capacity(4, header.genericParameterConstraintsSize))

        self.vtable_methods = self._load_owned_integers(
            tables, header.vtableMethodsOffset, header.vtableMethodsSize,
            types, 'vtableStart', 'vtable_count', signed=False)
        self.string_literals = tables.load_sized(
            StringLiteral, header.stringLiteralOffset, header.stringLiteralSize)

        self.field_refs = ()
        self.usages = None
        if version >= Version(19):
            self.field_refs = tables.load_sized(FieldRef, header.fieldRefsOffset, header.fieldRefsSize)
        if version < Version(27):
            usage_lists = usage_pairs = ()
            if version >= Version(19):
                usage_lists = tables.load_sized(
                    MetadataUsageList, header.metadataUsageListsOffset, header.metadataUsageListsCount)
                usage_pairs = tables.load_sized(
                    MetadataUsagePair, header.metadataUsagePairsOffset, header.metadataUsagePairsCount)
            self.usages = MetadataUsages(usage_lists, usage_pairs, version)
            log.debug(F'decoded {len(usage_pairs)} metadata usage pairs into {self.usages.count} slots')

        self.referenced_assemblies = ()
        if version >= Version(20):
            self.referenced_assemblies = tables.load_integers(
                header.referencedAssembliesOffset, tables.capacity(4, header.referencedAssembliesSize))

        self.exported_type_definitions = ()
        if version >= Version(24):
            self.exported_type_definitions = tables.load_integers(
                header.exportedTypeDefinitionsOffset, tables.capacity(4, header.exportedTypeDefinitionsSize))

        self.attribute_type_ranges = ()
        self.attribute_types = ()
        self.attribute_data_ranges = ()
        if Version(21) <= version < Version(29):
            self.attribute_type_ranges = tables.load_sized(
                CustomAttributeTypeRange, header.attributesInfoOffset, header.attributesInfoCount)
            self.attribute_types = tables.load_integers(
                header.attributeTypesOffset, tables.capacity(4, header.attributeTypesCount))
        if version >= Version(29):
            self.attribute_data_ranges = tables.load_sized(
                CustomAttributeDataRange, header.attributeDataRangeOffset, header.attributeDataRangeSize)
        self.attribute_index = CustomAttributeIndex(
            version, self.images, self.attribute_data_ranges or self.attribute_type_ranges)

        self.rgctx_entries = ()
        if version <= Version(24, 1):
            self.rgctx_entries = tables.load_sized(
                RGCTXDefinition, header.rgctxEntriesOffset, header.rgctxEntriesCount)

        log.debug(
            F'loaded {len(self.images)} images, {len(self.type_definitions)} types, '
            F'{len(self.methods)} methods, {len(self.fields)} fields')
        self._sealed = True

    def __setattr__(self, name, value):
        if self.__dict__.get('_sealed', False):
            raise AttributeError(F'cannot assign {name}; {self.__class__.__name__} is read-only')
        super().__setattr__(name, value)

    def __delattr__(self, name):
        if self.__dict__.get('_sealed', False):
            raise AttributeError(F'cannot delete {name}; {self.__class__.__name__} is read-only')
        super().__delattr__(name)

    def _load_owned(
        self,
        tables: TableLoader,
        record: type[_R],
        offset: int,
        size: int,
        owners: Sequence[Record],
        start: str,
        count: str,
    ) -> tuple[_R, ...]:
        capacity = tables.capacity(record, size)
        return tables.load(record, offset, self._bound(record.__name__, owners, start, count, capacity))

    def _load_owned_integers(
        self,
        tables: TableLoader,
        offset: int,
        size: int,
        owners: Sequence[Record],
        start: str,
        count: str,
        signed: bool = True,
    ) -> tuple[int, ...]:
        capacity = tables.capacity(4, size)
        return tables.load_integers(offset, self._bound(start, owners, start, count, capacity), signed)

    def _bound(self, what: str, owners: Sequence[Record], start: str, count: str, capacity: int) -> int:
        implied = implied_count(owners, start, count)
        if implied > capacity:
            log.warning(
                F'{what}: the ranges declared by the owning table imply {implied} records, but the '
                F'table only has room for {capacity}; truncating.')
        bound = bounded_count(owners, start, count, capacity)
        log.debug(F'{what}: reading {bound} records')
        return bound

    @staticmethod
    def _index_by(records: Sequence[_R], key: str) -> dict[int, _R]:
        index: dict[int, _R] = {}
        for record in records:
            k = getattr(record, key)
            if k in index:
                raise InvalidFormat(F'Metadata parsing failed: Duplicate {record.__class__.__name__} for index {k}.')
            index[k] = record
        return index

    @property
    def usage_count(self) -> int:
        """
        The number of addressable metadata usage slots; zero from version 27 onwards.
        """
        return 0 if self.usages is None else self.usages.count

    def usage(self, kind: int, destination: int) -> Optional[int]:
        """
        The decoded source index of the given usage slot, or `None` if there is none.
        """
        if self.usages is None:
            return None
        return self.usages.lookup(kind, destination)

    def field_default_value(self, index: int) -> Optional[FieldDefaultValue]:
        return self._field_default_values.get(index)

    def parameter_default_value(self, index: int) -> Optional[ParameterDefaultValue]:
        return self._parameter_default_values.get(index)

    def default_value_offset(self, index: int) -> int:
        """
        The buffer offset of the default value blob with the given data index.
        """
        return self.header.fieldAndParameterDefaultValueDataOffset + index

    def custom_attribute_index(self, image: int, fallback: int, token: int) -> int:
        """
        See `il2cppmeta.lib.metadata.attributes.CustomAttributeIndex.lookup`; the image is given
        by its position in `images`.
        """
        return self.attribute_index.lookup(image, fallback, token)

    def get_string(self, index: int) -> str:
        """
        Read the NUL-terminated identifier at the given index of the string region.
        """
        if (value := self._strings.get(index)) is None:
            offset = self.header.stringOffset + index
            reader = self._reader
            if offset < 0 or offset >= len(reader):
                raise TruncatedData(offset, 1, 0, 'string')
            with reader.detour(offset):
                try:
                    value = reader.read_c_string('utf8', 'replace')
                except EOF as E:
                    raise TruncatedData(offset, E.size, reader.remaining_bytes, 'string') from E
            self._strings[index] = value
        return value

    def get_string_literal(self, index: int) -> str:
        """
        Read the string literal with the given index.
        """
        if (value := self._string_literals.get(index)) is None:
            if index < 0:
                raise IndexError(F'String literal index {index} is negative.')
            literal = self.string_literals[index]
            offset = self.header.stringLiteralDataOffset + literal.dataIndex
            reader = self._reader
            if offset < 0 or offset + literal.length > len(reader):
                raise TruncatedData(offset, literal.length, len(reader) - max(offset, 0), 'string literal')
            with reader.detour(offset):
                value = codecs.decode(reader.read_exactly(literal.length), 'utf8', 'replace')
            self._string_literals[index] = value
        return value
