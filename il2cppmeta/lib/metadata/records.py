"""
Record definitions of the global metadata format. The member names follow the names used by the
runtime headers of the ahead-of-time compiler, which is also the naming used by most tooling that
works with these files. Every member carries the version interval in which it is present.
"""
from __future__ import annotations

import enum

from il2cppmeta.lib.metadata.layout import (
    EnumMember,
    InlineArray,
    Int16,
    Int32,
    Nested,
    Record,
    UInt8,
    UInt16,
    UInt32,
)


class GlobalMetadataHeader(Record):
    sanity = UInt32()
    version = Int32()
    stringLiteralOffset = UInt32()
    stringLiteralSize = Int32()
    stringLiteralDataOffset = UInt32()
    stringLiteralDataSize = Int32()
    stringOffset = UInt32()
    stringSize = Int32()
    eventsOffset = UInt32()
    eventsSize = Int32()
    propertiesOffset = UInt32()
    propertiesSize = Int32()
    methodsOffset = UInt32()
    methodsSize = Int32()
    parameterDefaultValuesOffset = UInt32()
    parameterDefaultValuesSize = Int32()
    fieldDefaultValuesOffset = UInt32()
    fieldDefaultValuesSize = Int32()
    fieldAndParameterDefaultValueDataOffset = UInt32()
    fieldAndParameterDefaultValueDataSize = Int32()
    fieldMarshaledSizesOffset = Int32()
    fieldMarshaledSizesSize = Int32()
    parametersOffset = UInt32()
    parametersSize = Int32()
    fieldsOffset = UInt32()
    fieldsSize = Int32()
    genericParametersOffset = UInt32()
    genericParametersSize = Int32()
    genericParameterConstraintsOffset = UInt32()
    genericParameterConstraintsSize = Int32()
    genericContainersOffset = UInt32()
    genericContainersSize = Int32()
    nestedTypesOffset = UInt32()
    nestedTypesSize = Int32()
    interfacesOffset = UInt32()
    interfacesSize = Int32()
    vtableMethodsOffset = UInt32()
    vtableMethodsSize = Int32()
    interfaceOffsetsOffset = Int32()
    interfaceOffsetsSize = Int32()
    typeDefinitionsOffset = UInt32()
    typeDefinitionsSize = Int32()
    rgctxEntriesOffset = UInt32(until=24.1)
    rgctxEntriesCount = Int32(until=24.1)
    imagesOffset = UInt32()
    imagesSize = Int32()
    assembliesOffset = UInt32()
    assembliesSize = Int32()
    metadataUsageListsOffset = UInt32(since=19, until=26)
    metadataUsageListsCount = Int32(since=19, until=26)
    metadataUsagePairsOffset = UInt32(since=19, until=26)
    metadataUsagePairsCount = Int32(since=19, until=26)
    fieldRefsOffset = UInt32(since=19)
    fieldRefsSize = Int32(since=19)
    referencedAssembliesOffset = Int32(since=20)
    referencedAssembliesSize = Int32(since=20)
    attributesInfoOffset = UInt32(since=21, until=28)
    attributesInfoCount = Int32(since=21, until=28)
    attributeTypesOffset = UInt32(since=21, until=28)
    attributeTypesCount = Int32(since=21, until=28)
    attributeDataOffset = UInt32(since=29)
    attributeDataSize = Int32(since=29)
    attributeDataRangeOffset = UInt32(since=29)
    attributeDataRangeSize = Int32(since=29)
    unresolvedVirtualCallParameterTypesOffset = Int32(since=22)
    unresolvedVirtualCallParameterTypesSize = Int32(since=22)
    unresolvedVirtualCallParameterRangesOffset = Int32(since=22)
    unresolvedVirtualCallParameterRangesSize = Int32(since=22)
    windowsRuntimeTypeNamesOffset = Int32(since=23)
    windowsRuntimeTypeNamesSize = Int32(since=23)
    windowsRuntimeStringsOffset = Int32(since=27)
    windowsRuntimeStringsSize = Int32(since=27)
    exportedTypeDefinitionsOffset = Int32(since=24)
    exportedTypeDefinitionsSize = Int32(since=24)


class ImageDefinition(Record):
    nameIndex = UInt32()
    assemblyIndex = Int32()
    typeStart = Int32()
    typeCount = UInt32()
    exportedTypeStart = Int32(since=24)
    exportedTypeCount = UInt32(since=24)
    entryPointIndex = Int32()
    token = UInt32(since=19)
    customAttributeStart = Int32(since=24.1)
    customAttributeCount = UInt32(since=24.1)


class AssemblyNameDefinition(Record):
    nameIndex = UInt32()
    cultureIndex = UInt32()
    hashValueIndex = Int32(until=24.3)
    publicKeyIndex = UInt32()
    hash_alg = UInt32()
    hash_len = Int32()
    flags = UInt32()
    major = Int32()
    minor = Int32()
    build = Int32()
    revision = Int32()
    public_key_token = InlineArray(UInt8, 8)


class AssemblyDefinition(Record):
    imageIndex = Int32()
    token = UInt32(since=24.1)
    customAttributeIndex = Int32(until=24)
    referencedAssemblyStart = Int32(since=20)
    referencedAssemblyCount = Int32(since=20)
    aname = Nested(AssemblyNameDefinition)


class TypeDefinition(Record):
    nameIndex = UInt32()
    namespaceIndex = UInt32()
    customAttributeIndex = Int32(until=24)
    byvalTypeIndex = Int32()
    byrefTypeIndex = Int32(until=24.5)
    declaringTypeIndex = Int32()
    parentIndex = Int32()
    elementTypeIndex = Int32()
    rgctxStartIndex = Int32(until=24.1)
    rgctxCount = Int32(until=24.1)
    genericContainerIndex = Int32()
    delegateWrapperFromManagedToNativeIndex = Int32(until=22)
    marshalingFunctionsIndex = Int32(until=22)
    ccwFunctionIndex = Int32(since=21, until=22)
    guidIndex = Int32(since=21, until=22)
    flags = UInt32()
    fieldStart = Int32()
    methodStart = Int32()
    eventStart = Int32()
    propertyStart = Int32()
    nestedTypesStart = Int32()
    interfacesStart = Int32()
    vtableStart = Int32()
    interfaceOffsetsStart = Int32()
    method_count = UInt16()
    property_count = UInt16()
    field_count = UInt16()
    event_count = UInt16()
    nested_type_count = UInt16()
    vtable_count = UInt16()
    interfaces_count = UInt16()
    interface_offsets_count = UInt16()
    bitfield = UInt32()
    token = UInt32(since=19)

    @property
    def is_value_type(self) -> bool:
        return bool(self.bitfield & 1)

    @property
    def is_enum(self) -> bool:
        return bool(self.bitfield >> 1 & 1)


class MethodDefinition(Record):
    nameIndex = UInt32()
    declaringType = Int32()
    returnType = Int32()
    returnParameterToken = Int32(since=31)
    parameterStart = Int32()
    customAttributeIndex = Int32(until=24)
    genericContainerIndex = Int32()
    methodIndex = Int32(until=24.1)
    invokerIndex = Int32(until=24.1)
    delegateWrapperIndex = Int32(until=24.1)
    rgctxStartIndex = Int32(until=24.1)
    rgctxCount = Int32(until=24.1)
    token = UInt32()
    flags = UInt16()
    iflags = UInt16()
    slot = UInt16()
    parameterCount = UInt16()


class ParameterDefinition(Record):
    nameIndex = Int32()
    token = UInt32()
    customAttributeIndex = Int32(until=24)
    typeIndex = Int32()


class FieldDefinition(Record):
    nameIndex = Int32()
    typeIndex = Int32()
    customAttributeIndex = Int32(until=24)
    token = UInt32(since=19)


class FieldDefaultValue(Record):
    fieldIndex = Int32()
    typeIndex = Int32()
    dataIndex = Int32()


class ParameterDefaultValue(Record):
    parameterIndex = Int32()
    typeIndex = Int32()
    dataIndex = Int32()


class PropertyDefinition(Record):
    nameIndex = Int32()
    get = Int32()
    set = Int32()
    attrs = UInt32()
    customAttributeIndex = Int32(until=24)
    token = UInt32(since=19)


class EventDefinition(Record):
    nameIndex = Int32()
    typeIndex = Int32()
    add = Int32()
    remove = Int32()
    raise_ = Int32()
    customAttributeIndex = Int32(until=24)
    token = UInt32(since=19)


class GenericContainer(Record):
    ownerIndex = Int32()
    type_argc = Int32()
    is_method = Int32()
    genericParameterStart = Int32()


class GenericParameter(Record):
    ownerIndex = Int32()
    nameIndex = UInt32()
    constraintsStart = Int16()
    constraintsCount = Int16()
    num = UInt16()
    flags = UInt16()


class CustomAttributeTypeRange(Record):
    token = UInt32(since=24.1)
    start = Int32()
    count = Int32()


class CustomAttributeDataRange(Record):
    token = UInt32()
    startOffset = UInt32()


class MetadataUsageList(Record):
    start = UInt32()
    count = UInt32()


class MetadataUsagePair(Record):
    destinationIndex = UInt32()
    encodedSourceIndex = UInt32()


class StringLiteral(Record):
    length = UInt32()
    dataIndex = Int32()


class FieldRef(Record):
    typeIndex = Int32()
    fieldIndex = Int32()


class InterfaceOffsetPair(Record):
    interfaceTypeIndex = Int32()
    offset = Int32()


class RGCTXDataType(enum.IntEnum):
    Invalid = 0
    Type = 1
    Class = 2
    Method = 3
    Array = 4


class RGCTXDefinition(Record):
    type = EnumMember(RGCTXDataType)
    data = Int32()
