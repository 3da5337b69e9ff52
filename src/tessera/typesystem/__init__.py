"""Resource type catalog and body schemas."""

from tessera.typesystem.catalog import (
    ResourceSchema,
    TypeDescriptor,
    TypeProvider,
    api_version_key,
    match_type,
    split_type_reference,
)
from tessera.typesystem.schema import (
    ArrayType,
    ObjectType,
    PrimitiveType,
    PropertyFlag,
    TypeDefinitions,
    TypeProperty,
)

__all__ = [
    "ArrayType",
    "ObjectType",
    "PrimitiveType",
    "PropertyFlag",
    "ResourceSchema",
    "TypeDefinitions",
    "TypeDescriptor",
    "TypeProperty",
    "TypeProvider",
    "api_version_key",
    "match_type",
    "split_type_reference",
]
